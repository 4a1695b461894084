"""Resolve request documents end to end."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from graph.loader import load_package_set, load_platform, validate_resolve_request

from .fixpoint import FixpointResolver
from .models import PackageRequest

logger = logging.getLogger(__name__)


def parse_initial_requests(raw: List[Mapping[str, Any]]) -> List[PackageRequest]:
    return [
        PackageRequest(
            package_id=item["package-id"],
            features=tuple(item.get("features", ())),
            use_dev_deps=bool(item.get("use-dev-dependencies", False)),
        )
        for item in raw
    ]


def resolve_document(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Run the fixpoint resolver on a request document.

    Args:
        raw: Document with ``buildPlatform``, ``hostPlatform``, ``packages``
            and ``initial``.

    Returns:
        Response mapping with ``dependencies``, ``buildDependencies``,
        ``devDependencies`` and ``features``.

    Raises:
        GraphLoadError: If the document is malformed.
        PlatformParseError: If a platform descriptor is malformed.
    """
    validate_resolve_request(raw)
    build_platform = load_platform(raw["buildPlatform"])
    host_platform = load_platform(raw["hostPlatform"])
    packages = load_package_set(raw["packages"])
    requests = parse_initial_requests(raw["initial"])
    logger.info(
        "Resolving %d initial request(s) over %d packages (build=%s, host=%s)",
        len(requests),
        len(packages),
        build_platform.config if build_platform else None,
        host_platform.config if host_platform else None,
    )
    resolution = FixpointResolver(packages, build_platform, host_platform).resolve(requests)
    return resolution.to_response()
