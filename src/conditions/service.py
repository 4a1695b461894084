"""Build plans from workspace documents end to end."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from constants import Constants
from graph.loader import load_package_set, load_platform, validate_workspace

from .engine import ConditionEngine

logger = logging.getLogger(__name__)


def plan_document(
    raw: Mapping[str, Any],
    root_features_var: Optional[str] = None,
    prefetch: bool = False,
    build_platform: Any = None,
    host_platform: Any = None,
) -> Dict[str, Any]:
    """Run the condition engine on a workspace document.

    Args:
        raw: Document with ``roots``, ``packages`` and optional
            ``buildPlatform``/``hostPlatform``.
        root_features_var: Overrides the root-features variable name.
        prefetch: Compute missing git checksums.
        build_platform: Platform reference used when the document has none.
        host_platform: Platform reference used when the document has none.

    Returns:
        The build plan produced by :meth:`ConditionEngine.plan`.

    Raises:
        GraphLoadError: If the document is malformed or a root is unknown.
        PlatformParseError: If a platform reference is malformed.
        PrefetchError: If a checksum cannot be computed.
    """
    validate_workspace(raw)
    packages = load_package_set(raw["packages"])
    engine = ConditionEngine(
        packages,
        raw["roots"],
        build_platform=load_platform(raw.get("buildPlatform", build_platform)),
        host_platform=load_platform(raw.get("hostPlatform", host_platform)),
        root_features_var=root_features_var or Constants.ROOT_FEATURES_VAR,
    )
    logger.info("Planning %d root(s) over %d packages", len(engine.roots), len(packages))
    return engine.plan(prefetch=prefetch)
