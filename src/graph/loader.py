"""Build the immutable package graph from JSON documents.

The documents are produced by the tooling that already resolved and
materialized the package set; this module only validates and converts.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Union

from cfg.target import Platform
from common.schema import validate_document
from errors import GraphLoadError

from .models import Dependency, DepSpec, Manifest, Package, PackageId, PackageSet, TargetDeps
from .schema import PACKAGE_SET_SCHEMA, RESOLVE_REQUEST_SCHEMA, WORKSPACE_SCHEMA

logger = logging.getLogger(__name__)


def load_json_file(path: str) -> Dict[str, Any]:
    """Read a JSON document.

    Args:
        path: File path.

    Returns:
        The decoded document.

    Raises:
        GraphLoadError: If the file is not valid JSON.
        OSError: If the file cannot be read.
    """
    with open(path, "r", encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as e:
            raise GraphLoadError(f"{path} is not valid JSON: {e}") from e
        except UnicodeDecodeError as e:
            raise GraphLoadError(f"{path} is not UTF-8 encoded: {e}") from e
    if not isinstance(data, dict):
        raise GraphLoadError(f"{path}: top-level JSON value must be an object")
    return data


def parse_dep_spec(name: str, raw: Union[str, Mapping[str, Any]]) -> DepSpec:
    """Convert a manifest dependency entry; a bare version string means defaults."""
    if isinstance(raw, str):
        return DepSpec(name=name)
    default_features = raw.get("default-features", raw.get("default_features", True))
    return DepSpec(
        name=name,
        optional=bool(raw.get("optional", False)),
        features=tuple(raw.get("features", ())),
        default_features=bool(default_features),
    )


def _dep_spec_map(raw: Optional[Mapping[str, Any]]) -> Dict[str, DepSpec]:
    if not raw:
        return {}
    return {name: parse_dep_spec(name, value) for name, value in sorted(raw.items())}


def parse_manifest(raw: Mapping[str, Any]) -> Manifest:
    lib = raw.get("lib") or {}
    proc_macro = bool(lib.get("proc-macro", lib.get("proc_macro", False)))
    target = {
        key: TargetDeps(
            dependencies=_dep_spec_map(block.get("dependencies")),
            build_dependencies=_dep_spec_map(block.get("build-dependencies")),
            dev_dependencies=_dep_spec_map(block.get("dev-dependencies")),
        )
        for key, block in sorted((raw.get("target") or {}).items())
    }
    features = {
        name: tuple(implied)
        for name, implied in sorted((raw.get("features") or {}).items())
    }
    return Manifest(
        proc_macro=proc_macro,
        dependencies=_dep_spec_map(raw.get("dependencies")),
        build_dependencies=_dep_spec_map(raw.get("build-dependencies")),
        dev_dependencies=_dep_spec_map(raw.get("dev-dependencies")),
        target=target,
        features=features,
    )


def parse_package(package_id: PackageId, raw: Mapping[str, Any]) -> Package:
    parts = package_id.split(" ")
    return Package(
        package_id=package_id,
        name=raw.get("name") or parts[0],
        version=raw.get("version") or (parts[1] if len(parts) > 1 else None),
        manifest=parse_manifest(raw["cargo-manifest"]),
        dependencies=tuple(
            Dependency(package_id=d["package-id"], toml_names=tuple(d["toml-names"]))
            for d in raw.get("dependencies", ())
        ),
        checksum=raw.get("checksum"),
        source=raw.get("source"),
    )


def load_package_set(raw: Mapping[str, Any]) -> PackageSet:
    """Validate and convert a ``package-id -> package`` mapping.

    Raises:
        GraphLoadError: If the mapping does not match the package set schema.
    """
    validate_document(PACKAGE_SET_SCHEMA, raw, GraphLoadError, what="package set")
    packages = {pid: parse_package(pid, body) for pid, body in raw.items()}
    logger.debug("Loaded %d packages", len(packages))
    return PackageSet(packages)


def load_platform(raw: Union[str, Mapping[str, Any], None]) -> Optional[Platform]:
    """Interpret a platform reference: a raw descriptor, a target triple or None."""
    if raw is None:
        return None
    if isinstance(raw, str):
        return Platform.from_triple(raw)
    return Platform.from_raw(raw)


def validate_resolve_request(raw: Mapping[str, Any]) -> None:
    validate_document(RESOLVE_REQUEST_SCHEMA, raw, GraphLoadError, what="resolve request")


def validate_workspace(raw: Mapping[str, Any]) -> None:
    validate_document(WORKSPACE_SCHEMA, raw, GraphLoadError, what="workspace")
