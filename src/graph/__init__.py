"""Immutable package graph model and its JSON loader."""

from .loader import load_package_set, load_platform, parse_dep_spec, parse_manifest, parse_package
from .models import Dependency, DepKind, DepSpec, Manifest, Package, PackageId, PackageSet, TargetDeps

__all__ = [
    "Dependency",
    "DepKind",
    "DepSpec",
    "Manifest",
    "Package",
    "PackageId",
    "PackageSet",
    "TargetDeps",
    "load_package_set",
    "load_platform",
    "parse_dep_spec",
    "parse_manifest",
    "parse_package",
]
