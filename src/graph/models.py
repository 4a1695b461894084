"""Data models for the package graph.

Everything here is immutable once built: the resolver and the condition
engine only read the graph and produce new derived maps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from constants import DepKinds

# Package ids are opaque strings, e.g. "serde 1.0.130 (registry+https://...)".
PackageId = str


class DepKind(Enum):
    """Dependency kind; declaration order is the iteration order."""

    NORMAL = DepKinds.NORMAL.value
    BUILD = DepKinds.BUILD.value
    DEV = DepKinds.DEV.value

    @property
    def short_name(self) -> str:
        return self.name.lower()

    def __lt__(self, other: "DepKind") -> bool:
        if not isinstance(other, DepKind):
            return NotImplemented
        order = list(DepKind)
        return order.index(self) < order.index(other)


@dataclass(frozen=True)
class DepSpec:
    """One dependency declaration as written in a manifest."""

    name: str  # name in the manifest (toml name)
    optional: bool = False
    features: Tuple[str, ...] = ()
    default_features: bool = True


DepSpecMap = Mapping[str, DepSpec]


@dataclass(frozen=True)
class TargetDeps:
    """Per-kind dependency declarations under one platform predicate key."""

    dependencies: Dict[str, DepSpec] = field(default_factory=dict)
    build_dependencies: Dict[str, DepSpec] = field(default_factory=dict)
    dev_dependencies: Dict[str, DepSpec] = field(default_factory=dict)

    def of_kind(self, kind: DepKind) -> DepSpecMap:
        if kind is DepKind.NORMAL:
            return self.dependencies
        if kind is DepKind.BUILD:
            return self.build_dependencies
        return self.dev_dependencies


@dataclass(frozen=True)
class Manifest:
    """The parts of a package manifest that drive feature resolution."""

    proc_macro: bool = False
    dependencies: Dict[str, DepSpec] = field(default_factory=dict)
    build_dependencies: Dict[str, DepSpec] = field(default_factory=dict)
    dev_dependencies: Dict[str, DepSpec] = field(default_factory=dict)
    target: Dict[str, TargetDeps] = field(default_factory=dict)
    features: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    def of_kind(self, kind: DepKind) -> DepSpecMap:
        if kind is DepKind.NORMAL:
            return self.dependencies
        if kind is DepKind.BUILD:
            return self.build_dependencies
        return self.dev_dependencies

    def iter_all_specs(self) -> Iterator[Tuple[Optional[str], DepKind, DepSpec]]:
        """Yield ``(predicate key or None, kind, spec)`` for every declaration."""
        for kind in DepKind:
            for spec in self.of_kind(kind).values():
                yield None, kind, spec
        for key in sorted(self.target):
            block = self.target[key]
            for kind in DepKind:
                for spec in block.of_kind(kind).values():
                    yield key, kind, spec


@dataclass(frozen=True)
class Dependency:
    """Alias entry: a dependency package and the manifest names it goes by."""

    package_id: PackageId
    toml_names: Tuple[str, ...]


@dataclass(frozen=True)
class Package:
    """A package of the already-resolved graph."""

    package_id: PackageId
    name: str
    manifest: Manifest
    dependencies: Tuple[Dependency, ...] = ()
    version: Optional[str] = None
    checksum: Optional[str] = None
    source: Optional[Dict[str, str]] = None

    @property
    def is_proc_macro(self) -> bool:
        return self.manifest.proc_macro

    def aliases(self) -> Dict[str, PackageId]:
        """Map every manifest name to the package id it resolves to."""
        out: Dict[str, PackageId] = {}
        for dep in self.dependencies:
            for toml_name in dep.toml_names:
                out[toml_name] = dep.package_id
        return out

    def optional_dependency_names(self) -> List[str]:
        names = {spec.name for _, _, spec in self.manifest.iter_all_specs() if spec.optional}
        return sorted(names)


class PackageSet:
    """Arena of packages addressed by id.

    Lookups of unknown ids return None; the graph may be a pre-filtered
    subset and callers skip what is missing.
    """

    def __init__(self, packages: Mapping[PackageId, Package]):
        self._packages: Dict[PackageId, Package] = dict(sorted(packages.items()))
        self._aliases: Dict[PackageId, Dict[str, PackageId]] = {
            pid: pkg.aliases() for pid, pkg in self._packages.items()
        }

    def __contains__(self, package_id: object) -> bool:
        return package_id in self._packages

    def __iter__(self) -> Iterator[PackageId]:
        return iter(self._packages)

    def __len__(self) -> int:
        return len(self._packages)

    def get(self, package_id: PackageId) -> Optional[Package]:
        return self._packages.get(package_id)

    def __getitem__(self, package_id: PackageId) -> Package:
        return self._packages[package_id]

    def items(self):
        return self._packages.items()

    def resolve_alias(self, package_id: PackageId, toml_name: str) -> Optional[PackageId]:
        """Return the id a manifest name of *package_id* points to, if known."""
        return self._aliases.get(package_id, {}).get(toml_name)

    def has_alias(self, package_id: PackageId, toml_name: str) -> bool:
        return toml_name in self._aliases.get(package_id, {})

    def is_proc_macro(self, package_id: PackageId) -> bool:
        pkg = self._packages.get(package_id)
        return pkg is not None and pkg.is_proc_macro
