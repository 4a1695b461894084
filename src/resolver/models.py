"""Data models for the fixpoint activation resolver."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

from graph.models import DepKind, PackageId


class Role(Enum):
    """Which platform a package instance is built for."""

    HOST = "host"
    BUILD = "build"

    def to_build(self) -> "Role":
        """Shift to Build; Build stays Build."""
        return Role.BUILD

    def to_host(self) -> "Role":
        """Identity shift: nothing ever moves from Build back to Host."""
        return self


@dataclass(frozen=True)
class PackageRequest:
    """Initial activation request for one package."""

    package_id: PackageId
    features: Tuple[str, ...] = ()
    use_dev_deps: bool = False
    role: Role = Role.HOST


@dataclass(frozen=True)
class EnablePackage:
    """Worklist item: activate a package's unconditional dependencies."""

    package_id: PackageId
    role: Role
    use_dev_deps: bool


@dataclass(frozen=True)
class EnableFeature:
    """Worklist item: enable one feature (or optional dependency) of a package."""

    package_id: PackageId
    role: Role
    feature: str


ModifyRequest = Union[EnablePackage, EnableFeature]


@dataclass
class DependingOn:
    """Dependencies of one package, split by the role they are built for."""

    build: Set[PackageId] = field(default_factory=set)
    host: Set[PackageId] = field(default_factory=set)

    def for_role(self, role: Role) -> Set[PackageId]:
        return self.build if role is Role.BUILD else self.host


@dataclass
class Resolution:
    """Outcome of one resolver run.

    ``depending_on[kind][p]`` lists what ``p`` depends on, per role;
    ``features[p]`` is the set of enabled feature names of ``p``.
    """

    build_config: str
    host_config: str
    depending_on: Dict[DepKind, Dict[PackageId, DependingOn]] = field(
        default_factory=lambda: {kind: {} for kind in DepKind}
    )
    features: Dict[PackageId, Set[str]] = field(default_factory=dict)

    def iter_edges(self, kind: Optional[DepKind] = None) -> Iterator[Tuple[DepKind, PackageId, Role, PackageId]]:
        """Yield ``(kind, package, role, dependency)`` in sorted order."""
        kinds = [kind] if kind is not None else list(DepKind)
        for k in kinds:
            for package_id in sorted(self.depending_on[k]):
                entry = self.depending_on[k][package_id]
                for role in (Role.BUILD, Role.HOST):
                    for dep_id in sorted(entry.for_role(role)):
                        yield k, package_id, role, dep_id

    def depends_on(self, package_id: PackageId, dep_id: PackageId,
                   kind: DepKind = DepKind.NORMAL, role: Optional[Role] = None) -> bool:
        entry = self.depending_on[kind].get(package_id)
        if entry is None:
            return False
        if role is None:
            return dep_id in entry.host or dep_id in entry.build
        return dep_id in entry.for_role(role)

    def enabled_features(self, package_id: PackageId) -> Set[str]:
        return self.features.get(package_id, set())

    def touched_packages(self) -> List[PackageId]:
        touched = set(self.features)
        for _, package_id, _, dep_id in self.iter_edges():
            touched.add(package_id)
            touched.add(dep_id)
        return sorted(touched)

    def _graph(self, kind: DepKind) -> Dict[PackageId, Dict[str, List[PackageId]]]:
        out: Dict[PackageId, Dict[str, List[PackageId]]] = {}
        for package_id in sorted(self.depending_on[kind]):
            entry = self.depending_on[kind][package_id]
            per_config: Dict[str, Set[PackageId]] = {}
            # Same config for both roles (native build): union the sets.
            per_config.setdefault(self.build_config, set()).update(entry.build)
            per_config.setdefault(self.host_config, set()).update(entry.host)
            out[package_id] = {cfg: sorted(ids) for cfg, ids in sorted(per_config.items()) if ids}
        return out

    def to_response(self) -> Dict[str, Dict]:
        """Serializable response with deterministically ordered containers.

        A config key appears under a package only when that role has at least
        one dependency; a package with no edges for a kind is left out of that
        kind's map.
        """
        return {
            "dependencies": self._graph(DepKind.NORMAL),
            "buildDependencies": self._graph(DepKind.BUILD),
            "devDependencies": self._graph(DepKind.DEV),
            "features": {pid: sorted(feats) for pid, feats in sorted(self.features.items())},
        }
