"""Activation conditions of dependency edges and features for a workspace.

The engine drives the fixpoint resolver several times per root package:

1. one full resolution of every root with every feature and dev
   dependencies, which fixes the universe of items;
2. per root, an unconditional resolution (no features, no defaults) whose
   touched items are attributed to the root via ``required_by``;
3. per root and per feature (declared features, optional dependency names
   and ``default``), a resolution with exactly that feature whose touched
   items gain ``(root, feature)`` in ``activated_by``.

Afterwards :meth:`ConditionEngine.simplify` promotes what every root needs,
forces dev edges to required and collapses packages whose items all carry
the same condition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from cfg.target import Platform
from common.logging_utils import Timer, extra_context, is_debug_enabled
from common.prefetch import prefetch_git
from constants import Constants
from errors import GraphLoadError, PrefetchError
from graph.models import DepKind, Package, PackageId, PackageSet
from resolver.fixpoint import FixpointResolver
from resolver.models import PackageRequest, Resolution

from .optionality import ItemOptionality

logger = logging.getLogger(__name__)

DepKey = Tuple[PackageId, DepKind]


def all_features(package: Package) -> List[str]:
    """Features a root can be asked for, one resolution each.

    Declared features, then optional dependency names, then the implicit
    ``default`` when the manifest does not declare it.
    """
    declared = list(package.manifest.features)
    features = declared + [name for name in package.optional_dependency_names() if name not in declared]
    if Constants.DEFAULT_FEATURE not in package.manifest.features:
        features.append(Constants.DEFAULT_FEATURE)
    return features


def all_eq(items: Sequence[ItemOptionality]) -> bool:
    return all(item == items[0] for item in items[1:])


@dataclass
class ResolvedDependency:
    """One ``(dependency, kind)`` edge of a package and its condition."""

    package_id: PackageId
    kind: DepKind
    name: str
    optionality: ItemOptionality = field(default_factory=ItemOptionality)
    # None when declared unconditionally, else the predicate keys it is declared under
    platforms: Optional[List[str]] = None


@dataclass
class ResolvedPackage:
    package: Package
    deps: Dict[DepKey, ResolvedDependency] = field(default_factory=dict)
    features: Dict[str, ItemOptionality] = field(default_factory=dict)

    @classmethod
    def from_resolution(cls, package: Package, packages: PackageSet, resolution: Resolution) -> "ResolvedPackage":
        """Collect the edges and features *resolution* reached for *package*."""
        rpkg = cls(package=package)
        pid = package.package_id
        for kind in DepKind:
            entry = resolution.depending_on[kind].get(pid)
            if entry is None:
                continue
            for dep_id in sorted(entry.host | entry.build):
                rpkg.deps[(dep_id, kind)] = _declared_dependency(package, packages, dep_id, kind)
        for feature in sorted(resolution.enabled_features(pid)):
            rpkg.features[feature] = ItemOptionality()
        return rpkg

    def iter_optionality(self) -> Iterator[ItemOptionality]:
        """Non-dev edges followed by features."""
        for (_, kind), dep in sorted(self.deps.items()):
            if kind is not DepKind.DEV:
                yield dep.optionality
        for _, optionality in sorted(self.features.items()):
            yield optionality


def _declared_dependency(package: Package, packages: PackageSet, dep_id: PackageId, kind: DepKind) -> ResolvedDependency:
    name: Optional[str] = None
    platforms: Optional[List[str]] = []
    for key, spec_kind, spec in package.manifest.iter_all_specs():
        if spec_kind is not kind or packages.resolve_alias(package.package_id, spec.name) != dep_id:
            continue
        name = name or spec.name
        if key is None:
            platforms = None
        elif platforms is not None and key not in platforms:
            platforms.append(key)
    if name is None:
        dep = packages.get(dep_id)
        name = dep.name if dep is not None else dep_id
        platforms = None
    return ResolvedDependency(package_id=dep_id, kind=kind, name=name, platforms=platforms)


class ConditionEngine:
    """Derive the activation condition of every item reachable from the roots.

    Args:
        packages: The package arena.
        roots: Package ids of the workspace members.
        build_platform: Platform for Build-role target blocks; None applies
            every block.
        host_platform: Platform for Host-role target blocks; None applies
            every block.
        root_features_var: Name of the root-features lookup in rendered
            conditions.

    Raises:
        GraphLoadError: If a root is not in the package set.
    """

    def __init__(
        self,
        packages: PackageSet,
        roots: Sequence[PackageId],
        build_platform: Optional[Platform] = None,
        host_platform: Optional[Platform] = None,
        root_features_var: str = Constants.ROOT_FEATURES_VAR,
    ):
        missing = [root for root in roots if root not in packages]
        if missing:
            raise GraphLoadError(f"Root package(s) not in the package set: {', '.join(missing)}")
        self.packages = packages
        self.roots = list(dict.fromkeys(roots))
        self.root_features_var = root_features_var
        self.resolver = FixpointResolver(packages, build_platform, host_platform)
        self.rpkgs: Dict[PackageId, ResolvedPackage] = {}
        self._done = False

    def root_name(self, root: PackageId) -> str:
        return self.packages[root].name

    def run(self) -> Dict[PackageId, ResolvedPackage]:
        """Run every pass once and return the resolved packages by id."""
        if self._done:
            return self.rpkgs
        logger.info("Computing activation conditions for %d root package(s)", len(self.roots))
        with Timer() as t:
            full = self.resolver.resolve(
                PackageRequest(root, tuple(all_features(self.packages[root])), use_dev_deps=True)
                for root in self.roots
            )
            self.rpkgs = {
                pid: ResolvedPackage.from_resolution(self.packages[pid], self.packages, full)
                for pid in full.touched_packages()
                if pid in self.packages
            }
            for root in self.roots:
                self.mark_required(root)
                for feature in all_features(self.packages[root]):
                    self.activate(root, feature)
            self.simplify(len({self.root_name(root) for root in self.roots}))
        self._done = True
        if is_debug_enabled(logger):
            logger.debug(
                "Conditions computed",
                extra=extra_context(
                    event="conditions",
                    component="conditions",
                    roots=len(self.roots),
                    packages=len(self.rpkgs),
                    duration_ms=t.duration_ms(),
                ),
            )
        return self.rpkgs

    def _record(self, resolution: Resolution, mark: Callable[[ItemOptionality], None]) -> None:
        for pid, features in resolution.features.items():
            rpkg = self.rpkgs.get(pid)
            if rpkg is None:
                continue
            for feature in features:
                item = rpkg.features.get(feature)
                if item is None:
                    logger.debug("Feature %s of %s is outside the full resolution", feature, pid)
                    continue
                mark(item)
        for kind, pid, _, dep_id in resolution.iter_edges():
            rpkg = self.rpkgs.get(pid)
            dep = rpkg.deps.get((dep_id, kind)) if rpkg is not None else None
            if dep is None:
                logger.debug("Edge %s -> %s (%s) is outside the full resolution", pid, dep_id, kind.short_name)
                continue
            mark(dep.optionality)

    def mark_required(self, root: PackageId) -> None:
        """Attribute everything the bare root pulls in to the root's name."""
        name = self.root_name(root)
        resolution = self.resolver.resolve([PackageRequest(root, (), use_dev_deps=True)])
        self._record(resolution, lambda item: item.required_by(name))

    def activate(self, root: PackageId, feature: str) -> None:
        """Attribute everything the root pulls in with exactly *feature* to ``(root, feature)``."""
        root_feature = (self.root_name(root), feature)
        resolution = self.resolver.resolve([PackageRequest(root, (feature,), use_dev_deps=True)])
        self._record(resolution, lambda item: item.activated_by(root_feature))

    def simplify(self, n_roots: int) -> None:
        for rpkg in self.rpkgs.values():
            for item in rpkg.iter_optionality():
                if item.covers_all(n_roots):
                    item.require()

            # Dev edges are only gated per root, never per feature.
            for (_, kind), dep in rpkg.deps.items():
                if kind is DepKind.DEV:
                    dep.optionality.require()

            items = list(rpkg.iter_optionality())
            if items and all_eq(items):
                for item in items:
                    item.require()

    def feature_condition(self, package_id: PackageId, feature: str) -> str:
        self.run()
        return str(self.rpkgs[package_id].features[feature].to_expr(self.root_features_var))

    def dependency_condition(self, package_id: PackageId, dep_id: PackageId, kind: DepKind = DepKind.NORMAL) -> str:
        self.run()
        return str(self.rpkgs[package_id].deps[(dep_id, kind)].optionality.to_expr(self.root_features_var))

    def checksum_for(self, package: Package, prefetch: bool) -> Optional[str]:
        """Known checksum, or one computed for a git source when *prefetch* is set.

        Raises:
            PrefetchError: If the git source has no revision or the external
                command fails.
        """
        source = package.source or {}
        if package.checksum is not None or not prefetch or "git" not in source:
            return package.checksum
        rev = source.get("rev")
        if not rev:
            raise PrefetchError(f"no precise git reference for {package.package_id}")
        try:
            return prefetch_git(source["git"], rev)
        except PrefetchError as e:
            raise PrefetchError(
                f"failed to compute SHA256 for {package.package_id} using {Constants.PREFETCH_GIT_COMMAND}: {e}"
            ) from e

    def plan(self, prefetch: bool = False) -> Dict[str, Any]:
        """Deterministic, JSON-ready build plan.

        Args:
            prefetch: Compute missing checksums of git sources.

        Returns:
            Mapping with the version attribute, the root-features variable,
            the root names and, per package id, its features and dependencies
            with rendered conditions.
        """
        self.run()
        packages: Dict[str, Any] = {}
        for pid in sorted(self.rpkgs):
            rpkg = self.rpkgs[pid]
            package = rpkg.package
            packages[pid] = {
                "name": package.name,
                "version": package.version,
                "source": package.source,
                "checksum": self.checksum_for(package, prefetch),
                "procMacro": package.is_proc_macro,
                "features": {
                    feature: str(item.to_expr(self.root_features_var))
                    for feature, item in sorted(rpkg.features.items())
                },
                "dependencies": [
                    {
                        "packageId": dep.package_id,
                        "name": dep.name,
                        "kind": dep.kind.short_name,
                        "condition": str(dep.optionality.to_expr(self.root_features_var)),
                        "platforms": dep.platforms,
                    }
                    for _, dep in sorted(rpkg.deps.items())
                ],
            }
        return {
            Constants.VERSION_ATTRIBUTE_NAME: Constants.VERSION,
            "rootFeaturesVar": self.root_features_var,
            "roots": [self.root_name(root) for root in self.roots],
            "packages": packages,
        }
