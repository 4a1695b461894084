"""Worklist-based fixpoint resolver for package and feature activation.

Given initial activation requests, computes the transitive closure of
enabled packages, enabled features and depending-on edges, separately for
the Build and the Host role. Processing is breadth-first over an explicit
FIFO queue; explicit membership sets make every request idempotent, which
bounds the run by the (finite) package and feature universe.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from typing import AbstractSet, Deque, Iterable, Iterator, Optional, Set, Tuple

from cfg.parser import try_parse_cfg
from cfg.target import Platform
from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants
from graph.models import DepKind, DepSpec, DepSpecMap, Package, PackageId, PackageSet

from .models import (
    DependingOn,
    EnableFeature,
    EnablePackage,
    ModifyRequest,
    PackageRequest,
    Resolution,
    Role,
)

logger = logging.getLogger(__name__)

DEP_FEATURE = re.compile(r"([^/]+)/(.+)")


class FixpointResolver:
    """Activation closure over an immutable package set.

    Args:
        packages: The package arena.
        build_platform: Platform of the build tooling. ``None`` makes every
            conditional target block apply to the Build role.
        host_platform: Platform the artifact targets. ``None`` makes every
            conditional target block apply to the Host role.
    """

    def __init__(
        self,
        packages: PackageSet,
        build_platform: Optional[Platform] = None,
        host_platform: Optional[Platform] = None,
    ):
        self.packages = packages
        self.build_platform = build_platform
        self.host_platform = host_platform

    def platform_for(self, role: Role) -> Optional[Platform]:
        return self.build_platform if role is Role.BUILD else self.host_platform

    def config_for(self, role: Role) -> str:
        platform = self.platform_for(role)
        return platform.config if platform is not None else role.value

    def resolve(self, requests: Iterable[PackageRequest]) -> Resolution:
        """Run the worklist to a fixpoint.

        Args:
            requests: Initial ``(package, features, use_dev_deps)`` requests.

        Returns:
            Resolution with per-kind, per-role depending-on edges and the
            enabled feature set of every touched package.
        """
        run = _Run(self)
        with Timer() as t:
            for req in requests:
                run.enqueue(EnablePackage(req.package_id, req.role, req.use_dev_deps))
                for feature in req.features:
                    run.enqueue(EnableFeature(req.package_id, req.role, feature))
            run.drain()
        if is_debug_enabled(logger):
            logger.debug(
                "Resolution finished",
                extra=extra_context(
                    event="resolve",
                    component="resolver",
                    processed=run.processed_count,
                    packages=len(run.resolution.touched_packages()),
                    duration_ms=t.duration_ms(),
                ),
            )
        return run.resolution

    # Helpers shared with the run state.

    def block_applies(self, key: str, role: Role, features: AbstractSet[str]) -> bool:
        """Whether the target block under *key* applies to *role*.

        A key matches literally against the role platform's config string;
        otherwise it is parsed as a cfg predicate and evaluated with the
        package's enabled features. Keys that are neither never apply.
        """
        platform = self.platform_for(role)
        if platform is None:
            return True
        if key == platform.config:
            return True
        predicate = try_parse_cfg(key)
        if predicate is None:
            logger.debug("Skipping target block %r: neither a config nor a cfg predicate", key)
            return False
        return predicate.matches(platform, features)

    def iter_dep_blocks(
        self,
        package: Package,
        role: Role,
        features: AbstractSet[str],
        kinds: Tuple[DepKind, ...],
    ) -> Iterator[Tuple[DepKind, DepSpecMap]]:
        """Yield the unconditional and the applicable conditional spec maps."""
        manifest = package.manifest
        for kind in kinds:
            yield kind, manifest.of_kind(kind)
        for key in sorted(manifest.target):
            if not self.block_applies(key, role, features):
                continue
            block = manifest.target[key]
            for kind in kinds:
                yield kind, block.of_kind(kind)

    def effective_role(self, kind: DepKind, role: Role, dep_id: PackageId) -> Role:
        """Role a dependency is built for: build deps and proc macros go to Build."""
        shifted = role.to_build() if kind is DepKind.BUILD else role.to_host()
        if self.packages.is_proc_macro(dep_id):
            shifted = shifted.to_build()
        return shifted


class _Run:
    """Mutable state of a single resolver run."""

    def __init__(self, resolver: FixpointResolver):
        self.resolver = resolver
        self.packages = resolver.packages
        self.queue: Deque[ModifyRequest] = deque()
        self.resolution = Resolution(
            build_config=resolver.config_for(Role.BUILD),
            host_config=resolver.config_for(Role.HOST),
        )
        self.enabled_packages: Set[EnablePackage] = set()
        self.enabled_features: Set[Tuple[PackageId, Role, str]] = set()
        self.processed_count = 0

    def enqueue(self, req: ModifyRequest) -> None:
        self.queue.append(req)

    def drain(self) -> None:
        while self.queue:
            req = self.queue.popleft()
            self.processed_count += 1
            if isinstance(req, EnablePackage):
                self.enable_package(req)
            else:
                self.enable_feature(req)

    def add_edge(self, kind: DepKind, package_id: PackageId, role: Role, dep_id: PackageId) -> bool:
        """Record ``package_id -> dep_id`` for *role*; True if the edge is new."""
        entry = self.resolution.depending_on[kind].setdefault(package_id, DependingOn())
        deps = entry.for_role(role)
        if dep_id in deps:
            return False
        deps.add(dep_id)
        return True

    def propagate(self, dep_id: PackageId, role: Role, spec: DepSpec, dep_feature: Optional[str] = None) -> None:
        if spec.default_features:
            self.enqueue(EnableFeature(dep_id, role, Constants.DEFAULT_FEATURE))
        for feature in spec.features:
            self.enqueue(EnableFeature(dep_id, role, feature))
        if dep_feature is not None:
            self.enqueue(EnableFeature(dep_id, role, dep_feature))

    def current_features(self, package_id: PackageId) -> AbstractSet[str]:
        return frozenset(self.resolution.features.get(package_id, ()))

    def enable_package(self, req: EnablePackage) -> None:
        if req.package_id not in self.packages or req in self.enabled_packages:
            return
        self.enabled_packages.add(req)
        package = self.packages[req.package_id]

        kinds = (DepKind.NORMAL, DepKind.BUILD, DepKind.DEV) if req.use_dev_deps else (DepKind.NORMAL, DepKind.BUILD)
        features = self.current_features(req.package_id)
        for kind, specs in self.resolver.iter_dep_blocks(package, req.role, features, kinds):
            for spec in specs.values():
                if spec.optional:
                    continue
                dep_id = self.packages.resolve_alias(req.package_id, spec.name)
                if dep_id is None or dep_id not in self.packages:
                    continue
                role = self.resolver.effective_role(kind, req.role, dep_id)
                if self.add_edge(kind, req.package_id, role, dep_id):
                    self.enqueue(EnablePackage(dep_id, role, False))
                self.propagate(dep_id, role, spec)

    def enable_feature(self, req: EnableFeature) -> None:
        key = (req.package_id, req.role, req.feature)
        if req.package_id not in self.packages or key in self.enabled_features:
            return
        self.enabled_features.add(key)
        package = self.packages[req.package_id]

        dep: Optional[str] = None
        dep_feature: Optional[str] = None
        match = DEP_FEATURE.fullmatch(req.feature)
        if match:
            dep, dep_feature = match.group(1), match.group(2)
        elif self.packages.has_alias(req.package_id, req.feature):
            dep = req.feature

        # Features apply equally to both roles.
        self.resolution.features.setdefault(req.package_id, set()).add(dep if dep is not None else req.feature)
        for next_feature in package.manifest.features.get(req.feature, ()):
            self.enqueue(EnableFeature(req.package_id, req.role, next_feature))

        if dep is None:
            return
        dep_id = self.packages.resolve_alias(req.package_id, dep)
        if dep_id is None or dep_id not in self.packages:
            return

        features = self.current_features(req.package_id)
        kinds = (DepKind.NORMAL, DepKind.BUILD)
        for kind, specs in self.resolver.iter_dep_blocks(package, req.role, features, kinds):
            spec = specs.get(dep)
            if spec is None:
                continue
            for role in (req.role, req.role.to_build()):
                effective = self.resolver.effective_role(kind, role, dep_id)
                if self.add_edge(kind, req.package_id, effective, dep_id):
                    self.enqueue(EnablePackage(dep_id, effective, False))
                self.propagate(dep_id, effective, spec, dep_feature)


def resolve(
    packages: PackageSet,
    build_platform: Optional[Platform],
    host_platform: Optional[Platform],
    requests: Iterable[PackageRequest],
) -> Resolution:
    """Convenience wrapper around :class:`FixpointResolver`."""
    return FixpointResolver(packages, build_platform, host_platform).resolve(requests)
