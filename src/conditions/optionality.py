"""Optionality of a dependency edge or feature across the root packages.

An item is either ``Required`` (always included) or ``Conditional`` (the
optional variant): included when one of the recorded root packages or
``(root package, root feature)`` pairs is enabled. ``ItemOptionality`` is the
mutable slot the condition engine updates; once it holds ``Required`` it
never changes again.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Optional, Set, Tuple, Union

from constants import Constants

from .boolexpr import TRUE, BoolExpr, Single, ors

# (root package name, feature name)
RootFeature = Tuple[str, str]


@dataclass(frozen=True)
class Required:
    """The item is always included."""


@dataclass
class Conditional:
    """The item is included only under the recorded roots/root features."""

    required_by: Set[str] = field(default_factory=set)
    activated_by: Set[RootFeature] = field(default_factory=set)


Optionality = Union[Required, Conditional]

REQUIRED = Required()


def display_root_feature(root_feature: RootFeature) -> str:
    pkg_name, feature = root_feature
    return f"{pkg_name}/{feature}"


class ItemOptionality:
    """Monotonic optionality slot."""

    __slots__ = ("state",)

    def __init__(self, state: Optional[Optionality] = None):
        self.state: Optionality = state if state is not None else Conditional()

    @property
    def is_required(self) -> bool:
        return isinstance(self.state, Required)

    def required_by(self, pkg_name: str) -> None:
        """Record that root *pkg_name* includes the item with no features."""
        if isinstance(self.state, Conditional):
            self.state.required_by.add(pkg_name)

    def activated_by(self, root_feature: RootFeature) -> None:
        """Record activation by a root feature unless the root already requires it."""
        if isinstance(self.state, Conditional) and root_feature[0] not in self.state.required_by:
            self.state.activated_by.add(root_feature)

    def require(self) -> None:
        self.state = REQUIRED

    def covers_all(self, n_roots: int) -> bool:
        return isinstance(self.state, Conditional) and len(self.state.required_by) == n_roots

    def to_expr(self, root_features_var: str = Constants.ROOT_FEATURES_VAR) -> BoolExpr:
        """Render as ``true`` or a disjunction of membership tests."""
        if isinstance(self.state, Required):
            return TRUE
        return ors(
            [
                Single(f"{root_features_var} ? {json.dumps(display_root_feature(rf))}")
                for rf in sorted(self.state.activated_by)
            ]
            + [
                Single(f"{root_features_var} ? {json.dumps(pkg_name)}")
                for pkg_name in sorted(self.state.required_by)
            ]
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ItemOptionality):
            return NotImplemented
        return self.state == other.state

    def __repr__(self) -> str:
        return f"ItemOptionality({self.state!r})"
