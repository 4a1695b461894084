"""Activation conditions over root packages and root features."""

from .boolexpr import FALSE, TRUE, BoolExpr, Const, Or, Single, ors
from .engine import ConditionEngine, ResolvedDependency, ResolvedPackage, all_features
from .optionality import Conditional, ItemOptionality, Optionality, Required, RootFeature

__all__ = [
    "FALSE",
    "TRUE",
    "BoolExpr",
    "ConditionEngine",
    "Conditional",
    "Const",
    "ItemOptionality",
    "Optionality",
    "Or",
    "Required",
    "ResolvedDependency",
    "ResolvedPackage",
    "RootFeature",
    "Single",
    "all_features",
    "ors",
]
