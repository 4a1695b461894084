"""Boolean expressions spliced into generated build descriptions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple, Union


@dataclass(frozen=True)
class Const:
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Single:
    """An opaque atom, already rendered (e.g. ``rootFeatures' ? "a/b"``)."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Or:
    items: Tuple["BoolExpr", ...]

    def __str__(self) -> str:
        return " || ".join(str(item) for item in self.items)


BoolExpr = Union[Const, Single, Or]

TRUE = Const(True)
FALSE = Const(False)


def ors(exprs: Iterable[BoolExpr]) -> BoolExpr:
    """Disjunction with constant folding; an empty disjunction is false."""
    items = []
    for expr in exprs:
        if expr == TRUE:
            return TRUE
        if expr == FALSE:
            continue
        if isinstance(expr, Or):
            items.extend(expr.items)
        else:
            items.append(expr)
    items = list(dict.fromkeys(items))
    if not items:
        return FALSE
    if len(items) == 1:
        return items[0]
    return Or(tuple(items))
