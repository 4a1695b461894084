"""cfg predicate expression tree and its evaluation.

The tree is a closed sum of five node types. ``matches`` evaluates a node
against a concrete platform and the evaluating package's own enabled feature
set; ``feature = "..."`` atoms never look at the platform.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Callable, Dict, Optional, Tuple, Union

from .target import Platform


def _os_name(platform: Platform) -> Optional[str]:
    return str(platform.os) if platform.os is not None else None


def _str_or_none(value) -> Optional[str]:
    return str(value) if value is not None else None


# Platform properties addressable by ``key = "value"`` atoms.
_KEY_GETTERS: Dict[str, Callable[[Platform], Optional[str]]] = {
    "target_os": _os_name,
    "target_arch": lambda p: p.arch,
    "target_endian": lambda p: _str_or_none(p.endianness),
    "target_env": lambda p: _str_or_none(p.env),
    "target_pointer_width": lambda p: _str_or_none(p.pointer_width),
    "target_vendor": lambda p: p.vendor,
}


@dataclass(frozen=True)
class CfgName:
    """A bare atom such as ``unix`` or ``windows``."""

    name: str

    def matches(self, platform: Platform, features: AbstractSet[str] = frozenset()) -> bool:
        if platform.os is None:
            return False
        if self.name == "unix":
            return platform.os.is_unix
        if self.name == "windows":
            return platform.os.is_windows
        return False

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class CfgKeyPair:
    """A ``key = "value"`` atom."""

    key: str
    value: str

    def matches(self, platform: Platform, features: AbstractSet[str] = frozenset()) -> bool:
        if self.key == "feature":
            return self.value in features
        if self.key == "target_family":
            family = platform.family
            return family is not None and str(family) == self.value
        getter = _KEY_GETTERS.get(self.key)
        if getter is None:
            return False
        actual = getter(platform)
        return actual is not None and actual == self.value

    def __str__(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'{self.key} = "{escaped}"'


@dataclass(frozen=True)
class CfgAll:
    """``all(...)``: true when every operand matches; true when empty."""

    items: Tuple["CfgExpr", ...]

    def matches(self, platform: Platform, features: AbstractSet[str] = frozenset()) -> bool:
        return all(item.matches(platform, features) for item in self.items)

    def __str__(self) -> str:
        return "all({})".format(", ".join(str(i) for i in self.items))


@dataclass(frozen=True)
class CfgAny:
    """``any(...)``: true when some operand matches; false when empty."""

    items: Tuple["CfgExpr", ...]

    def matches(self, platform: Platform, features: AbstractSet[str] = frozenset()) -> bool:
        return any(item.matches(platform, features) for item in self.items)

    def __str__(self) -> str:
        return "any({})".format(", ".join(str(i) for i in self.items))


@dataclass(frozen=True)
class CfgNot:
    """``not(...)``."""

    item: "CfgExpr"

    def matches(self, platform: Platform, features: AbstractSet[str] = frozenset()) -> bool:
        return not self.item.matches(platform, features)

    def __str__(self) -> str:
        return f"not({self.item})"


CfgExpr = Union[CfgName, CfgKeyPair, CfgAll, CfgAny, CfgNot]
