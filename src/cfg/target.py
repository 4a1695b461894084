"""Concrete target platform descriptions.

A ``Platform`` is built from the raw descriptor a build system hands over
(one boolean per OS/arch/ABI property plus parsed CPU and vendor names) and
is what cfg predicates are evaluated against.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Union

from common.schema import validate_document
from errors import PlatformParseError

from .strings import escape_default, unescape_str


# Each flag implies the flags listed here; membership is derived from this
# table, never stored twice.
OS_IMPLIES: Dict[str, FrozenSet[str]] = {
    "linux": frozenset({"unix"}),
    "android": frozenset({"linux", "unix"}),
    "ios": frozenset({"unix"}),
    "macos": frozenset({"unix"}),
    "freebsd": frozenset({"unix"}),
    "netbsd": frozenset({"unix"}),
    "openbsd": frozenset({"unix"}),
    "windows": frozenset(),
    "unix": frozenset(),
    "other": frozenset(),
}

# Most specific first.
OS_DISPLAY_ORDER = ("android", "windows", "linux", "ios", "macos", "freebsd", "netbsd")


def _closure(name: str) -> FrozenSet[str]:
    return frozenset({name}) | OS_IMPLIES.get(name, frozenset())


@dataclass(frozen=True)
class Os:
    """Set of OS flags closed under implication (android => linux => unix)."""

    flags: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def empty(cls) -> "Os":
        return cls()

    @classmethod
    def of(cls, *names: str) -> "Os":
        flags: FrozenSet[str] = frozenset()
        for name in names:
            flags |= _closure(name)
        return cls(flags)

    @classmethod
    def from_name(cls, name: str) -> "Os":
        """Parse an OS name; unknown names map to the ``other`` flag."""
        if name in OS_IMPLIES and name not in ("unix", "other"):
            return cls.of(name)
        return cls.of("other")

    def __or__(self, other: "Os") -> "Os":
        return Os(self.flags | other.flags)

    def contains(self, name: str) -> bool:
        return _closure(name) <= self.flags

    @property
    def is_unix(self) -> bool:
        return self.contains("unix")

    @property
    def is_windows(self) -> bool:
        return self.contains("windows")

    def __str__(self) -> str:
        for name in OS_DISPLAY_ORDER:
            if self.contains(name):
                return name
        return ""


@dataclass(frozen=True)
class Other:
    """Escape hatch for values outside a closed enumeration.

    ``raw`` holds the unescaped value; ``str()`` escapes it again.
    """

    raw: str

    def __str__(self) -> str:
        return escape_default(self.raw)


class _DisplayEnum(Enum):
    def __str__(self) -> str:
        return str(self.value)


class Endianness(_DisplayEnum):
    BIG = "big"
    LITTLE = "little"


class Env(_DisplayEnum):
    GNU = "gnu"
    MUSL = "musl"
    MSVC = "msvc"


class PointerWidth(_DisplayEnum):
    I32 = "32"
    I64 = "64"


class Family(_DisplayEnum):
    UNIX = "unix"
    WINDOWS = "windows"


EndiannessValue = Union[Endianness, Other]
EnvValue = Union[Env, Other]
PointerWidthValue = Union[PointerWidth, Other]
FamilyValue = Union[Family, Other]


def _parse_closed(enum_cls, value: str):
    for member in enum_cls:
        if member.value == value:
            return member
    return Other(unescape_str(value))


def parse_endianness(value: str) -> EndiannessValue:
    return _parse_closed(Endianness, value)


def parse_env(value: str) -> EnvValue:
    """Parse an ABI environment; the empty string means gnu."""
    if value == "":
        return Env.GNU
    return _parse_closed(Env, value)


def parse_pointer_width(value: str) -> PointerWidthValue:
    return _parse_closed(PointerWidth, value)


def parse_family(value: str) -> FamilyValue:
    return _parse_closed(Family, value)


_LIBC_ENV = {
    "glibc": Env.GNU,
    "musl": Env.MUSL,
    "msvcrt": Env.MSVC,
}

# Descriptor key -> OS flag it ORs in.
_RAW_OS_FLAGS = (
    ("isLinux", "linux"),
    ("isAndroid", "android"),
    ("isFreeBSD", "freebsd"),
    ("isNetBSD", "netbsd"),
    ("isMacOS", "macos"),
    ("isWindows", "windows"),
    ("isiOS", "ios"),
    ("isOpenBSD", "openbsd"),
    ("isUnix", "unix"),
)

_NAME_OBJECT = {
    "type": "object",
    "required": ["name"],
    "properties": {"name": {"type": "string"}},
}

RAW_PLATFORM_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": [
        "config", "is32bit", "is64bit", "isAndroid", "isBigEndian", "isFreeBSD",
        "isiOS", "isLinux", "isLittleEndian", "isMacOS", "isNetBSD", "isOpenBSD",
        "isUnix", "isWindows", "parsed",
    ],
    "properties": {
        "config": {"type": "string"},
        "libc": {"type": "string"},
        "is32bit": {"type": "boolean"},
        "is64bit": {"type": "boolean"},
        "isBigEndian": {"type": "boolean"},
        "isLittleEndian": {"type": "boolean"},
        **{key: {"type": "boolean"} for key, _ in _RAW_OS_FLAGS},
        "parsed": {
            "type": "object",
            "required": ["cpu", "vendor"],
            "properties": {"cpu": _NAME_OBJECT, "vendor": _NAME_OBJECT},
        },
    },
}


@dataclass(frozen=True)
class Platform:
    """A concrete target: config triple plus the properties cfg atoms test."""

    config: str
    arch: Optional[str] = None
    os: Optional[Os] = None
    endianness: Optional[EndiannessValue] = None
    env: Optional[EnvValue] = None
    pointer_width: Optional[PointerWidthValue] = None
    vendor: Optional[str] = None

    @property
    def family(self) -> Optional[FamilyValue]:
        if self.os is None:
            return None
        if self.os.is_unix:
            return Family.UNIX
        if self.os.is_windows:
            return Family.WINDOWS
        return None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Platform":
        """Interpret a raw platform descriptor.

        Args:
            raw: Descriptor with ``config``, ``isLinux``-style booleans,
                optional ``libc`` and ``parsed.cpu.name``/``parsed.vendor.name``.

        Returns:
            Platform

        Raises:
            PlatformParseError: If the descriptor is malformed.
        """
        validate_document(RAW_PLATFORM_SCHEMA, raw, PlatformParseError, what="platform descriptor")

        os_value = Os.empty()
        for key, name in _RAW_OS_FLAGS:
            if raw[key]:
                os_value = os_value | Os.of(name)

        if raw["isLittleEndian"]:
            endianness: Optional[EndiannessValue] = Endianness.LITTLE
        elif raw["isBigEndian"]:
            endianness = Endianness.BIG
        else:
            endianness = None

        if raw["is32bit"]:
            pointer_width: Optional[PointerWidthValue] = PointerWidth.I32
        elif raw["is64bit"]:
            pointer_width = PointerWidth.I64
        else:
            pointer_width = None

        libc = raw.get("libc", "")
        env = _LIBC_ENV.get(libc, Other(libc))

        return cls(
            config=raw["config"],
            arch=raw["parsed"]["cpu"]["name"],
            os=os_value,
            endianness=endianness,
            env=env,
            pointer_width=pointer_width,
            vendor=raw["parsed"]["vendor"]["name"],
        )

    @classmethod
    def from_triple(cls, config: str) -> "Platform":
        """Best-effort platform from a ``arch-vendor-os[-env]`` triple.

        Used when a workspace document names its platforms by triple only.
        """
        parts = config.split("-")
        arch = parts[0] if parts else None
        vendor = parts[1] if len(parts) > 2 else None
        os_part = parts[2] if len(parts) > 2 else (parts[1] if len(parts) == 2 else "")
        env_part = parts[3] if len(parts) > 3 else None
        if os_part == "darwin":
            os_part = "macos"
        if arch in ("x86_64", "aarch64", "powerpc64", "powerpc64le", "riscv64", "s390x", "mips64", "sparc64"):
            pointer_width: Optional[PointerWidthValue] = PointerWidth.I64
        elif arch:
            pointer_width = PointerWidth.I32
        else:
            pointer_width = None
        big = arch in ("powerpc", "powerpc64", "s390x", "mips", "mips64", "sparc64")
        if env_part is not None:
            env: Optional[EnvValue] = parse_env(env_part)
        elif os_part == "linux":
            env = Env.GNU
        else:
            env = None
        return cls(
            config=config,
            arch=arch,
            os=Os.from_name(os_part),
            endianness=Endianness.BIG if big else Endianness.LITTLE,
            env=env,
            pointer_width=pointer_width,
            vendor=vendor,
        )
