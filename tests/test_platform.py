"""Tests for platform descriptors, OS flags and raw value escaping."""

import pytest

from cfg.strings import escape_default, unescape_str
from cfg.target import (
    Endianness,
    Env,
    Family,
    Os,
    Other,
    Platform,
    PointerWidth,
    parse_endianness,
    parse_env,
    parse_family,
    parse_pointer_width,
)
from errors import CfgParseError, PlatformParseError


def raw_platform(**overrides):
    """Raw descriptor of a 64-bit little-endian glibc linux."""
    raw = {
        "config": "x86_64-unknown-linux-gnu",
        "libc": "glibc",
        "is32bit": False,
        "is64bit": True,
        "isAndroid": False,
        "isBigEndian": False,
        "isFreeBSD": False,
        "isiOS": False,
        "isLinux": True,
        "isLittleEndian": True,
        "isMacOS": False,
        "isNetBSD": False,
        "isOpenBSD": False,
        "isUnix": True,
        "isWindows": False,
        "parsed": {"cpu": {"name": "x86_64"}, "vendor": {"name": "unknown"}},
    }
    raw.update(overrides)
    return raw


class TestOs:
    """Implication-closed OS flag sets."""

    def test_android_implies_linux_and_unix(self):
        os_value = Os.of("android")
        assert os_value.contains("android")
        assert os_value.contains("linux")
        assert os_value.is_unix
        assert not os_value.is_windows

    def test_linux_does_not_imply_android(self):
        assert not Os.of("linux").contains("android")

    def test_display_picks_most_specific(self):
        assert str(Os.of("android")) == "android"
        assert str(Os.of("macos")) == "macos"
        assert str(Os.of("linux") | Os.of("unix")) == "linux"
        assert str(Os.of("unix")) == ""
        assert str(Os.empty()) == ""

    def test_from_name(self):
        assert Os.from_name("freebsd") == Os.of("freebsd")
        assert Os.from_name("redox") == Os.of("other")
        assert not Os.from_name("redox").is_unix


class TestClosedEnums:
    """Closed enumerations with an Other escape hatch."""

    def test_known_values(self):
        assert parse_endianness("big") is Endianness.BIG
        assert parse_pointer_width("32") is PointerWidth.I32
        assert parse_family("windows") is Family.WINDOWS
        assert parse_env("musl") is Env.MUSL

    def test_empty_env_is_gnu(self):
        assert parse_env("") is Env.GNU

    def test_other_round_trips(self):
        value = parse_env(r"uclibc\tx")
        assert value == Other("uclibc\tx")
        assert str(value) == r"uclibc\tx"
        assert str(parse_pointer_width("16")) == "16"

    @pytest.mark.parametrize("text", [
        "plain",
        'quote"d',
        "tab\there",
        "back\\slash",
        "café",
    ])
    def test_escape_unescape_inverse(self, text):
        assert unescape_str(escape_default(text)) == text

    def test_escape_non_ascii(self):
        assert escape_default("é") == "\\u{e9}"
        assert unescape_str("\\x41\\u{1F600}\\q") == "A\U0001F600\\q"


class TestFromRaw:
    """Interpreting raw platform descriptors."""

    def test_linux_descriptor(self):
        platform = Platform.from_raw(raw_platform())
        assert platform.config == "x86_64-unknown-linux-gnu"
        assert platform.arch == "x86_64"
        assert platform.vendor == "unknown"
        assert str(platform.os) == "linux"
        assert platform.os.is_unix
        assert platform.endianness is Endianness.LITTLE
        assert platform.pointer_width is PointerWidth.I64
        assert platform.env is Env.GNU
        assert platform.family is Family.UNIX

    def test_windows_descriptor(self):
        platform = Platform.from_raw(raw_platform(
            config="x86_64-pc-windows-msvc", libc="msvcrt",
            isLinux=False, isUnix=False, isWindows=True,
        ))
        assert str(platform.os) == "windows"
        assert platform.env is Env.MSVC
        assert platform.family is Family.WINDOWS

    def test_unknown_libc_becomes_other(self):
        platform = Platform.from_raw(raw_platform(libc="bionic"))
        assert platform.env == Other("bionic")

    def test_width_and_endianness_precedence(self):
        platform = Platform.from_raw(raw_platform(
            is32bit=True, is64bit=True, isBigEndian=True, isLittleEndian=True,
        ))
        assert platform.pointer_width is PointerWidth.I32
        assert platform.endianness is Endianness.LITTLE

    def test_missing_key_is_a_parse_error(self):
        raw = raw_platform()
        del raw["isLinux"]
        with pytest.raises(PlatformParseError) as excinfo:
            Platform.from_raw(raw)
        assert isinstance(excinfo.value, CfgParseError)

    def test_wrong_type_is_a_parse_error(self):
        with pytest.raises(PlatformParseError):
            Platform.from_raw(raw_platform(isUnix="yes"))


class TestFromTriple:
    """Best-effort platforms from target triples."""

    def test_linux_triple(self):
        platform = Platform.from_triple("x86_64-unknown-linux-gnu")
        assert str(platform.os) == "linux"
        assert platform.vendor == "unknown"
        assert platform.env is Env.GNU
        assert platform.pointer_width is PointerWidth.I64

    def test_darwin_triple(self):
        platform = Platform.from_triple("aarch64-apple-darwin")
        assert str(platform.os) == "macos"
        assert platform.family is Family.UNIX
        assert platform.env is None

    def test_32bit_windows_triple(self):
        platform = Platform.from_triple("i686-pc-windows-msvc")
        assert platform.pointer_width is PointerWidth.I32
        assert platform.env is Env.MSVC
        assert platform.os.is_windows
