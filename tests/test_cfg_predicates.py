"""Tests for cfg predicate parsing and evaluation."""

import pytest

from cfg.expr import CfgAll, CfgAny, CfgKeyPair, CfgName, CfgNot
from cfg.lexer import tokenize
from cfg.parser import parse_cfg, try_parse_cfg
from cfg.target import Endianness, Env, Os, Platform, PointerWidth
from errors import CfgParseError


@pytest.fixture
def linux():
    """A unix, non-windows 64-bit linux platform."""
    return Platform(
        config="x86_64-unknown-linux-gnu",
        arch="x86_64",
        os=Os.of("linux"),
        endianness=Endianness.LITTLE,
        env=Env.GNU,
        pointer_width=PointerWidth.I64,
        vendor="unknown",
    )


@pytest.fixture
def windows():
    return Platform(
        config="x86_64-pc-windows-msvc",
        arch="x86_64",
        os=Os.of("windows"),
        endianness=Endianness.LITTLE,
        env=Env.MSVC,
        pointer_width=PointerWidth.I64,
        vendor="pc",
    )


class TestParse:
    """Parsing of wrapped and bare predicates."""

    def test_wrapped_and_bare_forms_are_equal(self):
        assert parse_cfg("cfg(unix)") == parse_cfg("unix") == CfgName("unix")

    def test_key_pair(self):
        assert parse_cfg('cfg(target_os = "linux")') == CfgKeyPair("target_os", "linux")

    def test_nested_combinators(self):
        expr = parse_cfg('cfg(all(unix, not(target_arch = "wasm32"), any(feature = "std", windows)))')
        assert expr == CfgAll((
            CfgName("unix"),
            CfgNot(CfgKeyPair("target_arch", "wasm32")),
            CfgAny((CfgKeyPair("feature", "std"), CfgName("windows"))),
        ))

    def test_empty_and_trailing_comma_lists(self):
        assert parse_cfg("all()") == CfgAll(())
        assert parse_cfg("any(unix,)") == CfgAny((CfgName("unix"),))

    def test_string_escapes_are_resolved(self):
        assert parse_cfg(r'target_vendor = "a\"b"') == CfgKeyPair("target_vendor", 'a"b')

    def test_display(self):
        text = 'all(unix, not(target_os = "macos"))'
        assert str(parse_cfg(text)) == text

    @pytest.mark.parametrize("text", [
        "x86_64-unknown-linux-gnu",
        "cfg(unix",
        "all(unix windows)",
        'target_os = linux',
        "not(unix, windows)",
        "",
    ])
    def test_invalid_predicates(self, text):
        with pytest.raises(CfgParseError) as excinfo:
            parse_cfg(text)
        assert excinfo.value.text == text
        assert excinfo.value.cause is not None
        assert str(excinfo.value).startswith("parse error:")
        assert try_parse_cfg(text) is None

    def test_tokenize(self):
        assert tokenize('cfg(feature = "x")') == [
            ("CFG", "cfg"), ("LPAREN", "("), ("IDENT", "feature"),
            ("EQUALS", "="), ("STRING", "x"), ("RPAREN", ")"),
        ]


class TestEvaluate:
    """Evaluation against a platform and the package's own features."""

    def test_unix_windows_combinators(self, linux):
        assert parse_cfg("any(unix, windows)").matches(linux) is True
        assert parse_cfg("all(unix, windows)").matches(linux) is False
        assert parse_cfg("not(windows)").matches(linux) is True

    def test_feature_atom_uses_package_features(self, linux, windows):
        expr = parse_cfg('cfg(feature = "x")')
        assert expr.matches(linux, frozenset({"x"})) is True
        assert expr.matches(windows, frozenset({"x"})) is True
        assert expr.matches(linux, frozenset({"y"})) is False
        assert expr.matches(linux) is False

    def test_platform_keys(self, linux):
        assert parse_cfg('target_os = "linux"').matches(linux)
        assert parse_cfg('target_arch = "x86_64"').matches(linux)
        assert parse_cfg('target_endian = "little"').matches(linux)
        assert parse_cfg('target_env = "gnu"').matches(linux)
        assert parse_cfg('target_pointer_width = "64"').matches(linux)
        assert parse_cfg('target_vendor = "unknown"').matches(linux)
        assert parse_cfg('target_family = "unix"').matches(linux)
        assert not parse_cfg('target_family = "windows"').matches(linux)
        assert not parse_cfg('target_pointer_width = "32"').matches(linux)

    def test_unknown_atoms_are_false(self, linux):
        assert not parse_cfg("debug_assertions").matches(linux)
        assert not parse_cfg('target_feature = "sse2"').matches(linux)

    def test_android_is_linux_and_unix(self):
        android = Platform(config="aarch64-linux-android", os=Os.of("android"))
        assert parse_cfg('target_os = "android"').matches(android)
        assert parse_cfg("unix").matches(android)
        assert parse_cfg('target_family = "unix"').matches(android)

    def test_platform_without_os(self):
        bare = Platform(config="wasm32-unknown-unknown", arch="wasm32")
        assert not parse_cfg("unix").matches(bare)
        assert parse_cfg("not(windows)").matches(bare)
        assert parse_cfg('target_arch = "wasm32"').matches(bare)
        assert not parse_cfg('target_env = "gnu"').matches(bare)
