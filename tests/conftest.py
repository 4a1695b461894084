"""Shared fixtures: small package graphs written as raw documents."""

import pytest

from cfg.target import Endianness, Env, Os, Platform, PointerWidth
from graph.loader import load_package_set


def _raw_package(manifest=None, deps=None, **extra):
    """Raw package entry.

    Args:
        manifest: ``cargo-manifest`` body.
        deps: ``toml name -> package id`` alias table.
        extra: Other top-level keys (name, checksum, source, ...).
    """
    body = {
        "cargo-manifest": manifest or {},
        "dependencies": [
            {"package-id": pid, "toml-names": [name]}
            for name, pid in sorted((deps or {}).items())
        ],
    }
    body.update(extra)
    return body


@pytest.fixture
def raw_package():
    """Builder for raw package entries."""
    return _raw_package


@pytest.fixture
def make_packages():
    """Factory turning ``{package id: raw package}`` into a PackageSet."""
    return load_package_set


@pytest.fixture
def linux_platform():
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
def windows_platform():
    return Platform(
        config="x86_64-pc-windows-msvc",
        arch="x86_64",
        os=Os.of("windows"),
        endianness=Endianness.LITTLE,
        env=Env.MSVC,
        pointer_width=PointerWidth.I64,
        vendor="pc",
    )
