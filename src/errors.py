"""Exception hierarchy shared by the resolver, the condition engine and the CLI."""

from __future__ import annotations

from typing import Optional


class FeaturePlanError(Exception):
    """Base class for all errors raised by featureplan."""


class CfgParseError(FeaturePlanError, ValueError):
    """Raised when a cfg predicate or a platform descriptor cannot be parsed.

    The underlying parser or validation failure is kept in ``cause`` and is
    also chained as ``__cause__`` by the raising code.
    """

    def __init__(self, message: str, text: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.text = text
        self.cause = cause

    def __str__(self) -> str:
        base = super().__str__()
        if self.text is not None:
            base = f"{base} (in {self.text!r})"
        if self.cause is not None:
            base = f"{base}: {self.cause}"
        return f"parse error: {base}"


class PlatformParseError(CfgParseError):
    """Raised when a raw platform descriptor is malformed."""


class GraphLoadError(FeaturePlanError):
    """Raised when a package set or request document fails validation."""


class PrefetchError(FeaturePlanError):
    """Raised when computing a source checksum through an external process fails."""


class VersionAttributeError(FeaturePlanError):
    """Raised when a generated file has no valid version attribute."""


class VersionMismatchError(FeaturePlanError):
    """Raised when a generated file requires a newer featureplan version."""

    def __init__(self, message: str, requirement: str, found: str, current: str):
        super().__init__(message)
        self.requirement = requirement
        self.found = found
        self.current = current
