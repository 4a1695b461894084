"""Fixpoint activation resolver."""

from .fixpoint import FixpointResolver, resolve
from .models import (
    DependingOn,
    EnableFeature,
    EnablePackage,
    PackageRequest,
    Resolution,
    Role,
)

__all__ = [
    "DependingOn",
    "EnableFeature",
    "EnablePackage",
    "FixpointResolver",
    "PackageRequest",
    "Resolution",
    "Role",
    "resolve",
]
