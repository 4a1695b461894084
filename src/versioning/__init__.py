"""Version compatibility checks for generated files."""

from .compat import check_compatible, current_version, read_version_attribute, version_req

__all__ = ["check_compatible", "current_version", "read_version_attribute", "version_req"]
