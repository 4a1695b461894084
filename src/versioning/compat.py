"""Version compatibility of previously generated plan files.

Every generated file records the featureplan version that produced it,
either as a Nix-style attribute (``featureplanVersion = "0.9.0";``) or as a
JSON member (``"featureplanVersion": "0.9.0"``). A file may only be
regenerated by a version at least as new as its ``major.minor``.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

import semantic_version

from constants import Constants
from errors import VersionAttributeError, VersionMismatchError

logger = logging.getLogger(__name__)

VERSION_LINE = re.compile(
    r'^\s*"?' + re.escape(Constants.VERSION_ATTRIBUTE_NAME) + r'"?\s*[=:]\s*"([^"]*)"'
)


def current_version() -> semantic_version.Version:
    return semantic_version.Version(Constants.VERSION)


def read_version_attribute(path: str) -> semantic_version.Version:
    """Read the version attribute of a generated file.

    Args:
        path: Generated file.

    Returns:
        The recorded version.

    Raises:
        VersionAttributeError: If the file cannot be read or holds no valid
            version attribute.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                match = VERSION_LINE.match(line)
                if not match:
                    continue
                try:
                    return semantic_version.Version(match.group(1))
                except ValueError as e:
                    raise VersionAttributeError(
                        f"valid {Constants.VERSION_ATTRIBUTE_NAME} not found in {path}"
                    ) from e
    except OSError as e:
        raise VersionAttributeError(f"Couldn't open file {path}: {e}") from e
    raise VersionAttributeError(f"valid {Constants.VERSION_ATTRIBUTE_NAME} not found in {path}")


def version_req(path: str) -> Tuple[semantic_version.SimpleSpec, semantic_version.Version]:
    """Requirement ``>=major.minor`` derived from a file's version attribute."""
    version = read_version_attribute(path)
    return semantic_version.SimpleSpec(f">={version.major}.{version.minor}"), version


def check_compatible(path: str, current: Optional[semantic_version.Version] = None) -> semantic_version.Version:
    """Ensure the running version may regenerate *path*.

    Returns:
        The version recorded in the file.

    Raises:
        VersionAttributeError: If the file has no valid version attribute.
        VersionMismatchError: If the file was written by a newer version.
    """
    current = current or current_version()
    requirement, found = version_req(path)
    if not requirement.match(current):
        raise VersionMismatchError(
            f"Version requirement {requirement} [{found}]: your featureplan version is {current}, "
            f"whereas the file '{path}' was generated by a newer version. "
            f"Please upgrade featureplan ({requirement}) to proceed.",
            requirement=str(requirement),
            found=str(found),
            current=str(current),
        )
    logger.info("Version %s matches the requirement %s [%s]", current, requirement, found)
    return found
