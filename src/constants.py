"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    PARSE_ERROR = 2
    VERSION_MISMATCH = 3
    PREFETCH_ERROR = 4


class DepKinds(Enum):
    """Dependency kinds as they appear in a package manifest.

    Args:
        Enum (string): Manifest table names for each dependency kind.
    """

    NORMAL = "dependencies"
    BUILD = "build-dependencies"
    DEV = "dev-dependencies"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    VERSION = "0.9.0"
    VERSION_ATTRIBUTE_NAME = "featureplanVersion"

    DEFAULT_FEATURE = "default"
    ROOT_FEATURES_VAR = "rootFeatures'"
    DEFAULT_OUTPUT_FILE = "plan.json"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "FEATUREPLAN_LOG_LEVEL"
    CONFIG_SECTION = "featureplan"

    PREFETCH_GIT_COMMAND = "nix-prefetch-git"
    PREFETCH_TIMEOUT_SEC = 300
