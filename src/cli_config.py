"""Configuration file loading and CLI overrides.

Settings come from an optional YAML or JSON file (the ``featureplan``
section, or the whole mapping when the section is absent); CLI flags take
precedence over file values.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

import yaml

from constants import Constants
from errors import FeaturePlanError

logger = logging.getLogger(__name__)

CONFIG_KEYS = ("root_features_var", "log_level", "prefetch", "build_platform", "host_platform")

DEFAULTS: Dict[str, Any] = {
    "root_features_var": Constants.ROOT_FEATURES_VAR,
    "log_level": None,
    "prefetch": False,
    "build_platform": None,
    "host_platform": None,
}


class ConfigError(FeaturePlanError):
    """Raised when a configuration file exists but cannot be parsed."""


def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Load settings from a YAML/JSON file.

    Args:
        config_path: Path to the config file, or None.

    Returns:
        Known settings found in the file; unknown keys are ignored with a
        warning. A missing file yields an empty mapping.

    Raises:
        ConfigError: If the file cannot be parsed.
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.lower().endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (yaml.YAMLError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to parse config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        logger.warning("Config file %s does not contain a mapping; ignoring it", config_path)
        return {}

    section = data.get(Constants.CONFIG_SECTION, data)
    if not isinstance(section, dict):
        raise ConfigError(f"'{Constants.CONFIG_SECTION}' section of {config_path} must be a mapping")

    unknown = sorted(set(section) - set(CONFIG_KEYS))
    if unknown:
        logger.warning("Ignoring unknown config key(s): %s", ", ".join(unknown))
    logger.info("Loaded config from: %s", config_path)
    return {k: section[k] for k in CONFIG_KEYS if k in section}


def apply_overrides(args, config: Dict[str, Any]) -> Dict[str, Any]:
    """Merge defaults, file settings and CLI flags (highest precedence).

    Args:
        args: Parsed CLI namespace.
        config: Settings returned by :func:`load_config`.

    Returns:
        The effective settings.
    """
    settings = dict(DEFAULTS)
    settings.update(config)
    if getattr(args, "LOG_LEVEL", None):
        settings["log_level"] = str(args.LOG_LEVEL).upper()
    if getattr(args, "ROOT_FEATURES_VAR", None):
        settings["root_features_var"] = args.ROOT_FEATURES_VAR
    if getattr(args, "PREFETCH", False):
        settings["prefetch"] = True
    if getattr(args, "BUILD_PLATFORM", None):
        settings["build_platform"] = args.BUILD_PLATFORM
    if getattr(args, "HOST_PLATFORM", None):
        settings["host_platform"] = args.HOST_PLATFORM
    settings["prefetch"] = bool(settings["prefetch"])
    return settings
