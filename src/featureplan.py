"""featureplan - feature and dependency activation planner.

Entry point of the ``featureplan`` command: loads the package graph document,
runs the fixpoint resolver or the condition engine and writes the result as
JSON.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
from typing import Any, Dict, Optional

from args import parse_args
from cli_config import ConfigError, apply_overrides, load_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from conditions.service import plan_document
from constants import Constants, ExitCodes
from errors import (
    CfgParseError,
    GraphLoadError,
    PrefetchError,
    VersionAttributeError,
    VersionMismatchError,
)
from graph.loader import load_json_file
from resolver.service import resolve_document
from versioning.compat import check_compatible

logger = logging.getLogger(__name__)


def setup_logging(level: Optional[str], log_file: Optional[str]) -> None:
    """Configure console logging and an optional log file."""
    configure_logging(level)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def render_json(data: Dict[str, Any]) -> str:
    return json.dumps(data, indent=2, sort_keys=True) + "\n"


def write_output(data: Dict[str, Any], path: Optional[str]) -> None:
    """Write *data* as JSON to *path* (atomically) or to stdout."""
    text = render_json(data)
    if not path:
        sys.stdout.write(text)
        return
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".featureplan-", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
    logger.info("Wrote %s", path)


def run_resolve(args) -> None:
    raw = load_json_file(args.INPUT)
    write_output(resolve_document(raw), args.OUTPUT)


def run_plan(args, settings: Dict[str, Any]) -> None:
    if args.OUTPUT and os.path.exists(args.OUTPUT):
        # Refuse to overwrite a plan written by a newer version.
        check_compatible(args.OUTPUT)
    raw = load_json_file(args.INPUT)
    plan = plan_document(
        raw,
        root_features_var=settings["root_features_var"],
        prefetch=settings["prefetch"],
        build_platform=settings["build_platform"],
        host_platform=settings["host_platform"],
    )
    write_output(plan, args.OUTPUT)


def run_check_version(args) -> None:
    found = check_compatible(args.FILE)
    print(f"featureplan {Constants.VERSION} can regenerate {args.FILE} (written by {found})")


def run(argv=None) -> int:
    """Parse *argv*, run the selected command and return the exit code."""
    args = parse_args(argv)
    try:
        config = load_config(args.CONFIG)
    except ConfigError as e:
        configure_logging(args.LOG_LEVEL)
        logger.error("%s", e)
        return ExitCodes.FILE_ERROR.value
    settings = apply_overrides(args, config)
    setup_logging(settings["log_level"], args.LOG_FILE)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.COMMAND),
        )

    try:
        if args.COMMAND == "resolve":
            run_resolve(args)
        elif args.COMMAND == "plan":
            run_plan(args, settings)
        else:
            run_check_version(args)
    except (VersionMismatchError, VersionAttributeError) as e:
        logger.error("%s", e)
        return ExitCodes.VERSION_MISMATCH.value
    except (GraphLoadError, CfgParseError) as e:
        logger.error("%s", e)
        return ExitCodes.PARSE_ERROR.value
    except PrefetchError as e:
        logger.error("%s", e)
        return ExitCodes.PREFETCH_ERROR.value
    except OSError as e:
        logger.error("File error: %s", e)
        return ExitCodes.FILE_ERROR.value
    return ExitCodes.SUCCESS.value


def main():
    """Main function of the program."""
    sys.exit(run())


if __name__ == "__main__":
    main()
