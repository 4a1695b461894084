"""Argument parsing for featureplan."""

import argparse
from constants import Constants


def build_parser():
    """Build the top-level parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog="featureplan",
        description=(
            "featureplan - Feature and dependency activation planner for package graphs"
        ),
        add_help=True,
    )
    parser.add_argument("--version",
                        action="version",
                        version=f"featureplan {Constants.VERSION}")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)

    subparsers = parser.add_subparsers(dest="COMMAND", metavar="COMMAND")
    subparsers.required = True

    resolve = subparsers.add_parser(
        "resolve",
        help="Compute the activation closure of a resolve request",
    )
    resolve.add_argument("-i", "--input",
                         dest="INPUT",
                         help="Resolve request document (JSON)",
                         action="store", type=str,
                         required=True)
    resolve.add_argument("-o", "--output",
                         dest="OUTPUT",
                         help="Path to output file (JSON); defaults to stdout",
                         action="store",
                         type=str)

    plan = subparsers.add_parser(
        "plan",
        help="Compute activation conditions for a workspace",
    )
    plan.add_argument("-i", "--input",
                      dest="INPUT",
                      help="Workspace document (JSON)",
                      action="store", type=str,
                      required=True)
    plan.add_argument("-o", "--output",
                      dest="OUTPUT",
                      help=f"Path to output file (JSON), e.g. {Constants.DEFAULT_OUTPUT_FILE}; defaults to stdout",
                      action="store",
                      type=str)
    plan.add_argument("--prefetch",
                      dest="PREFETCH",
                      help="Compute missing git checksums with nix-prefetch-git",
                      action="store_true")
    plan.add_argument("--root-features-var",
                      dest="ROOT_FEATURES_VAR",
                      help=f"Name of the root-features lookup in conditions (default: {Constants.ROOT_FEATURES_VAR})",
                      action="store",
                      type=str)
    plan.add_argument("--build-platform",
                      dest="BUILD_PLATFORM",
                      help="Target triple for the build platform when the workspace has none",
                      action="store",
                      type=str)
    plan.add_argument("--host-platform",
                      dest="HOST_PLATFORM",
                      help="Target triple for the host platform when the workspace has none",
                      action="store",
                      type=str)

    check = subparsers.add_parser(
        "check-version",
        help="Check that a generated file can be regenerated by this version",
    )
    check.add_argument("FILE",
                       help="Previously generated plan file",
                       type=str)

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
