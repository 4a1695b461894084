"""Platform descriptions and cfg predicate parsing/evaluation."""

from .expr import CfgAll, CfgAny, CfgExpr, CfgKeyPair, CfgName, CfgNot
from .parser import parse_cfg, try_parse_cfg
from .target import (
    Endianness,
    Env,
    Family,
    Os,
    Other,
    Platform,
    PointerWidth,
    parse_endianness,
    parse_env,
    parse_family,
    parse_pointer_width,
)

__all__ = [
    "CfgAll",
    "CfgAny",
    "CfgExpr",
    "CfgKeyPair",
    "CfgName",
    "CfgNot",
    "Endianness",
    "Env",
    "Family",
    "Os",
    "Other",
    "Platform",
    "PointerWidth",
    "parse_cfg",
    "parse_endianness",
    "parse_env",
    "parse_family",
    "parse_pointer_width",
    "try_parse_cfg",
]
