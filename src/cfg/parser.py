"""
PLY-based parser for cfg predicate expressions.

Accepts both the wrapped form ``cfg(any(unix, windows))`` used as target
table keys and the bare form ``any(unix, windows)``.
"""

import functools
import logging

import ply.lex
import ply.yacc

from errors import CfgParseError

from .expr import CfgAll, CfgAny, CfgKeyPair, CfgName, CfgNot
from .lexer import lexer, tokens  # pylint: disable=unused-import

logger = logging.getLogger(__name__)


class CfgSyntaxError(ValueError):
    """Grammar-level failure raised from inside the parser."""


def p_cfg_wrapped(p):
    """cfg : CFG LPAREN expr RPAREN"""
    p[0] = p[3]


def p_cfg_bare(p):
    """cfg : expr"""
    p[0] = p[1]


def p_expr_name(p):
    """expr : IDENT"""
    p[0] = CfgName(p[1])


def p_expr_key_pair(p):
    """expr : IDENT EQUALS STRING"""
    p[0] = CfgKeyPair(p[1], p[3])


def p_expr_all(p):
    """expr : ALL LPAREN exprlist RPAREN"""
    p[0] = CfgAll(tuple(p[3]))


def p_expr_any(p):
    """expr : ANY LPAREN exprlist RPAREN"""
    p[0] = CfgAny(tuple(p[3]))


def p_expr_not(p):
    """expr : NOT LPAREN expr RPAREN"""
    p[0] = CfgNot(p[3])


def p_exprlist_empty(p):
    """exprlist :"""
    p[0] = []


def p_exprlist_one(p):
    """exprlist : expr"""
    p[0] = [p[1]]


def p_exprlist_more(p):
    """exprlist : expr COMMA exprlist"""
    p[0] = [p[1]] + p[3]


def p_error(p):
    if p is None:
        raise CfgSyntaxError("unexpected end of input")
    raise CfgSyntaxError(
        "unexpected {0} {1!r} at position {2}".format(p.type, p.value, p.lexpos))


parser = ply.yacc.yacc(start='cfg', write_tables=False, debug=False,
                       errorlog=ply.yacc.NullLogger())


@functools.lru_cache(maxsize=1024)
def parse_cfg(text):
    """Parse a cfg predicate.

    Args:
        text: Predicate source, e.g. ``cfg(target_os = "linux")``.

    Returns:
        CfgExpr: The parsed expression tree (immutable, safe to share).

    Raises:
        CfgParseError: If *text* is not a valid predicate.
    """
    try:
        return parser.parse(text, lexer=lexer.clone())
    except (ply.lex.LexError, CfgSyntaxError) as e:
        logger.debug("Failed to parse cfg predicate %r: %s", text, e)
        raise CfgParseError("invalid cfg predicate", text=text, cause=e) from e


def try_parse_cfg(text):
    """Return the parsed predicate, or None if *text* is not a predicate."""
    try:
        return parse_cfg(text)
    except CfgParseError:
        return None
