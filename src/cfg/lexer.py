"""
Lexer definitions for cfg predicate expressions.
"""

import ply.lex

from .strings import unescape_str


reserved = {
    'cfg': 'CFG',
    'all': 'ALL',
    'any': 'ANY',
    'not': 'NOT',
}

tokens = (
    # Literals (identifier, string)
    'IDENT', 'STRING',

    # Delimeters ( ) , =
    'LPAREN', 'RPAREN', 'COMMA', 'EQUALS',
) + tuple(reserved.values())

# Completely ignored characters
t_ignore = ' \t\r\n'

# Delimeters
t_LPAREN = r'\('
t_RPAREN = r'\)'
t_COMMA = r','
t_EQUALS = r'='


def t_IDENT(t):
    r'[A-Za-z_][A-Za-z0-9_]*'
    t.type = reserved.get(t.value, 'IDENT')
    return t


def t_STRING(t):
    r'"([^"\\]|\\.)*"'
    t.value = unescape_str(t.value[1:-1])
    return t


def t_error(t):
    raise ply.lex.LexError(
        "Illegal character {0!r} at position {1}".format(t.value[0], t.lexpos),
        t.value)


lexer = ply.lex.lex(errorlog=ply.lex.NullLogger())


def tokenize(text):
    """Return the (type, value) pairs of *text*; used for diagnostics."""
    lx = lexer.clone()
    lx.input(text)
    return [(tok.type, tok.value) for tok in iter(lx.token, None)]
