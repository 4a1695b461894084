"""Escaping helpers for raw platform values.

``escape_default`` and ``unescape_str`` are inverses for every string made of
printable ASCII and the escapes they emit, so an ``Other`` value parsed from
a descriptor prints back exactly as it was written.
"""

import re

_SIMPLE_ESCAPES = {
    "\t": "\\t",
    "\r": "\\r",
    "\n": "\\n",
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
}

_SIMPLE_UNESCAPES = {
    "t": "\t",
    "r": "\r",
    "n": "\n",
    "0": "\0",
    "\\": "\\",
    "'": "'",
    '"': '"',
}

_ESCAPE_RE = re.compile(r"\\(u\{([0-9a-fA-F]{1,6})\}|x([0-9a-fA-F]{2})|.)", re.DOTALL)


def escape_default(value: str) -> str:
    """Escape *value* the way platform tools print raw identifiers."""
    out = []
    for ch in value:
        if ch in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[ch])
        elif " " <= ch <= "~":
            out.append(ch)
        else:
            out.append(f"\\u{{{ord(ch):x}}}")
    return "".join(out)


def unescape_str(value: str) -> str:
    """Resolve backslash escapes in *value*; unknown escapes are kept verbatim."""

    def _replace(match: "re.Match[str]") -> str:
        if match.group(2) is not None:
            code = int(match.group(2), 16)
            return chr(code) if code <= 0x10FFFF else match.group(0)
        if match.group(3) is not None:
            return chr(int(match.group(3), 16))
        char = match.group(1)
        if char in _SIMPLE_UNESCAPES:
            return _SIMPLE_UNESCAPES[char]
        return match.group(0)

    return _ESCAPE_RE.sub(_replace, value)
