"""
Parser for the text notation, producing a generic value tree.

Grammar:

```
value    := scalar | sequence | mapping
scalar   := bare | quoted
sequence := "[" value* "]"
mapping  := "{" (scalar value)* "}"
```

Tokens are separated by whitespace. Bare scalars run until whitespace or one of
the structural characters `{ } [ ] "`. Quoted scalars support the escapes `\\"`,
`\\\\`, `\\n`, `\\t` and `\\r`; any other escaped character is kept verbatim.
"""

from __future__ import annotations

import re

from .exceptions import DepthExceededError, HatchetSyntaxError
from .typedefs import DEFAULT_MAX_DEPTH, ValueType

__all__ = [
    "parse",
]

_WHITESPACE = re.compile(r"\s+")
_BARE = re.compile(r'[^\s{}\[\]"]+')
_STRING_CHUNK = re.compile(r'[^"\\]*')

_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "n": "\n",
    "t": "\t",
    "r": "\r",
}


def parse(text: str, /, *, max_depth: int = DEFAULT_MAX_DEPTH) -> ValueType:
    """
    Parse text into a generic value: `str` for scalars, `list` for sequences and
    `dict` for mappings.

    :param text: Text to parse, containing exactly one top-level value
    :param max_depth: Maximum nesting depth of sequences and mappings
    :raises HatchetSyntaxError: If the text is malformed
    :raises DepthExceededError: If nesting exceeds `max_depth`
    """
    pos = _skip_whitespace(text, 0)
    if pos == len(text):
        raise HatchetSyntaxError(text, pos, "Expected a value, got end of input")

    value, pos = _parse_value(text, pos, 0, max_depth)

    pos = _skip_whitespace(text, pos)
    if pos != len(text):
        raise HatchetSyntaxError(
            text, pos, f"Trailing content: {text[pos : pos + 10]!r}"
        )

    return value


def _skip_whitespace(buf: str, pos: int) -> int:
    if m := _WHITESPACE.match(buf, pos):
        return m.end()
    return pos


def _parse_value(
    buf: str, pos: int, depth: int, max_depth: int
) -> tuple[ValueType, int]:
    peek = buf[pos]

    if peek == "{":
        return _parse_mapping(buf, pos, depth + 1, max_depth)
    elif peek == "[":
        return _parse_sequence(buf, pos, depth + 1, max_depth)
    elif peek in "}]":
        raise HatchetSyntaxError(buf, pos, f"Unexpected {peek!r}")

    return _parse_scalar(buf, pos)


def _parse_scalar(buf: str, pos: int) -> tuple[str, int]:
    if buf[pos] == '"':
        return _parse_string(buf, pos)

    m = _BARE.match(buf, pos)
    if not m:
        raise HatchetSyntaxError(buf, pos, f"Unexpected {buf[pos]!r}")
    return m.group(), m.end()


def _parse_string(buf: str, start: int) -> tuple[str, int]:
    chunks: list[str] = []
    pos = start + 1

    while True:
        m = _STRING_CHUNK.match(buf, pos)
        assert m
        chunks.append(m.group())
        pos = m.end()

        if pos >= len(buf):
            raise HatchetSyntaxError(buf, start, "Unterminated string")

        if buf[pos] == '"':
            return "".join(chunks), pos + 1

        # backslash escape
        if pos + 1 >= len(buf):
            raise HatchetSyntaxError(buf, start, "Unterminated string")
        escaped = buf[pos + 1]
        chunks.append(_ESCAPES.get(escaped, "\\" + escaped))
        pos += 2


def _parse_sequence(
    buf: str, start: int, depth: int, max_depth: int
) -> tuple[list[ValueType], int]:
    if depth > max_depth:
        raise DepthExceededError(max_depth)

    out: list[ValueType] = []
    pos = start + 1

    while True:
        pos = _skip_whitespace(buf, pos)
        if pos >= len(buf):
            raise HatchetSyntaxError(buf, start, "Unterminated sequence")

        peek = buf[pos]
        if peek == "]":
            return out, pos + 1
        elif peek == "}":
            raise HatchetSyntaxError(buf, pos, "Unexpected '}' in sequence")

        value, pos = _parse_value(buf, pos, depth, max_depth)
        out.append(value)


def _parse_mapping(
    buf: str, start: int, depth: int, max_depth: int
) -> tuple[dict[str, ValueType], int]:
    if depth > max_depth:
        raise DepthExceededError(max_depth)

    out: dict[str, ValueType] = {}
    pos = start + 1

    while True:
        pos = _skip_whitespace(buf, pos)
        if pos >= len(buf):
            raise HatchetSyntaxError(buf, start, "Unterminated mapping")

        peek = buf[pos]
        if peek == "}":
            return out, pos + 1
        elif peek in "{[]":
            raise HatchetSyntaxError(buf, pos, f"Expected a key, got {peek!r}")

        key_pos = pos
        key, pos = _parse_scalar(buf, pos)
        if key in out:
            raise HatchetSyntaxError(buf, key_pos, f"Duplicate key: {key!r}")

        pos = _skip_whitespace(buf, pos)
        if pos >= len(buf):
            raise HatchetSyntaxError(buf, start, "Unterminated mapping")
        if buf[pos] in "}]":
            raise HatchetSyntaxError(buf, pos, f"Missing value for key {key!r}")

        out[key], pos = _parse_value(buf, pos, depth, max_depth)
