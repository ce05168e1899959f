"""
Indentation-aware text accumulation used by the serialization engine.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

__all__ = [
    "PrettyPrinter",
    "quote",
]

LINE_ENDING = "\n"

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}


def quote(text: str, /) -> str:
    """
    Format text as a quoted literal, escaping backslashes, quotes and line breaks.
    """
    return '"{}"'.format("".join(_ESCAPES.get(c, c) for c in text))


class PrettyPrinter:
    """
    Accumulates emitted text, tracking the current indentation level.

    Blocks are laid out one member per line:

    ```
    {
      Name "Rex"
      Owner {
        Name "Bob"
      }
    }
    ```
    """

    indent_width: int
    """
    Number of spaces per indentation level.
    """

    indent_level: int
    """
    Current indentation level, incremented for each nested value.
    """

    __parts: list[str]

    def __init__(self, indent_width: int = 2):
        self.indent_width = indent_width
        self.indent_level = 0
        self.__parts = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(indent_level={self.indent_level})"

    def getvalue(self) -> str:
        return "".join(self.__parts)

    def append(self, text: str, /):
        self.__parts.append(text)

    def append_string(self, text: str, /):
        self.__parts.append(quote(text))

    def open_block(self):
        self.__parts.append("{" + LINE_ENDING)

    def close_block(self):
        self.__parts.append(" " * (self.indent_level * self.indent_width) + "}")

    def begin_line(self, key: str, /):
        """
        Begin a `key value` line inside the current block.
        """
        indent = " " * ((self.indent_level + 1) * self.indent_width)
        self.__parts.append(f"{indent}{key} ")

    def end_line(self):
        self.__parts.append(LINE_ENDING)

    @contextmanager
    def indented(self) -> Generator[None, None, None]:
        """
        Context manager incrementing the indentation level for a nested value.
        """
        self.indent_level += 1
        try:
            yield
        finally:
            self.indent_level -= 1
