"""
Exception classes.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "HatchetError",
    "HatchetSyntaxError",
    "ConversionError",
    "UnknownTypeError",
    "SerializationError",
    "InvalidKeyError",
    "CircularReferenceError",
    "UnsupportedTypeError",
    "DepthExceededError",
    "format_path",
]


def format_path(path: tuple[str | int, ...]) -> str:
    """
    Path tuple formatted as dot notation.

    Examples:

    - `('items', 1, 'value') -> "items[1].value"`
    - `('user', 'name') -> "user.name"`
    - `(0, 'id') -> "[0].id"`
    - `() -> "<root>"`
    """
    if not path:
        return "<root>"
    parts: list[str] = []
    for i, segment in enumerate(path):
        if isinstance(segment, int):
            # index: append as [n]
            parts.append(f"[{segment}]")
        else:
            # field name: prefix with dot
            prefix = "." if i != 0 else ""
            parts.append(f"{prefix}{segment}")
    return "".join(parts)


class HatchetError(Exception):
    """
    Base class for all errors raised by this package.
    """


class HatchetSyntaxError(HatchetError):
    """
    Malformed text: unbalanced delimiters, unterminated strings or unexpected tokens.
    """

    text: str
    """
    Text being parsed.
    """

    pos: int
    """
    Offset into the text at which the error was detected.
    """

    line: int
    """
    1-based line of `pos`.
    """

    column: int
    """
    1-based column of `pos`.
    """

    reason: str

    def __init__(self, text: str, pos: int, reason: str):
        self.text = text
        self.pos = pos
        self.line = text.count("\n", 0, pos) + 1
        self.column = pos - (text.rfind("\n", 0, pos) + 1) + 1
        self.reason = reason
        context = text[max(pos - 10, 0) : pos + 10]
        super().__init__(
            f"{reason} at line {self.line}, column {self.column} (context: {context!r})"
        )


class ConversionError(HatchetError):
    """
    A value could not be coerced into the requested type.
    """

    obj: Any
    """
    The value attempted to be converted.
    """

    annotation: Any
    """
    The requested type.
    """

    path: tuple[str | int, ...]
    """
    Member/index path at which the error was encountered.
    """

    reason: str

    def __init__(
        self,
        obj: Any,
        annotation: Any,
        reason: str,
        path: tuple[str | int, ...] = (),
    ):
        self.obj = obj
        self.annotation = annotation
        self.reason = reason
        self.path = path
        super().__init__(
            f"{format_path(path)}: can't convert {obj!r} to {annotation}: {reason}"
        )


class UnknownTypeError(ConversionError):
    """
    A `Class` discriminator names a type which is not registered.
    """

    name: str

    def __init__(
        self,
        obj: Any,
        annotation: Any,
        name: str,
        path: tuple[str | int, ...] = (),
    ):
        self.name = name
        super().__init__(obj, annotation, f"type is not registered: '{name}'", path)


class SerializationError(HatchetError):
    """
    Base class for errors raised while emitting text.
    """

    obj: Any
    path: tuple[str | int, ...]

    def __init__(self, obj: Any, reason: str, path: tuple[str | int, ...] = ()):
        self.obj = obj
        self.path = path
        self.reason = reason
        super().__init__(f"{format_path(path)}: {reason}")


class InvalidKeyError(SerializationError):
    """
    A mapping or member key can't be represented, e.g. it contains whitespace.
    """

    key: str

    def __init__(self, obj: Any, key: str, path: tuple[str | int, ...] = ()):
        self.key = key
        super().__init__(
            obj,
            f"`{key}` is an invalid key: keys must be non-empty and can't contain "
            "whitespace or structural characters",
            path,
        )


class CircularReferenceError(SerializationError):
    """
    An object was revisited while still on the current emission stack.
    """

    def __init__(self, obj: Any, path: tuple[str | int, ...] = ()):
        super().__init__(
            obj, f"circular reference to {type(obj).__name__} object", path
        )


class UnsupportedTypeError(SerializationError):
    """
    No serialization pattern matches an object's runtime shape.
    """

    def __init__(
        self, obj: Any, reason: str | None = None, path: tuple[str | int, ...] = ()
    ):
        super().__init__(
            obj,
            reason or f"could not serialize {obj!r} of type {type(obj)}",
            path,
        )


class DepthExceededError(HatchetError):
    """
    Nesting exceeded the configured maximum depth.
    """

    max_depth: int

    def __init__(self, max_depth: int, path: tuple[str | int, ...] = ()):
        self.max_depth = max_depth
        self.path = path
        super().__init__(
            f"{format_path(path)}: maximum nesting depth of {max_depth} exceeded"
        )
