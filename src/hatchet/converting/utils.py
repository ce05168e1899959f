"""
Helpers shared by the builtin rules.
"""

from __future__ import annotations

import re
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from ..inspecting.annotations import Annotation
from ..inspecting.descriptors import MemberInfo
from ..inspecting.utils import is_polymorphic
from ._types import MISSING, MissingSentinel

__all__ = [
    "IMMUTABLE_SCALAR_TYPES",
    "get_zero_value",
    "is_default_value",
    "get_key_text",
    "is_valid_key",
    "needs_discriminator",
]

IMMUTABLE_SCALAR_TYPES = (
    str,
    bytes,
    int,
    float,
    complex,
    Decimal,
    UUID,
    date,
    time,
    Enum,
    type(None),
)
"""
Types which can't participate in reference cycles.
"""

_ZERO_VALUES: dict[type, Any] = {
    bool: False,
    int: 0,
    float: 0.0,
    complex: 0j,
    Decimal: Decimal(0),
    UUID: UUID(int=0),
}

_INVALID_KEY_CHARS = re.compile(r'[\s{}\[\]"]')


def get_zero_value(annotation: Annotation | Any, /) -> Any | MissingSentinel:
    """
    Get the zero value of a value-like type: `0` for numbers, `False` for `bool`, the
    member with value `0` for enumerations, `None` for optional types. Returns
    `MISSING` if the type has no zero value.
    """
    annotation_ = Annotation._normalize(annotation)
    if annotation_.is_optional:
        return None

    cls = annotation_.concrete_type
    if cls in _ZERO_VALUES:
        return _ZERO_VALUES[cls]
    if issubclass(cls, Enum):
        try:
            return cls(0)
        except ValueError:
            return MISSING
    return MISSING


def is_default_value(value: Any, member: MemberInfo, /) -> bool:
    """
    Check whether a member's value equals the zero value of its runtime type and the
    member doesn't declare a different default.
    """
    zero = get_zero_value(type(value))
    if zero is MISSING or type(zero) is not type(value) or value != zero:
        return False
    return member.default is MISSING or member.default == value


def get_key_text(key: Any, /) -> str:
    """
    Get the text form of a mapping key.
    """
    if isinstance(key, Enum):
        return key.name
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, (date, time)):
        return key.isoformat()
    return str(key)


def is_valid_key(key: str, /) -> bool:
    """
    Check whether a key can be represented: non-empty, without whitespace or
    structural characters.
    """
    return bool(key) and not _INVALID_KEY_CHARS.search(key)


def needs_discriminator(obj: Any, annotation: Annotation, /) -> bool:
    """
    Check whether an object declared as the given type must carry a `Class` line to be
    deserialized as its runtime type.
    """
    if annotation.is_any:
        return False
    if annotation.is_optional:
        annotation = annotation.optional_inner

    declared = annotation.concrete_type
    return type(obj) is not declared or is_polymorphic(declared)
