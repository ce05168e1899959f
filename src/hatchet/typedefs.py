"""
Basic definitions shared by the parser and the conversion engines.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

__all__ = [
    "ValueType",
    "ScalarType",
    "CLASS_KEY",
    "NULL_LITERAL",
    "DEFAULT_MAX_DEPTH",
    "is_scalar",
    "is_sequence",
    "is_mapping",
]

type ScalarType = str
"""
Leaf of a parsed value: the raw text of a bare or quoted token.
"""

type ValueType = ScalarType | list[ValueType] | dict[str, ValueType]
"""
Generic value tree produced by the parser: scalars, sequences (`[...]`) and mappings
(`{...}`).
"""

CLASS_KEY = "Class"
"""
Reserved mapping key carrying the type discriminator.
"""

NULL_LITERAL = "null"
"""
Scalar denoting an absent value, matched case-insensitively.
"""

DEFAULT_MAX_DEPTH = 128
"""
Default limit on nesting depth for parsing, coercion and emission.
"""


def is_scalar(value: object) -> bool:
    return isinstance(value, str)


def is_sequence(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, str)


def is_mapping(value: object) -> bool:
    return isinstance(value, Mapping)
