"""
Test `Adapter`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pytest import raises

from hatchet.adapter import Adapter
from hatchet.deserializing import DeserializationRule, DeserializationRuleRegistry
from hatchet.exceptions import ConversionError
from hatchet.registry import TypeRegistry
from hatchet.serializing import SerializationParams, serialize


@dataclass
class Shape:
    name: str = ""


@dataclass
class Circle(Shape):
    radius: float = 0.0


@dataclass
class Drawing:
    shapes: list[Shape] = field(default_factory=list)


def test_basic():
    adapter = Adapter(int)

    assert adapter.deserialize("123") == 123
    assert adapter.coerce("123") == 123
    assert adapter.serialize(123) == "123"

    with raises(ConversionError):
        adapter.deserialize("abc")


def test_collection():
    adapter = Adapter(list[int])

    assert adapter.deserialize("[1 2 3]") == [1, 2, 3]
    assert adapter.serialize([1, 2, 3]) == "[1 2 3]"


def test_subtypes():
    """
    Test that subtypes of the adapted type are emitted with discriminators.
    """
    registry = TypeRegistry(Shape, Circle)
    adapter = Adapter(Drawing, type_registry=registry)

    drawing = Drawing([Shape("dot"), Circle("ring", 2.5)])
    text = adapter.serialize(drawing)

    assert text == "\n".join(
        [
            "{",
            "  shapes [{",
            '    name "dot"',
            "  } {",
            "    Class Circle",
            '    name "ring"',
            "    radius 2.5",
            "  }]",
            "}",
        ]
    )
    assert adapter.deserialize(text) == drawing

    # forced at top level
    text = Adapter(Shape, type_registry=registry).serialize(
        Shape("dot"), force_discriminator=True
    )
    assert text == '{\n  Class Shape\n  name "dot"\n}'


def test_registries():
    """
    Test adapter with custom rules and params.
    """
    rules = DeserializationRuleRegistry(DeserializationRule(int, lambda s: int(s, 2)))
    adapter = Adapter(dict[str, int], deserialization_registry=rules)

    assert adapter.deserialize("{ a 101 }") == {"a": 5}
    assert (
        adapter.serialize({"a": 5}, params=SerializationParams(indent_width=4))
        == "{\n    a 5\n}"
    )


def test_serialize_equivalence():
    """
    Test that the adapter emits the same text as `serialize()` with the adapted type
    as source type.
    """
    registry = TypeRegistry(Shape, Circle)
    adapter = Adapter(Shape, type_registry=registry)
    params = SerializationParams(indent_width=4)

    for shape in (Shape("dot"), Circle("ring", 2.5)):
        assert adapter.serialize(shape, params=params) == serialize(
            shape, type_registry=registry, params=params, source_type=Shape
        )
