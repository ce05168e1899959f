"""
Test end-to-end serialization via APIs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Iterable, Sequence, Set
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum, Flag
from typing import Annotated
from uuid import UUID

from pytest import raises

from hatchet.deserializing import DeserializationParams, coerce, deserialize
from hatchet.exceptions import (
    CircularReferenceError,
    DepthExceededError,
    InvalidKeyError,
    SerializationError,
    UnsupportedTypeError,
)
from hatchet.markers import Ignore, ValueSurrogate
from hatchet.parsing import parse
from hatchet.registry import TypeRegistry
from hatchet.serializing import SerializationParams, SerializationRule, serialize


class Color(Enum):
    RED = 1
    GREEN = 2


class Permission(Flag):
    NONE = 0
    READ = 1
    WRITE = 2
    EXECUTE = 4


class Mode(Flag):
    A = 1
    B = 2


@dataclass
class Address:
    street: str = ""
    city: str = ""


@dataclass
class Person:
    name: str
    age: int = 0
    address: Address | None = None
    nicknames: list[str] = field(default_factory=list)


@dataclass
class Settings:
    retries: int = 3
    verbose: bool = False
    color: Color = Color.RED


@dataclass
class Session:
    user: str = ""
    token: Annotated[str, Ignore] = "unset"


@dataclass
class Inventory:
    counts: dict[str, int] = field(default_factory=dict)


@dataclass
class Temperature:
    celsius: Annotated[float, ValueSurrogate] = 0.0


@dataclass
class Reading:
    temperature: Temperature | None = None


@dataclass
class Node:
    name: str = ""
    next: Node | None = None


class Money:
    def __init__(self, text: str):
        self.amount = Decimal(text)


class Animal(ABC):
    @abstractmethod
    def speak(self) -> str: ...


@dataclass
class Dog(Animal):
    name: str = ""
    good: bool = False

    def speak(self) -> str:
        return "woof"


@dataclass
class Cat(Animal):
    name: str = ""

    def speak(self) -> str:
        return "meow"


@dataclass
class Zoo:
    animals: list[Animal] = field(default_factory=list)
    star: Animal | None = None


@dataclass
class Route:
    stops: Sequence[Address] = field(default_factory=list)
    detours: Iterable[Address] = field(default_factory=list)
    tags: Set[str] = field(default_factory=set)


@dataclass
class Label:
    text: str | None = None


REGISTRY = TypeRegistry(Dog, Cat)


def test_scalars():
    """
    Test primitive scalars.
    """
    assert serialize(42) == "42"
    assert serialize(-1.5) == "-1.5"
    assert serialize(Decimal("1.50")) == "1.50"
    assert serialize(True) == "true"
    assert serialize(False) == "false"
    assert serialize(None) == "null"
    assert serialize("abc") == '"abc"'
    assert serialize('say "hi"\n') == r'"say \"hi\"\n"'
    assert serialize(date(2024, 1, 2)) == "2024-01-02"
    assert serialize(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05"

    uuid = UUID("12345678-1234-5678-1234-567812345678")
    assert serialize(uuid) == "12345678-1234-5678-1234-567812345678"


def test_sequences():
    """
    Test tuples, lists, sets and other collections.
    """
    assert serialize([1, 2, 3]) == "[1 2 3]"
    assert serialize([]) == "[]"
    assert serialize((1, "a")) == '[1 "a"]'
    assert serialize([[1], [2, 3]]) == "[[1] [2 3]]"
    assert serialize([1, None]) == "[1 null]"
    assert serialize(deque([1, 2])) == "[1 2]"
    assert serialize(range(3)) == "[0 1 2]"

    # sets are sorted
    assert serialize({3, 1, 2}) == "[1 2 3]"
    assert serialize(frozenset({"b", "a"})) == '["a" "b"]'

    # unsortable sets are emitted in iteration order
    result = serialize({1, "a"})
    assert result in ('[1 "a"]', '["a" 1]')


def test_mappings():
    """
    Test mappings, including nesting and skipped entries.
    """
    assert serialize({}) == "{}"
    assert serialize({"a": 1, "b": [1, 2]}) == "{\n  a 1\n  b [1 2]\n}"
    assert serialize({"outer": {"inner": 1}}) == "{\n  outer {\n    inner 1\n  }\n}"

    # entries with null values are skipped
    assert serialize({"a": None, "b": 1}) == "{\n  b 1\n}"

    # keys are formatted by type
    assert serialize({Color.RED: 1, 2: True}) == "{\n  RED 1\n  2 true\n}"


def test_invalid_keys():
    """
    Test mapping keys which can't be represented.
    """
    with raises(InvalidKeyError):
        serialize({"a b": 1})

    with raises(InvalidKeyError):
        serialize({"": 1})

    with raises(InvalidKeyError) as exc_info:
        serialize({"outer": {"x{": 1}})

    assert exc_info.value.key == "x{"
    assert exc_info.value.path == ("outer",)


def test_enums():
    """
    Test enumerations and flags.
    """
    assert serialize(Color.GREEN) == "GREEN"
    assert serialize(Permission.READ) == "READ"
    assert serialize(Permission.READ | Permission.WRITE) == "[READ WRITE]"
    assert serialize(Permission.NONE) == "NONE"

    # zero value without named member
    assert serialize(Mode(0)) == "[]"


def test_records():
    """
    Test records with nested records and default omission.
    """
    assert serialize(Person("Ann")) == '{\n  name "Ann"\n  nicknames []\n}'

    person = Person("Ann", 30, Address("Main St", "Paris"), ["annie"])
    assert serialize(person) == "\n".join(
        [
            "{",
            '  name "Ann"',
            "  age 30",
            "  address {",
            '    street "Main St"',
            '    city "Paris"',
            "  }",
            '  nicknames ["annie"]',
            "}",
        ]
    )

    # ignored members are never emitted
    assert serialize(Session("ann", "secret")) == '{\n  user "ann"\n}'


def test_default_values():
    """
    Test omission of members equal to the zero value of their type.
    """
    # zero values omitted unless the member declares a different default; Color has
    # no zero member
    assert serialize(Settings()) == "{\n  retries 3\n  color RED\n}"
    assert serialize(Settings(retries=0)) == "{\n  retries 0\n  color RED\n}"
    assert (
        serialize(Settings(verbose=True))
        == "{\n  retries 3\n  verbose true\n  color RED\n}"
    )

    params = SerializationParams(include_default_values=True)
    assert serialize(Person("Ann"), params=params) == "\n".join(
        [
            "{",
            '  name "Ann"',
            "  age 0",
            "  nicknames []",
            "}",
        ]
    )

    # default omission doesn't apply to mapping entries
    assert serialize(Inventory({"apple": 0})) == "{\n  counts {\n    apple 0\n  }\n}"


def test_value_surrogate():
    """
    Test records represented by a single member.
    """
    assert serialize(Temperature(21.5)) == "21.5"
    assert serialize(Reading(Temperature(21.5))) == "{\n  temperature 21.5\n}"


def test_discriminator():
    """
    Test emission of discriminators for polymorphic members and elements.
    """
    zoo = Zoo(animals=[Dog("Rex", True), Cat("Tom")], star=Dog("Max"))
    text = serialize(zoo, type_registry=REGISTRY)

    assert text == "\n".join(
        [
            "{",
            "  animals [{",
            "    Class Dog",
            '    name "Rex"',
            "    good true",
            "  } {",
            "    Class Cat",
            '    name "Tom"',
            "  }]",
            "  star {",
            "    Class Dog",
            '    name "Max"',
            "  }",
            "}",
        ]
    )

    assert deserialize(text, Zoo, type_registry=REGISTRY) == zoo


def test_top_level_discriminator():
    """
    Test discriminator at the top level, by declared type or explicitly forced.
    """
    expected = '{\n  Class Dog\n  name "Rex"\n}'

    assert serialize(Dog("Rex")) == '{\n  name "Rex"\n}'
    assert serialize(Dog("Rex"), type_registry=REGISTRY, source_type=Animal) == expected
    assert (
        serialize(Dog("Rex"), type_registry=REGISTRY, force_discriminator=True)
        == expected
    )

    # registered name is used
    registry = TypeRegistry()
    registry.register(Dog, "Hound")
    assert (
        serialize(Dog("Rex"), type_registry=registry, force_discriminator=True)
        == '{\n  Class Hound\n  name "Rex"\n}'
    )


def test_cycles():
    """
    Test detection of reference cycles.
    """
    node = Node("a")
    node.next = node

    with raises(CircularReferenceError):
        serialize(node)

    items: list = []
    items.append(items)

    with raises(CircularReferenceError):
        serialize(items)

    # shared references which aren't cycles are fine
    shared = Node("b")
    assert serialize([shared, shared]) == '[{\n  name "b"\n} {\n  name "b"\n}]'


def test_unsupported():
    """
    Test objects which can't be serialized.
    """
    with raises(UnsupportedTypeError):
        serialize(object())

    with raises(UnsupportedTypeError):
        serialize(b"bytes")

    with raises(UnsupportedTypeError):
        serialize([len])


def test_custom_rules():
    """
    Test custom rules substituting objects.
    """
    rule = SerializationRule(Money, lambda m: str(m.amount))
    assert serialize(Money("1.50"), rule) == '"1.50"'
    assert serialize([Money("1"), Money("2")], rule) == '["1" "2"]'

    assert deserialize(serialize(Money("1.50"), rule), Money).amount == Decimal(
        "1.50"
    )

    # non-library errors are wrapped
    failing = SerializationRule(Money, lambda m: m.missing)
    with raises(SerializationError):
        serialize(Money("1"), failing)


def test_params():
    """
    Test indentation and depth params.
    """
    params = SerializationParams(indent_width=4)
    assert (
        serialize({"a": {"b": 1}}, params=params)
        == "{\n    a {\n        b 1\n    }\n}"
    )

    with raises(DepthExceededError):
        serialize([[[1]]], params=SerializationParams(max_depth=2))


def test_round_trip():
    """
    Test that deserializing serialized text produces an equal object.
    """
    person = Person("Ann Lee", 30, Address("Main St", "Paris"), ["a", "b c"])
    assert deserialize(serialize(person), Person) == person

    settings = Settings(retries=0, verbose=True, color=Color.GREEN)
    assert deserialize(serialize(settings), Settings) == settings

    reading = Reading(Temperature(-3.25))
    assert deserialize(serialize(reading), Reading) == reading

    perms = {"alice": Permission.READ | Permission.EXECUTE, "bob": Permission.NONE}
    assert deserialize(serialize(perms), dict[str, Permission]) == perms


def test_round_trip_abstract_collections():
    """
    Test that records in members declared as abstract collections are emitted
    without `Class` lines, so they can be read back without registering them.
    """
    route = Route(
        stops=[Address("Main St", "Paris"), Address("Elm St", "Oslo")],
        detours=[Address(city="Rome")],
        tags={"scenic"},
    )
    text = serialize(route, type_registry=TypeRegistry())

    assert "Class" not in text
    assert deserialize(text, Route, type_registry=TypeRegistry()) == route


def test_round_trip_null_text():
    """
    Test that an optional string holding the text `null` stays a string.
    """
    label = Label("null")
    assert deserialize(serialize(label), Label) == label
    assert deserialize(serialize(Label()), Label) == Label()


def test_round_trip_max_depth():
    """
    Test that a chain of optional records nested up to the maximum depth is read
    back, and one level more is rejected.
    """

    def make_chain(length: int) -> Node:
        node = Node(f"n{length}")
        for i in reversed(range(1, length)):
            node = Node(f"n{i}", node)
        return node

    max_depth = 40
    chain = make_chain(max_depth)
    text = serialize(chain, params=SerializationParams(max_depth=max_depth))

    assert (
        deserialize(text, Node, params=DeserializationParams(max_depth=max_depth))
        == chain
    )

    text = serialize(make_chain(max_depth + 1))
    with raises(DepthExceededError):
        coerce(
            parse(text), Node, params=DeserializationParams(max_depth=max_depth)
        )
