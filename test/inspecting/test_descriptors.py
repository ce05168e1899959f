"""
Test introspection of classes into type descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, ClassVar, Self

from pytest import raises

from hatchet.converting._types import MISSING
from hatchet.exceptions import UnsupportedTypeError
from hatchet.inspecting.descriptors import MemberKind, get_descriptor
from hatchet.markers import Ignore, ValueSurrogate


@dataclass
class Base:
    id: int
    name: str = ""


@dataclass
class Derived(Base):
    tags: list[str] = field(default_factory=list)
    cache: Annotated[dict[str, int], Ignore] = field(default_factory=dict)
    registry_name: ClassVar[str] = "derived"
    _private: int = 0


class Plain:
    label: str
    count: int = 5

    __size: int

    def __init__(self):
        self.__size = 0

    @property
    def size(self) -> int:
        return self.__size

    @size.setter
    def size(self, value: int):
        self.__size = value

    @property
    def readonly(self) -> int:
        return 1


class Code:
    value: str

    def __init__(self, value: str):
        self.value = value


class Color:
    name: str

    def __init__(self):
        self.name = ""

    @classmethod
    def parse(cls, text: str) -> Self:
        color = cls()
        color.name = text
        return color


@dataclass
class Money:
    amount: Annotated[str, ValueSurrogate] = ""


@dataclass
class TwoSurrogates:
    a: Annotated[str, ValueSurrogate()] = ""
    b: Annotated[str, ValueSurrogate] = ""


def test_dataclass_members():
    """
    Test members of dataclasses, including inherited, ignored and excluded fields.
    """
    descriptor = get_descriptor(Derived)

    assert [m.name for m in descriptor.members] == ["id", "name", "tags", "cache"]
    assert [m.name for m in descriptor.serializable_members] == ["id", "name", "tags"]

    cache = descriptor.get_member("cache")
    assert cache and cache.ignored

    id_ = descriptor.get_member("id")
    assert id_ and id_.in_init and id_.default is MISSING
    assert id_.annotation.concrete_type is int

    name = descriptor.get_member("name")
    assert name and name.default == ""

    assert descriptor.get_member("registry_name") is None
    assert descriptor.get_member("_private") is None
    assert descriptor.required_init_params == ("id",)


def test_plain_class_members():
    """
    Test annotated attributes and settable properties of plain classes.
    """
    descriptor = get_descriptor(Plain)

    assert [m.name for m in descriptor.members] == ["label", "count", "size"]

    count = descriptor.get_member("count")
    assert count and count.default == 5 and not count.in_init

    size = descriptor.get_member("size")
    assert size and size.kind is MemberKind.PROPERTY
    assert size.annotation.concrete_type is int

    assert not descriptor.has_string_constructor
    assert descriptor.string_factory is None


def test_string_construction():
    """
    Test detection of string constructors and factories.
    """
    assert get_descriptor(Code).has_string_constructor

    factory = get_descriptor(Color).string_factory
    assert factory is not None
    assert factory("red").name == "red"


def test_value_surrogate():
    """
    Test designation of value surrogate members.
    """
    surrogate = get_descriptor(Money).value_surrogate
    assert surrogate and surrogate.name == "amount"

    assert get_descriptor(Base).value_surrogate is None

    with raises(UnsupportedTypeError):
        get_descriptor(TwoSurrogates)


def test_cache():
    """
    Test that descriptors are computed once per class.
    """
    assert get_descriptor(Derived) is get_descriptor(Derived)
