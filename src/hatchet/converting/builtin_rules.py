"""
Library of builtin rules, in precedence order.
"""

from __future__ import annotations

import functools
import inspect
import logging
import operator
from collections.abc import Collection, Mapping, Sequence, Set
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum, Flag
from functools import cache
from types import (
    BuiltinFunctionType,
    FunctionType,
    MethodType,
    ModuleType,
    NoneType,
)
from typing import Any, Literal
from uuid import UUID

from ..exceptions import ConversionError, InvalidKeyError, UnknownTypeError
from ..inspecting.annotations import ANY, Annotation, extract_tuple_args
from ..inspecting.descriptors import TypeDescriptor, get_descriptor
from ..inspecting.utils import safe_issubclass
from ..typedefs import CLASS_KEY, NULL_LITERAL, is_mapping, is_scalar, is_sequence
from ._types import MISSING
from .deserializer import (
    BaseDeserializationRule,
    DeserializationFrame,
    DeserializationRuleRegistry,
)
from .serializer import (
    BaseSerializationRule,
    SerializationFrame,
    SerializationRuleRegistry,
)
from .utils import (
    get_key_text,
    get_zero_value,
    is_default_value,
    is_valid_key,
    needs_discriminator,
)

__all__ = [
    "get_builtin_deserialization_registry",
    "get_builtin_serialization_registry",
]

logger = logging.getLogger(__name__)


def _parse_bool(text: str) -> bool:
    match text.lower():
        case "true":
            return True
        case "false":
            return False
    raise ValueError(f"Invalid boolean literal: '{text}'")


SCALAR_PARSERS: dict[type, Any] = {
    str: str,
    bool: _parse_bool,
    int: int,
    float: float,
    complex: complex,
    Decimal: Decimal,
    datetime: datetime.fromisoformat,
    date: date.fromisoformat,
    time: time.fromisoformat,
}
"""
Parsers for primitive scalar types, looked up by exact type.
"""


# ---------------------------------------------------------------------------
# deserialization
# ---------------------------------------------------------------------------


class AnyRule(BaseDeserializationRule):
    """
    Untyped target: return the generic value as-is, unless it's a mapping carrying a
    discriminator.
    """

    def matches(self, obj: Any, frame: DeserializationFrame, /) -> bool:
        return frame.annotation.is_any and not (is_mapping(obj) and CLASS_KEY in obj)

    def convert(self, obj: Any, frame: DeserializationFrame, /) -> Any:
        return obj


class NullableRule(BaseDeserializationRule):
    """
    Optional target like `int | None`: `null` in any letter case maps to `None`,
    anything else is converted to the wrapped type. For `str | None`, `null` is
    kept as text since quoting isn't preserved by the parser.
    """

    def matches(self, obj: Any, frame: DeserializationFrame, /) -> bool:
        annotation = frame.annotation
        return annotation.is_optional or annotation.concrete_type is NoneType

    def convert(self, obj: Any, frame: DeserializationFrame, /) -> Any:
        if (
            is_scalar(obj)
            and obj.lower() == NULL_LITERAL
            and not _is_optional_str(frame.annotation)
        ):
            return None
        if not frame.annotation.is_optional:
            raise frame.error(obj, f"expected '{NULL_LITERAL}'")
        return frame.process_as(obj, frame.annotation.optional_inner)


class UnionRule(BaseDeserializationRule):
    """
    Union target: attempt each member in order, the first success wins.
    """

    def matches(self, obj: Any, frame: DeserializationFrame, /) -> bool:
        return frame.annotation.is_union

    def convert(self, obj: Any, frame: DeserializationFrame, /) -> Any:
        errors: list[str] = []
        for member in frame.annotation.arg_annotations:
            try:
                return frame.process_as(obj, member)
            except ConversionError as e:
                errors.append(f"  {member}: {e.reason}")
        raise frame.error(
            obj, "no union member matched:\n{}".format("\n".join(errors))
        )


class CollectionRule(BaseDeserializationRule):
    """
    Set-like target: build a set of converted elements. List-like target (any type a
    `list` is assignable to): build a list preserving input order.
    """

    def matches(self, obj: Any, frame: DeserializationFrame, /) -> bool:
        return _get_collection_type(frame.annotation) is not None

    def convert(self, obj: Any, frame: DeserializationFrame, /) -> Any:
        if not is_sequence(obj):
            raise frame.error(obj, "expected a sequence")

        collection_type = _get_collection_type(frame.annotation)
        assert collection_type
        item_ann = (
            frame.annotation.arg_annotations[0]
            if frame.annotation.arg_annotations
            else ANY
        )

        items = (
            frame.recurse(o, i, annotation=item_ann) for i, o in enumerate(obj)
        )
        return collection_type(items)


class MappingRule(BaseDeserializationRule):
    """
    Keyed mapping target: convert each key and value independently.
    """

    def matches(self, obj: Any, frame: DeserializationFrame, /) -> bool:
        concrete_type = frame.annotation.concrete_type
        if concrete_type is object:
            return False
        return safe_issubclass(dict, concrete_type) or safe_issubclass(
            concrete_type, dict
        )

    def convert(self, obj: Any, frame: DeserializationFrame, /) -> Any:
        if not is_mapping(obj):
            raise frame.error(obj, "expected a mapping")

        args = frame.annotation.arg_annotations
        key_ann, value_ann = args if len(args) == 2 else (ANY, ANY)

        converted = {
            frame.recurse(k, k, annotation=key_ann): frame.recurse(
                v, k, annotation=value_ann
            )
            for k, v in obj.items()
        }

        concrete_type = frame.annotation.concrete_type
        if concrete_type is not dict and issubclass(concrete_type, dict):
            # e.g. OrderedDict
            return concrete_type(converted)
        return converted


class TupleRule(BaseDeserializationRule):
    """
    Tuple target, either variadic like `tuple[int, ...]` or fixed-length like
    `tuple[int, str]`.
    """

    def matches(self, obj: Any, frame: DeserializationFrame, /) -> bool:
        return frame.annotation.concrete_type is tuple

    def convert(self, obj: Any, frame: DeserializationFrame, /) -> Any:
        if not is_sequence(obj):
            raise frame.error(obj, "expected a sequence")

        item_anns = extract_tuple_args(frame.annotation)
        if isinstance(item_anns, Annotation):
            return tuple(
                frame.recurse(o, i, annotation=item_anns) for i, o in enumerate(obj)
            )

        if len(item_anns) != len(obj):
            raise frame.error(
                obj,
                f"tuple length mismatch: expected {len(item_anns)}, got {len(obj)}",
            )
        return tuple(
            frame.recurse(o, i, annotation=a)
            for i, (o, a) in enumerate(zip(obj, item_anns))
        )


class EnumRule(BaseDeserializationRule):
    """
    Enumeration target: a scalar names a member, matched regardless of letter case; a
    sequence names flags to combine by bitwise OR.
    """

    def matches(self, obj: Any, frame: DeserializationFrame, /) -> bool:
        return safe_issubclass(frame.annotation.concrete_type, Enum)

    def convert(self, obj: Any, frame: DeserializationFrame, /) -> Any:
        enum_cls = frame.annotation.concrete_type
        assert issubclass(enum_cls, Enum)

        if is_scalar(obj):
            return self.__match_member(enum_cls, obj, frame)

        if not is_sequence(obj):
            raise frame.error(obj, "expected a member name or sequence of names")

        members = [self.__match_member(enum_cls, o, frame) for o in obj]

        if issubclass(enum_cls, Flag):
            return functools.reduce(operator.or_, members, enum_cls(0))

        # plain enumeration: only a single name, or the zero member
        if len(members) == 1:
            return members[0]
        if not members:
            zero = get_zero_value(enum_cls)
            if zero is MISSING:
                raise frame.error(obj, f"{enum_cls.__name__} has no zero member")
            return zero
        raise frame.error(
            obj, f"{enum_cls.__name__} is not a flag enumeration, can't combine members"
        )

    def __match_member(
        self, enum_cls: type[Enum], name: Any, frame: DeserializationFrame
    ) -> Enum:
        if not is_scalar(name):
            raise frame.error(name, "expected a member name")
        if name in enum_cls.__members__:
            return enum_cls.__members__[name]

        folded = name.casefold()
        for member_name, member in enum_cls.__members__.items():
            if member_name.casefold() == folded:
                return member

        raise frame.error(name, f"no member of {enum_cls.__name__} named '{name}'")


class UuidRule(BaseDeserializationRule):
    """
    UUID target, parsed from its canonical text form.
    """

    def matches(self, obj: Any, frame: DeserializationFrame, /) -> bool:
        return frame.annotation.concrete_type is UUID

    def convert(self, obj: Any, frame: DeserializationFrame, /) -> Any:
        if not is_scalar(obj):
            raise frame.error(obj, "expected a scalar")
        return UUID(obj)


class ScalarRule(BaseDeserializationRule):
    """
    Primitive target, parsed from its literal form.
    """

    def matches(self, obj: Any, frame: DeserializationFrame, /) -> bool:
        return frame.annotation.concrete_type in SCALAR_PARSERS

    def convert(self, obj: Any, frame: DeserializationFrame, /) -> Any:
        if not is_scalar(obj):
            raise frame.error(obj, "expected a scalar")
        return SCALAR_PARSERS[frame.annotation.concrete_type](obj)


class ComplexRule(BaseDeserializationRule):
    """
    Fallback for classes: a scalar is passed to a string factory or constructor, a
    mapping populates the members of an instance of the target type or of the
    subtype named by its discriminator.
    """

    def matches(self, obj: Any, frame: DeserializationFrame, /) -> bool:
        return not frame.annotation.is_union and frame.annotation.origin is not Literal

    def convert(self, obj: Any, frame: DeserializationFrame, /) -> Any:
        cls = frame.annotation.concrete_type

        if is_scalar(obj):
            return self.__convert_scalar(obj, cls, frame)
        if not is_mapping(obj):
            raise frame.error(obj, f"can't create {cls.__name__} from a sequence")

        if CLASS_KEY in obj:
            cls = self.__resolve_class(obj, cls, frame)
        elif inspect.isabstract(cls):
            raise frame.error(
                obj, f"{cls.__name__} is abstract, '{CLASS_KEY}' key required"
            )

        descriptor = get_descriptor(cls)
        values = {
            m.name: frame.recurse(obj[m.name], m.name, annotation=m.annotation)
            for m in descriptor.members
            if not m.ignored and m.name in obj
        }
        return self.__construct(obj, descriptor, values, frame)

    def __convert_scalar(
        self, obj: str, cls: type, frame: DeserializationFrame
    ) -> Any:
        descriptor = get_descriptor(cls)

        if factory := descriptor.string_factory:
            return factory(obj)
        if descriptor.has_string_constructor:
            return cls(obj)
        if surrogate := descriptor.value_surrogate:
            value = frame.recurse(obj, surrogate.name, annotation=surrogate.annotation)
            return self.__construct(obj, descriptor, {surrogate.name: value}, frame)

        raise frame.error(
            obj,
            f"{cls.__name__} has no factory or constructor taking a single string",
        )

    def __resolve_class(
        self, obj: dict[str, Any], cls: type, frame: DeserializationFrame
    ) -> type:
        name = obj[CLASS_KEY]
        if not is_scalar(name):
            raise frame.error(obj, f"'{CLASS_KEY}' must be a type name")

        resolved = frame.type_registry.resolve(name)
        if resolved is None:
            raise UnknownTypeError(obj, frame.annotation, name, frame.path)
        if not safe_issubclass(resolved, cls):
            raise frame.error(
                obj,
                f"'{name}' resolves to {resolved.__qualname__}, not a {cls.__name__}",
            )

        logger.debug("Resolved '%s' to %s", name, resolved.__qualname__)
        return resolved

    def __construct(
        self,
        obj: Any,
        descriptor: TypeDescriptor,
        values: dict[str, Any],
        frame: DeserializationFrame,
    ) -> Any:
        """
        Create an instance passing constructor parameters, then assign remaining
        members.
        """
        init_kwargs: dict[str, Any] = {}
        for name in list(values):
            member = descriptor.get_member(name)
            if member and member.in_init:
                init_kwargs[name] = values.pop(name)

        for name in descriptor.required_init_params:
            if name in init_kwargs:
                continue
            member = descriptor.get_member(name)
            zero = (
                get_zero_value(member.annotation)
                if member and member.in_init and frame.params.fill_missing_defaults
                else MISSING
            )
            if zero is MISSING:
                raise frame.error(obj, f"missing required member '{name}'")
            init_kwargs[name] = zero

        instance = descriptor.cls(**init_kwargs)
        for name, value in values.items():
            setattr(instance, name, value)
        return instance


def _get_collection_type(annotation: Annotation) -> type | None:
    """
    Get the builtin collection type to create for the annotation, if it's a
    single-element collection.
    """
    concrete_type = annotation.concrete_type
    if concrete_type is frozenset:
        return frozenset
    if safe_issubclass(concrete_type, Set):
        return set if safe_issubclass(set, concrete_type) else frozenset
    if concrete_type is not object and safe_issubclass(list, concrete_type):
        return list
    return None


def _is_optional_str(annotation: Annotation) -> bool:
    return annotation.is_optional and annotation.optional_inner.concrete_type is str


# ---------------------------------------------------------------------------
# serialization
# ---------------------------------------------------------------------------


class NullEmitter(BaseSerializationRule):
    def matches(self, obj: Any, frame: SerializationFrame, /) -> bool:
        return obj is None

    def convert(self, obj: Any, frame: SerializationFrame, /) -> Any:
        frame.printer.append(NULL_LITERAL)


class ArrayEmitter(BaseSerializationRule):
    """
    Tuples: `[a b c]`.
    """

    def matches(self, obj: Any, frame: SerializationFrame, /) -> bool:
        return isinstance(obj, tuple) and not hasattr(obj, "_fields")

    def convert(self, obj: Any, frame: SerializationFrame, /) -> Any:
        args = _get_declared_args(obj, frame.annotation)

        if len(args) == 2 and args[1].raw is ...:
            item_anns = (args[0],) * len(obj)
        elif len(args) == len(obj):
            item_anns = args
        else:
            item_anns = (ANY,) * len(obj)

        _emit_sequence(obj, item_anns, frame)


class MappingEmitter(BaseSerializationRule):
    """
    Mappings: `{}` if empty, else a block of `key value` lines.
    """

    def matches(self, obj: Any, frame: SerializationFrame, /) -> bool:
        return isinstance(obj, Mapping)

    def convert(self, obj: Any, frame: SerializationFrame, /) -> Any:
        printer = frame.printer

        if not obj:
            printer.append("{}")
            return

        args = _get_declared_args(obj, frame.annotation)
        value_ann = args[1] if len(args) == 2 else ANY

        printer.open_block()
        for key, value in obj.items():
            if value is None:
                continue
            _emit_key_value(get_key_text(key), value, value_ann, frame)
        printer.close_block()


class GenericEnumerableEmitter(BaseSerializationRule):
    """
    Lists and sets: `[a b c]`, with discriminators forced for elements of a
    polymorphic declared element type.
    """

    def matches(self, obj: Any, frame: SerializationFrame, /) -> bool:
        return isinstance(obj, (list, set, frozenset))

    def convert(self, obj: Any, frame: SerializationFrame, /) -> Any:
        items = obj
        if isinstance(obj, (set, frozenset)) and frame.params.sort_sets:
            try:
                items = sorted(obj)
            except TypeError:
                items = list(obj)

        args = _get_declared_args(obj, frame.annotation)
        item_ann = args[0] if len(args) == 1 else ANY
        _emit_sequence(items, (item_ann,) * len(obj), frame)


class StringEmitter(BaseSerializationRule):
    def matches(self, obj: Any, frame: SerializationFrame, /) -> bool:
        return isinstance(obj, str) and not isinstance(obj, Enum)

    def convert(self, obj: Any, frame: SerializationFrame, /) -> Any:
        frame.printer.append_string(obj)


class DateTimeEmitter(BaseSerializationRule):
    """
    Dates and times in ISO 8601 form.
    """

    def matches(self, obj: Any, frame: SerializationFrame, /) -> bool:
        return isinstance(obj, (date, time))

    def convert(self, obj: Any, frame: SerializationFrame, /) -> Any:
        frame.printer.append(obj.isoformat())


class BoolEmitter(BaseSerializationRule):
    def matches(self, obj: Any, frame: SerializationFrame, /) -> bool:
        return isinstance(obj, bool)

    def convert(self, obj: Any, frame: SerializationFrame, /) -> Any:
        frame.printer.append("true" if obj else "false")


class ScalarEmitter(BaseSerializationRule):
    """
    Numbers and UUIDs in their canonical text form.
    """

    def matches(self, obj: Any, frame: SerializationFrame, /) -> bool:
        return isinstance(obj, (int, float, complex, Decimal, UUID)) and not isinstance(
            obj, Enum
        )

    def convert(self, obj: Any, frame: SerializationFrame, /) -> Any:
        frame.printer.append(str(obj))


class CollectionEmitter(BaseSerializationRule):
    """
    Other collections like `deque` or `range`, in iteration order.
    """

    def matches(self, obj: Any, frame: SerializationFrame, /) -> bool:
        return isinstance(obj, Collection) and not isinstance(
            obj, (str, bytes, bytearray, memoryview, Enum)
        )

    def convert(self, obj: Any, frame: SerializationFrame, /) -> Any:
        _emit_sequence(list(obj), (ANY,) * len(obj), frame)


class EnumEmitter(BaseSerializationRule):
    """
    Enumerations by member name. Flag values which aren't a named member are emitted
    as a sequence of their constituent member names.
    """

    def matches(self, obj: Any, frame: SerializationFrame, /) -> bool:
        return isinstance(obj, Enum)

    def convert(self, obj: Any, frame: SerializationFrame, /) -> Any:
        enum_cls = type(obj)
        name = next((n for n, m in enum_cls.__members__.items() if m is obj), None)

        if name is not None:
            frame.printer.append(name)
            return

        assert isinstance(obj, Flag)
        names = [m.name for m in obj if m.name is not None]
        frame.printer.append("[{}]".format(" ".join(names)))


class RecordEmitter(BaseSerializationRule):
    """
    Fallback for class instances: the value surrogate's value if designated, else a
    block of members.
    """

    def matches(self, obj: Any, frame: SerializationFrame, /) -> bool:
        if isinstance(
            obj, (type, FunctionType, BuiltinFunctionType, MethodType, ModuleType)
        ):
            return False
        return hasattr(obj, "__dict__") or hasattr(type(obj), "__slots__")

    def convert(self, obj: Any, frame: SerializationFrame, /) -> Any:
        printer = frame.printer
        descriptor = get_descriptor(type(obj))

        if surrogate := descriptor.value_surrogate:
            frame.recurse(
                surrogate.get_value(obj),
                surrogate.name,
                annotation=surrogate.annotation,
            )
            return

        printer.open_block()

        if frame.force_discriminator:
            printer.begin_line(CLASS_KEY)
            printer.append(frame.type_registry.name_of(type(obj)))
            printer.end_line()

        for member in descriptor.serializable_members:
            value = member.get_value(obj)
            if value is None:
                continue
            if not frame.params.include_default_values and is_default_value(
                value, member
            ):
                continue
            _emit_key_value(member.name, value, member.annotation, frame)

        printer.close_block()


def _get_declared_args(obj: Any, annotation: Annotation) -> tuple[Annotation, ...]:
    """
    Get the generic arguments of the declared type, if the object is an instance of
    it.
    """
    if annotation.is_optional:
        annotation = annotation.optional_inner
    if annotation.is_union or not safe_issubclass(
        type(obj), annotation.concrete_type
    ):
        return ()
    return annotation.arg_annotations


def _emit_key_value(
    key: str, value: Any, annotation: Annotation, frame: SerializationFrame
):
    if not is_valid_key(key):
        raise InvalidKeyError(value, key, frame.path)

    frame.printer.begin_line(key)
    frame.recurse(
        value,
        key,
        annotation=annotation,
        force_discriminator=needs_discriminator(value, annotation),
    )
    frame.printer.end_line()


def _emit_sequence(
    items: Sequence[Any],
    annotations: Sequence[Annotation],
    frame: SerializationFrame,
):
    printer = frame.printer
    printer.append("[")
    for i, (item, annotation) in enumerate(zip(items, annotations)):
        if i:
            printer.append(" ")
        frame.recurse(
            item,
            i,
            annotation=annotation,
            force_discriminator=needs_discriminator(item, annotation),
            indent=False,
        )
    printer.append("]")


@cache
def get_builtin_deserialization_registry() -> DeserializationRuleRegistry:
    return DeserializationRuleRegistry(
        AnyRule(),
        NullableRule(),
        UnionRule(),
        CollectionRule(),
        MappingRule(),
        TupleRule(),
        EnumRule(),
        UuidRule(),
        ScalarRule(),
        ComplexRule(),
    )


@cache
def get_builtin_serialization_registry() -> SerializationRuleRegistry:
    return SerializationRuleRegistry(
        NullEmitter(),
        ArrayEmitter(),
        MappingEmitter(),
        GenericEnumerableEmitter(),
        StringEmitter(),
        DateTimeEmitter(),
        BoolEmitter(),
        ScalarEmitter(),
        CollectionEmitter(),
        EnumEmitter(),
        RecordEmitter(),
    )
