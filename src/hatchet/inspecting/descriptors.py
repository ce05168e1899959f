"""
Per-type descriptors of writable members, built once and cached for the process
lifetime.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from functools import cache
from inspect import Parameter
from types import MappingProxyType
from typing import Any, ClassVar, Self, get_origin, get_type_hints

from ..converting._types import MISSING
from ..exceptions import UnsupportedTypeError
from ..markers import is_ignored, is_value_surrogate
from .annotations import ANY, Annotation

__all__ = [
    "MemberKind",
    "MemberInfo",
    "TypeDescriptor",
    "get_descriptor",
]

logger = logging.getLogger(__name__)

_POSITIONAL_KINDS = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)
_VARIADIC_KINDS = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)


class MemberKind(Enum):
    FIELD = auto()
    PROPERTY = auto()


@dataclass(frozen=True)
class MemberInfo:
    """
    A writable member of a class.
    """

    name: str
    """
    Attribute name, also used as the key in text form.
    """

    kind: MemberKind

    annotation: Annotation
    """
    Declared type, including `Annotated[]` extras.
    """

    ignored: bool = False
    """
    Whether the member is skipped in both directions.
    """

    is_value_surrogate: bool = False
    """
    Whether the member represents the whole owning object.
    """

    in_init: bool = False
    """
    Whether the member is accepted by the constructor as a keyword.
    """

    default: Any = MISSING
    """
    Declared default from the constructor or class, `MISSING` if none.
    """

    def get_value(self, obj: Any, /) -> Any:
        """
        Get this member's value from an instance, or `None` if it was never set.
        """
        return getattr(obj, self.name, None)


@dataclass(frozen=True)
class TypeDescriptor:
    """
    Immutable description of a class's writable members and construction interface.
    """

    cls: type

    members: tuple[MemberInfo, ...]
    """
    Writable members: fields in declaration order (base classes first), then settable
    properties.
    """

    init_params: MappingProxyType[str, Parameter]
    """
    Constructor parameters, excluding `self` and variadic parameters.
    """

    value_surrogate: MemberInfo | None
    """
    Member designated to represent the whole object, if any.
    """

    string_factory: Callable[[str], Any] | None
    """
    Static or class method constructing an instance from a single string.
    """

    has_string_constructor: bool
    """
    Whether the constructor takes a single string argument.
    """

    @property
    def serializable_members(self) -> tuple[MemberInfo, ...]:
        return tuple(m for m in self.members if not m.ignored)

    @property
    def required_init_params(self) -> tuple[str, ...]:
        """
        Names of constructor parameters without a default.
        """
        return tuple(
            name
            for name, param in self.init_params.items()
            if param.default is Parameter.empty
        )

    def get_member(self, name: str, /) -> MemberInfo | None:
        return next((m for m in self.members if m.name == name), None)

    @classmethod
    def build(cls, target_cls: type, /) -> Self:
        """
        Introspect a class. Prefer `get_descriptor()` which caches the result.
        """
        init_params = _get_init_params(target_cls)

        members: dict[str, MemberInfo] = {}
        for name, annotation in _get_field_annotations(target_cls).items():
            members[name] = _create_member(
                target_cls, name, MemberKind.FIELD, annotation, init_params
            )
        for name, annotation in _get_property_annotations(target_cls).items():
            if name not in members:
                members[name] = _create_member(
                    target_cls, name, MemberKind.PROPERTY, annotation, init_params
                )

        surrogates = [m for m in members.values() if m.is_value_surrogate]
        if len(surrogates) > 1:
            raise UnsupportedTypeError(
                target_cls,
                "{} designates more than one value surrogate: {}".format(
                    target_cls.__qualname__, ", ".join(m.name for m in surrogates)
                ),
            )

        return cls(
            cls=target_cls,
            members=tuple(members.values()),
            init_params=MappingProxyType(init_params),
            value_surrogate=surrogates[0] if surrogates else None,
            string_factory=_find_string_factory(target_cls),
            has_string_constructor=_has_string_constructor(target_cls, init_params),
        )


@cache
def get_descriptor(cls: type, /) -> TypeDescriptor:
    """
    Get the descriptor for a class, building it upon first request.
    """
    descriptor = TypeDescriptor.build(cls)
    logger.debug(
        "Built descriptor for %s: members=%s",
        cls.__qualname__,
        [m.name for m in descriptor.members],
    )
    return descriptor


def _create_member(
    cls: type,
    name: str,
    kind: MemberKind,
    annotation: Annotation,
    init_params: dict[str, Parameter],
) -> MemberInfo:
    param = init_params.get(name)

    if param is not None and param.default is not Parameter.empty:
        default = param.default
    elif kind is MemberKind.FIELD:
        default = _get_class_default(cls, name)
    else:
        default = MISSING

    return MemberInfo(
        name=name,
        kind=kind,
        annotation=annotation,
        ignored=is_ignored(annotation),
        is_value_surrogate=is_value_surrogate(annotation),
        in_init=param is not None and param.kind is not Parameter.POSITIONAL_ONLY,
        default=default,
    )


def _get_class_default(cls: type, name: str) -> Any:
    if dataclasses.is_dataclass(cls):
        field = next(f for f in dataclasses.fields(cls) if f.name == name)
        return field.default if field.default is not dataclasses.MISSING else MISSING
    value = inspect.getattr_static(cls, name, MISSING)
    return MISSING if hasattr(value, "__get__") else value


def _get_type_hints(obj: Any) -> dict[str, Any]:
    try:
        return get_type_hints(obj, include_extras=True)
    except (NameError, AttributeError, TypeError) as e:
        raise UnsupportedTypeError(
            obj, f"Failed to resolve type hints for {obj}: {e}"
        ) from e


def _get_field_annotations(cls: type) -> dict[str, Annotation]:
    """
    Get public, non-`ClassVar` annotated attributes in declaration order.
    """
    type_hints = _get_type_hints(cls)

    if dataclasses.is_dataclass(cls):
        names = [f.name for f in dataclasses.fields(cls)]
    else:
        names = []
        for base in reversed(cls.__mro__):
            if base is object:
                continue
            for name in inspect.get_annotations(base):
                if name not in names:
                    names.append(name)

    return {
        name: Annotation(type_hints.get(name, Any))
        for name in names
        if not name.startswith("_")
        and get_origin(type_hints.get(name)) is not ClassVar
        and type_hints.get(name) is not ClassVar
    }


def _get_property_annotations(cls: type) -> dict[str, Annotation]:
    """
    Get public properties having a setter, typed by the getter's return annotation.
    """
    props: dict[str, Annotation] = {}
    for base in reversed(cls.__mro__):
        for name, attr in vars(base).items():
            if name.startswith("_") or not isinstance(attr, property):
                continue
            if attr.fset is None:
                props.pop(name, None)
                continue
            hints = _get_type_hints(attr.fget) if attr.fget else {}
            props[name] = Annotation(hints["return"]) if "return" in hints else ANY
    return props


def _get_init_params(cls: type) -> dict[str, Parameter]:
    try:
        sig = inspect.signature(cls)
    except (ValueError, TypeError):
        return {}
    return {
        name: param
        for name, param in sig.parameters.items()
        if param.kind not in _VARIADIC_KINDS
    }


def _is_str_annotation(annotation: Any) -> bool:
    return annotation is str or annotation == "str"


def _has_string_constructor(cls: type, init_params: dict[str, Parameter]) -> bool:
    if len(init_params) != 1:
        return False
    (name, param), *_ = init_params.items()
    if param.kind not in _POSITIONAL_KINDS:
        return False

    try:
        hints = get_type_hints(cls.__init__)
    except (NameError, AttributeError, TypeError):
        hints = {}
    return _is_str_annotation(hints.get(name, param.annotation))


def _find_string_factory(cls: type) -> Callable[[str], Any] | None:
    """
    Find a static or class method taking exactly one string and returning an instance
    of the class (annotated as the class itself or `Self`).
    """
    seen: set[str] = set()
    for base in cls.__mro__:
        if base is object:
            continue
        for name, attr in vars(base).items():
            if name in seen or not isinstance(attr, (classmethod, staticmethod)):
                continue
            seen.add(name)

            try:
                hints = get_type_hints(attr.__func__)
            except (NameError, AttributeError, TypeError):
                continue
            if hints.get("return") not in (cls, Self):
                continue

            func = getattr(cls, name)
            try:
                params = list(inspect.signature(func).parameters.values())
            except (ValueError, TypeError):
                continue
            if len(params) != 1 or params[0].kind not in _POSITIONAL_KINDS:
                continue
            if not _is_str_annotation(hints.get(params[0].name, params[0].annotation)):
                continue

            return func
    return None
