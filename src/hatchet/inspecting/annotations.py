"""
Utilities to inspect type annotations.
"""

from __future__ import annotations

from functools import cached_property
from types import EllipsisType, GenericAlias, NoneType, UnionType
from typing import (
    Annotated,
    Any,
    Literal,
    Self,
    TypeAliasType,
    TypeVar,
    Union,
    cast,
    get_args,
    get_origin,
)

__all__ = [
    "ANY",
    "Annotation",
    "unwrap_alias",
    "split_annotated",
    "normalize_annotation",
    "get_concrete_type",
    "extract_tuple_args",
]

LiteralType = type(Literal["sentinel"])


class Annotation:
    """
    Representation of an annotation with the properties needed to dispatch
    conversion: concrete type, generic arguments and `Annotated[]` extras.

    Unwraps `TypeAlias` and `Annotated` if applicable.
    """

    raw: Any
    """
    Original annotation after stripping `Annotated[]` if applicable. May be a generic
    type.
    """

    extras: tuple[Any, ...]
    """
    Annotation extras, if `Annotated[]` was passed.
    """

    origin: Any
    """
    Origin, non-`None` if annotation is a generic type.
    """

    args: tuple[Any, ...]
    """
    Generic type parameters.
    """

    arg_annotations: tuple[Annotation, ...]
    """
    Annotation info for generic type parameters, only applicable if annotation is not
    `Literal[]`.
    """

    concrete_type: type
    """
    Concrete (non-generic) type, determined based on annotation:
    
    - `Any`: `object`
    - `None`: `NoneType`
    - `Ellipsis`: `EllipsisType`
    - `Union`: `UnionType`
    - Generic type: `get_origin(annotation)`
    - Otherwise: annotation itself, ensuring it's a type
    """

    __cache: dict[int, Self] = {}
    """
    Cache to prevent infinite recursion with recursive type aliases.
    """

    __init_done: bool = False
    """
    Whether initialization has already been completed.
    """

    def __new__(cls, annotation: Any, /) -> Self:
        """
        Create or retrieve cached Annotation instance to support recursive type aliases.
        """
        key = id(annotation)

        if obj := cls.__cache.get(key):
            return obj

        obj = super().__new__(cls)
        cls.__cache[key] = obj
        return obj

    def __init__(self, annotation: Any, /):
        # skip initialization if already done or in progress (cached instance)
        if self.__init_done:
            return

        self.__init_done = True
        # keep the original alive so its id can't be reused while cached
        self.__source = annotation
        raw, extras = split_annotated(unwrap_alias(annotation))
        raw = unwrap_alias(raw)

        self.raw = raw
        self.extras = extras
        self.origin = get_origin(raw)
        self.args = get_args(raw)
        self.arg_annotations = (
            tuple(Annotation(a) for a in self.args)
            if self.origin is not Literal
            else cast(tuple[Annotation, ...], ())
        )
        self.concrete_type = get_concrete_type(raw)

        # validate tuple if applicable
        if issubclass(self.concrete_type, tuple) and len(self.arg_annotations):
            if self.arg_annotations[-1].raw is ...:
                if len(self.arg_annotations) != 2 or self.arg_annotations[0].raw is ...:
                    raise ValueError(f"Invalid variadic tuple: {annotation}")

    def __repr__(self) -> str:
        raw = f"{self.raw}"
        extras = f"extras={self.extras}"
        concrete_type = f"concrete_type={self.concrete_type}"
        return f"Annotation({", ".join((raw, extras, concrete_type))})"

    def __str__(self) -> str:
        if isinstance(self.raw, type) and not self.args:
            return self.raw.__name__
        return str(self.raw)

    def __eq__(self, other: Any, /) -> bool:
        if not isinstance(other, Annotation):
            return False
        if self is other:
            return True
        return self.raw == other.raw

    def __hash__(self) -> int:
        return id(self)

    @property
    def is_any(self) -> bool:
        return self.raw is Any or self.raw is object

    @property
    def is_union(self) -> bool:
        return self.concrete_type is UnionType

    @property
    def is_optional(self) -> bool:
        """
        Whether this is a union which includes `None` alongside at least one other
        type, e.g. `int | None`.
        """
        return (
            self.is_union
            and len(self.arg_annotations) > 1
            and any(a.concrete_type is NoneType for a in self.arg_annotations)
        )

    @cached_property
    def optional_inner(self) -> Annotation:
        """
        For an optional annotation, the annotation with `None` removed.
        """
        assert self.is_optional
        inner = tuple(
            a.raw for a in self.arg_annotations if a.concrete_type is not NoneType
        )
        if len(inner) == 1:
            return Annotation(inner[0])
        return Annotation(Union[inner])

    @classmethod
    def _normalize(cls, obj: Annotation | Any) -> Annotation:
        return obj if isinstance(obj, Annotation) else Annotation(obj)


def unwrap_alias(annotation: Any, /) -> Any:
    """
    If annotation is a `TypeAlias`, extract the corresponding definition.
    """
    if isinstance(annotation, TypeAliasType):
        return annotation.__value__
    elif isinstance(annotation, GenericAlias):
        # might have e.g.:
        # type MyType[T] = list[T]
        # unwrap_alias(MyType[T])
        origin = get_origin(annotation)
        if isinstance(origin, TypeAliasType):
            # have e.g. MyType[T], return list[T]
            return origin.__value__
    return annotation


def split_annotated(annotation: Any, /) -> tuple[Any, tuple[Any, ...]]:
    """
    If annotation is an `Annotated`, split it into the wrapped annotation and extras.
    """
    if get_origin(annotation) is Annotated:
        args = get_args(annotation)
        assert len(args)
        return args[0], tuple(args[1:])
    return annotation, ()


def normalize_annotation(annotation: Any, /) -> Any:
    """
    Unwrap aliases and `Annotated[]`, discarding extras.
    """
    annotation_, _ = split_annotated(unwrap_alias(annotation))
    return unwrap_alias(annotation_)


_SINGLETON_TYPES: dict[Any, type] = {
    None: NoneType,
    Ellipsis: EllipsisType,
    Union: UnionType,
}


def get_concrete_type(annotation: Any, /) -> type:
    """
    Get the class an annotation dispatches on: the origin of a generic, `object`
    for `Any` or an unbound type variable, or the type of a singleton like `None`.
    """
    annotation_ = normalize_annotation(annotation)
    concrete_type = get_origin(annotation_) or annotation_

    if concrete_type is Literal:
        return cast(type, LiteralType)
    if concrete_type is Any:
        return object
    if isinstance(concrete_type, TypeVar):
        return concrete_type.__bound__ or object

    concrete_type = _SINGLETON_TYPES.get(concrete_type, concrete_type)
    if not isinstance(concrete_type, type):
        raise TypeError(f"Not a type: {concrete_type!r} (from {annotation!r})")
    return concrete_type


def extract_tuple_args(
    annotation: Annotation, /
) -> Annotation | tuple[Annotation, ...]:
    """
    Extract args from the tuple.

    - Returns `Annotation` if the tuple is variadic (e.g. `tuple[int, ...]`)
    - Returns a tuple of `Annotation` if the tuple is fixed-length
    (e.g. tuple[int, str])
    """
    assert issubclass(annotation.concrete_type, tuple)
    args = annotation.arg_annotations

    if len(args) == 0:
        # assume tuple[Any, ...]
        return ANY

    if args[-1].raw is ...:
        # variadic tuple like tuple[int, ...]
        assert len(args) == 2
        return args[0]
    else:
        # fixed-length tuple like tuple[int, str]
        return args


ANY = Annotation(Any)
"""
Annotation encapsulating `Any`.
"""
