"""
Serialization-specific params, frame and rules.
"""

from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, Callable

from ..inspecting.annotations import ANY, Annotation
from ..printing import PrettyPrinter
from .frame import BaseConversionFrame, BaseConversionParams
from .rule import BaseRule, BaseRuleRegistry, FuncConverterType, FuncWrapper

__all__ = [
    "SerializationParams",
    "SerializationFrame",
    "BaseSerializationRule",
    "SerializationRule",
    "SerializationRuleRegistry",
]


@dataclass(kw_only=True)
class SerializationParams(BaseConversionParams):
    """
    Serialization params passed by user.
    """

    include_default_values: bool = False
    """
    Whether to emit members whose value equals the zero value of its type, e.g. `0`
    or `false`.
    """

    indent_width: int = 2
    """
    Number of spaces per indentation level.
    """

    sort_sets: bool = True
    """
    Whether to sort sets, producing deterministic output. Sets with elements which
    can't be compared are emitted in iteration order.
    """


class SerializationFrame(BaseConversionFrame[SerializationParams]):
    """
    Internal recursion state per frame; `annotation` is the declared type of the
    object, or `Any` if unknown.
    """

    params_cls = SerializationParams

    printer: PrettyPrinter
    """
    Printer shared by all frames of a serialization call.
    """

    seen: set[int]
    """
    Ids of objects on the current emission stack, for cycle detection.
    """

    force_discriminator: bool
    """
    Whether a record at this frame must be emitted with its `Class` line.
    """

    def __init__(
        self,
        *,
        printer: PrettyPrinter,
        seen: set[int] | None = None,
        force_discriminator: bool = False,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.printer = printer
        self.seen = seen if seen is not None else set()
        self.force_discriminator = force_discriminator

    def recurse(
        self,
        obj: Any,
        path_segment: str | int,
        /,
        *,
        annotation: Annotation | Any = ANY,
        force_discriminator: bool = False,
        indent: bool = True,
    ) -> Any:
        """
        Emit a nested object, by default one indentation level down. Sequence elements
        are emitted inline at the level of the sequence itself.
        """
        next_frame = self._copy(
            annotation=Annotation._normalize(annotation),
            path_append=path_segment,
            force_discriminator=force_discriminator,
        )
        with self.printer.indented() if indent else nullcontext():
            return self._process(obj, next_frame)

    def _get_copy_kwargs(self) -> dict[str, Any]:
        return {
            **super()._get_copy_kwargs(),
            "printer": self.printer,
            "seen": self.seen,
        }


class BaseSerializationRule(BaseRule[SerializationFrame]):
    """
    Base class for rules emitting an object's text form to the frame's printer.
    """


class SerializationRule(BaseSerializationRule):
    """
    Function-based rule matching instances of a source type. The function returns a
    substitute object which is emitted in place of the original.

    ```python
    SerializationRule(Money, lambda m: str(m.amount))
    ```
    """

    source_annotation: Annotation
    """
    Source type handled by this rule.
    """

    __func: FuncWrapper[SerializationFrame]
    __predicate: Callable[[Any], bool] | None

    def __init__(
        self,
        source_type: Annotation | Any,
        func: FuncConverterType[SerializationFrame],
        /,
        *,
        predicate: Callable[[Any], bool] | None = None,
    ):
        self.source_annotation = Annotation._normalize(source_type)
        self.__func = FuncWrapper(func)
        self.__predicate = predicate

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source_annotation} -> {self.__func})"

    def matches(self, obj: Any, frame: SerializationFrame, /) -> bool:
        _ = frame
        if not isinstance(obj, self.source_annotation.concrete_type):
            return False
        return self.__predicate is None or self.__predicate(obj)

    def convert(self, obj: Any, frame: SerializationFrame, /) -> Any:
        substitute = self.__func.invoke(obj, frame)
        return frame.process_as(substitute, ANY)


class SerializationRuleRegistry(BaseRuleRegistry[BaseSerializationRule]):
    """
    Registry for managing serialization rules.
    """
