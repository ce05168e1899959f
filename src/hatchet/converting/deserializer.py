"""
Deserialization-specific params, frame and rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from ..exceptions import ConversionError
from ..inspecting.annotations import Annotation
from ..inspecting.utils import safe_issubclass
from .frame import BaseConversionFrame, BaseConversionParams
from .rule import BaseRule, BaseRuleRegistry, FuncConverterType, FuncWrapper

__all__ = [
    "DeserializationParams",
    "DeserializationFrame",
    "BaseDeserializationRule",
    "DeserializationRule",
    "DeserializationRuleRegistry",
]


@dataclass(kw_only=True)
class DeserializationParams(BaseConversionParams):
    """
    Deserialization params passed by user.
    """

    fill_missing_defaults: bool = True
    """
    Whether to pass the zero value of its type for a required constructor parameter
    missing from the input, mirroring omission of zero values upon serialization.
    """


class DeserializationFrame(BaseConversionFrame[DeserializationParams]):
    """
    Internal recursion state per frame; `annotation` is the target type.
    """

    params_cls = DeserializationParams

    def error(self, obj: Any, reason: str, /) -> ConversionError:
        """
        Create an error for a value which can't be converted to this frame's type.
        """
        return ConversionError(obj, self.annotation, reason, self.path)


class BaseDeserializationRule(BaseRule[DeserializationFrame]):
    """
    Base class for rules converting a generic value to a target type.
    """


class DeserializationRule(BaseDeserializationRule):
    """
    Function-based rule matching a target type (and optionally its subclasses).

    ```python
    DeserializationRule(Money, Money.parse)
    ```
    """

    target_annotation: Annotation
    """
    Target type handled by this rule.
    """

    match_subclasses: bool
    """
    Whether to also match requests for subclasses of the target type.
    """

    __func: FuncWrapper[DeserializationFrame]
    __predicate: Callable[[Any], bool] | None

    def __init__(
        self,
        target_type: Annotation | Any,
        func: FuncConverterType[DeserializationFrame],
        /,
        *,
        predicate: Callable[[Any], bool] | None = None,
        match_subclasses: bool = False,
    ):
        self.target_annotation = Annotation._normalize(target_type)
        self.match_subclasses = match_subclasses
        self.__func = FuncWrapper(func)
        self.__predicate = predicate

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.target_annotation} <- {self.__func})"

    def matches(self, obj: Any, frame: DeserializationFrame, /) -> bool:
        requested = frame.annotation
        if self.match_subclasses:
            if requested.is_union or not safe_issubclass(
                requested.concrete_type, self.target_annotation.concrete_type
            ):
                return False
        elif requested != self.target_annotation:
            return False
        return self.__predicate is None or self.__predicate(obj)

    def convert(self, obj: Any, frame: DeserializationFrame, /) -> Any:
        return self.__func.invoke(obj, frame)


class DeserializationRuleRegistry(BaseRuleRegistry[BaseDeserializationRule]):
    """
    Registry for managing deserialization rules.
    """
