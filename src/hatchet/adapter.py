"""
Mechanism for bidirectional type-based conversion (deserialization and
serialization).
"""

from __future__ import annotations

from typing import Any, overload

from .deserializing import (
    DeserializationEngine,
    DeserializationParams,
    DeserializationRuleRegistry,
)
from .inspecting.annotations import Annotation
from .parsing import parse
from .registry import TypeRegistry
from .serializing import (
    SerializationEngine,
    SerializationParams,
    SerializationRuleRegistry,
)
from .typedefs import ValueType

__all__ = [
    "Adapter",
]


class Adapter[T]:
    """
    Bidirectional converter bound to a single type.

    Engines are created once and reused across calls; the declared type is used both
    as deserialization target and to determine required discriminators upon
    serialization.
    """

    __annotation: Annotation
    __type_registry: TypeRegistry | None
    __deserialization_engine: DeserializationEngine
    __serialization_engine: SerializationEngine

    @overload
    def __init__(
        self,
        annotation: type[T],
        /,
        *,
        type_registry: TypeRegistry | None = None,
        deserialization_registry: DeserializationRuleRegistry | None = None,
        serialization_registry: SerializationRuleRegistry | None = None,
    ): ...

    @overload
    def __init__(
        self,
        annotation: Annotation | Any,
        /,
        *,
        type_registry: TypeRegistry | None = None,
        deserialization_registry: DeserializationRuleRegistry | None = None,
        serialization_registry: SerializationRuleRegistry | None = None,
    ): ...

    def __init__(
        self,
        annotation: type[T] | Annotation | Any,
        /,
        *,
        type_registry: TypeRegistry | None = None,
        deserialization_registry: DeserializationRuleRegistry | None = None,
        serialization_registry: SerializationRuleRegistry | None = None,
    ):
        self.__annotation = Annotation._normalize(annotation)
        self.__type_registry = type_registry
        self.__deserialization_engine = DeserializationEngine(
            rule_registry=deserialization_registry
        )
        self.__serialization_engine = SerializationEngine(
            rule_registry=serialization_registry
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.__annotation})"

    @property
    def annotation(self) -> Annotation:
        return self.__annotation

    def coerce(
        self, value: ValueType, *, params: DeserializationParams | None = None
    ) -> T:
        """
        Convert a generic value to the adapted type.

        :param value: Generic value
        :param params: Deserialization params
        :return: Converted object
        """
        frame = self.__deserialization_engine.create_frame(
            annotation=self.__annotation,
            params=params,
            type_registry=self.__type_registry,
        )
        return self.__deserialization_engine.process(value, frame)

    def deserialize(
        self, text: str, *, params: DeserializationParams | None = None
    ) -> T:
        """
        Parse text and convert it to the adapted type.

        :param text: Text to parse
        :param params: Deserialization params
        :return: Converted object
        """
        value = parse(text, max_depth=params.max_depth) if params else parse(text)
        return self.coerce(value, params=params)

    def serialize(
        self,
        obj: T,
        *,
        params: SerializationParams | None = None,
        force_discriminator: bool = False,
    ) -> str:
        """
        Serialize an object of the adapted type.

        :param obj: Object to serialize
        :param params: Serialization params
        :param force_discriminator: Whether to emit a `Class` line for a top-level \
        record even if it's exactly of the adapted type
        :return: Text form
        """
        return self.__serialization_engine.emit(
            obj,
            self.__annotation,
            params=params,
            type_registry=self.__type_registry,
            force_discriminator=force_discriminator,
        )
