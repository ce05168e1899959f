"""
Serialization capability: typed objects to text.
"""

from __future__ import annotations

import logging
from typing import Any

from .converting.builtin_rules import get_builtin_serialization_registry
from .converting.engine import BaseConversionEngine
from .converting.serializer import (
    BaseSerializationRule,
    SerializationFrame,
    SerializationParams,
    SerializationRule,
    SerializationRuleRegistry,
)
from .converting.utils import IMMUTABLE_SCALAR_TYPES, needs_discriminator
from .exceptions import (
    CircularReferenceError,
    HatchetError,
    SerializationError,
    UnsupportedTypeError,
)
from .inspecting.annotations import ANY, Annotation
from .printing import PrettyPrinter
from .registry import TypeRegistry

__all__ = [
    "SerializationParams",
    "SerializationFrame",
    "BaseSerializationRule",
    "SerializationRule",
    "SerializationRuleRegistry",
    "serialize",
]

logger = logging.getLogger(__name__)

DEFAULT_PARAMS = SerializationParams()


class SerializationEngine(
    BaseConversionEngine[
        BaseSerializationRule,
        SerializationRuleRegistry,
        SerializationFrame,
        SerializationParams,
    ]
):
    """
    Orchestrates serialization process, additionally guarding against reference
    cycles.

    Not exposed to user.
    """

    rule_registry_cls = SerializationRuleRegistry
    frame_cls = SerializationFrame

    def process(self, obj: Any, frame: SerializationFrame) -> Any:
        if isinstance(obj, IMMUTABLE_SCALAR_TYPES):
            return super().process(obj, frame)

        obj_id = id(obj)
        if obj_id in frame.seen:
            raise CircularReferenceError(obj, frame.path)

        frame.seen.add(obj_id)
        try:
            return super().process(obj, frame)
        finally:
            frame.seen.discard(obj_id)

    def emit(
        self,
        obj: Any,
        annotation: Annotation,
        *,
        params: SerializationParams | None,
        type_registry: TypeRegistry | None,
        force_discriminator: bool,
    ) -> str:
        """
        Emit a top-level object to a new printer and return its text.
        """
        params_ = params or DEFAULT_PARAMS
        printer = PrettyPrinter(params_.indent_width)
        frame = self.create_frame(
            annotation=annotation,
            params=params_,
            type_registry=type_registry,
            printer=printer,
            force_discriminator=force_discriminator
            or needs_discriminator(obj, annotation),
        )
        self.process(obj, frame)

        text = printer.getvalue()
        logger.debug("Serialized %s to %d characters", type(obj).__name__, len(text))
        return text

    def _get_builtin_registry(self) -> SerializationRuleRegistry:
        return get_builtin_serialization_registry()

    def _no_match_error(self, obj: Any, frame: SerializationFrame) -> HatchetError:
        return UnsupportedTypeError(obj, path=frame.path)

    def _wrap_error(
        self,
        obj: Any,
        frame: SerializationFrame,
        rule: BaseSerializationRule,
        exc: Exception,
    ) -> HatchetError:
        return SerializationError(
            obj, f"{rule} failed on {type(obj).__name__}: {exc}", frame.path
        )


def serialize(
    obj: Any,
    /,
    *rules: BaseSerializationRule,
    rule_registry: SerializationRuleRegistry | None = None,
    type_registry: TypeRegistry | None = None,
    params: SerializationParams | None = None,
    source_type: Annotation | Any | None = None,
    force_discriminator: bool = False,
) -> str:
    """
    Recursively serialize an object to its indented text form.

    Members equal to the zero value of their type are omitted unless configured by
    `params`. A record is emitted with a `Class` line if `force_discriminator` is
    set, or if it's not exactly of the declared `source_type`.

    :param obj: Object to serialize
    :param rules: Custom rules
    :param rule_registry: Registry of custom rules
    :param type_registry: Registry naming types in `Class` lines
    :param params: Parameters to configure serialization behavior
    :param source_type: Declared type of the object, used to determine whether \
    discriminators are required; if `None`, no discriminator is required at the top
    level
    :param force_discriminator: Whether to emit a `Class` line for a top-level record
    :raises SerializationError: If the object can't be serialized
    :raises DepthExceededError: If nesting exceeds the maximum depth
    """
    annotation = Annotation._normalize(source_type) if source_type is not None else ANY
    engine = SerializationEngine(rules=rules, rule_registry=rule_registry)
    return engine.emit(
        obj,
        annotation,
        params=params,
        type_registry=type_registry,
        force_discriminator=force_discriminator,
    )
