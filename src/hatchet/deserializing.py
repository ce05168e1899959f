"""
Deserialization capability: text or generic values to typed objects.
"""

from __future__ import annotations

import logging
from typing import Any, overload

from .converting.builtin_rules import get_builtin_deserialization_registry
from .converting.deserializer import (
    BaseDeserializationRule,
    DeserializationFrame,
    DeserializationParams,
    DeserializationRule,
    DeserializationRuleRegistry,
)
from .converting.engine import BaseConversionEngine
from .exceptions import ConversionError, HatchetError
from .inspecting.annotations import Annotation
from .parsing import parse
from .registry import TypeRegistry
from .typedefs import ValueType

__all__ = [
    "DeserializationParams",
    "DeserializationFrame",
    "BaseDeserializationRule",
    "DeserializationRule",
    "DeserializationRuleRegistry",
    "deserialize",
    "coerce",
]

logger = logging.getLogger(__name__)

DEFAULT_PARAMS = DeserializationParams()


class DeserializationEngine(
    BaseConversionEngine[
        BaseDeserializationRule,
        DeserializationRuleRegistry,
        DeserializationFrame,
        DeserializationParams,
    ]
):
    """
    Orchestrates deserialization process.

    Not exposed to user.
    """

    rule_registry_cls = DeserializationRuleRegistry
    frame_cls = DeserializationFrame

    def _get_builtin_registry(self) -> DeserializationRuleRegistry:
        return get_builtin_deserialization_registry()

    def _no_match_error(self, obj: Any, frame: DeserializationFrame) -> HatchetError:
        return frame.error(obj, "no matching rule")

    def _wrap_error(
        self,
        obj: Any,
        frame: DeserializationFrame,
        rule: BaseDeserializationRule,
        exc: Exception,
    ) -> HatchetError:
        _ = rule
        return ConversionError(obj, frame.annotation, str(exc), frame.path)


@overload
def coerce[T](
    value: ValueType,
    target_type: type[T],
    /,
    *rules: BaseDeserializationRule,
    rule_registry: DeserializationRuleRegistry | None = None,
    type_registry: TypeRegistry | None = None,
    params: DeserializationParams | None = None,
) -> T: ...


@overload
def coerce(
    value: ValueType,
    target_type: Annotation | Any,
    /,
    *rules: BaseDeserializationRule,
    rule_registry: DeserializationRuleRegistry | None = None,
    type_registry: TypeRegistry | None = None,
    params: DeserializationParams | None = None,
) -> Any: ...


def coerce(
    value: ValueType,
    target_type: Annotation | Any,
    /,
    *rules: BaseDeserializationRule,
    rule_registry: DeserializationRuleRegistry | None = None,
    type_registry: TypeRegistry | None = None,
    params: DeserializationParams | None = None,
) -> Any:
    """
    Recursively convert a generic value (as produced by `parse()`) to the target type.

    If both `rules` and `rule_registry` are passed, a new registry is created with
    `rules` appended. User rules take precedence over builtin rules.

    :param value: Generic value: string, list or dict thereof
    :param target_type: Type to convert to
    :param rules: Custom rules
    :param rule_registry: Registry of custom rules
    :param type_registry: Registry resolving `Class` discriminators, process-wide \
    registry if not passed
    :param params: Parameters to configure deserialization behavior
    :raises ConversionError: If the value can't be converted
    :raises DepthExceededError: If nesting exceeds the maximum depth
    """
    engine = DeserializationEngine(rules=rules, rule_registry=rule_registry)
    frame = engine.create_frame(
        annotation=target_type,
        params=params or DEFAULT_PARAMS,
        type_registry=type_registry,
    )
    return engine.process(value, frame)


@overload
def deserialize[T](
    text: str,
    target_type: type[T],
    /,
    *rules: BaseDeserializationRule,
    rule_registry: DeserializationRuleRegistry | None = None,
    type_registry: TypeRegistry | None = None,
    params: DeserializationParams | None = None,
) -> T: ...


@overload
def deserialize(
    text: str,
    target_type: Annotation | Any,
    /,
    *rules: BaseDeserializationRule,
    rule_registry: DeserializationRuleRegistry | None = None,
    type_registry: TypeRegistry | None = None,
    params: DeserializationParams | None = None,
) -> Any: ...


def deserialize(
    text: str,
    target_type: Annotation | Any,
    /,
    *rules: BaseDeserializationRule,
    rule_registry: DeserializationRuleRegistry | None = None,
    type_registry: TypeRegistry | None = None,
    params: DeserializationParams | None = None,
) -> Any:
    """
    Parse text and convert the resulting value to the target type.

    :param text: Text to parse
    :param target_type: Type to convert to
    :param rules: Custom rules
    :param rule_registry: Registry of custom rules
    :param type_registry: Registry resolving `Class` discriminators
    :param params: Parameters to configure deserialization behavior
    :raises HatchetSyntaxError: If the text is malformed
    :raises ConversionError: If the value can't be converted
    """
    params_ = params or DEFAULT_PARAMS
    value = parse(text, max_depth=params_.max_depth)
    logger.debug("Parsed %d characters, converting to %s", len(text), target_type)
    return coerce(
        value,
        target_type,
        *rules,
        rule_registry=rule_registry,
        type_registry=type_registry,
        params=params_,
    )
