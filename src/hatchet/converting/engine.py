"""
Rule dispatch shared by the deserialization and serialization engines.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from ..exceptions import HatchetError
from ..inspecting.annotations import Annotation
from ..registry import TypeRegistry
from .frame import BaseConversionFrame, BaseConversionParams
from .rule import BaseRule, BaseRuleRegistry

__all__ = [
    "BaseConversionEngine",
]


class BaseConversionEngine[
    RuleT: BaseRule,
    RegistryT: BaseRuleRegistry,
    FrameT: BaseConversionFrame,
    ParamsT: BaseConversionParams,
](ABC):
    """
    Base class for conversion engines.

    Orchestrates conversion, dispatching each object to the first matching rule: rules
    passed by the user first, then the builtin rules in precedence order. The first
    error raised terminates the whole conversion.
    """

    rule_registry_cls: ClassVar[type[BaseRuleRegistry]]
    """
    Registry class with which this engine is parameterized.
    """

    frame_cls: ClassVar[type[BaseConversionFrame]]
    """
    Frame class with which this engine is parameterized.
    """

    __user_registry: RegistryT
    """
    User-registered rules.
    """

    def __init__(
        self,
        *,
        rules: tuple[RuleT, ...] = (),
        rule_registry: RegistryT | None = None,
    ):
        # prepare registry and merge additional rules
        if rules and rule_registry is not None:
            user_registry = self.rule_registry_cls(*rule_registry.rules, *rules)
        elif rule_registry is not None:
            user_registry = rule_registry
        else:
            user_registry = self.rule_registry_cls(*rules)

        self.__user_registry = user_registry  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(rule_registry={self.__user_registry})"

    @property
    def rule_registry(self) -> RegistryT:
        return self.__user_registry

    def create_frame(
        self,
        *,
        annotation: Annotation | Any,
        params: ParamsT | None,
        type_registry: TypeRegistry | None,
        **kwargs: Any,
    ) -> FrameT:
        """
        Create a root frame bound to this engine for subsequent processing.
        """
        return self.frame_cls(
            annotation=Annotation._normalize(annotation),
            params=params,
            type_registry=type_registry,
            engine=self,
            **kwargs,
        )  # type: ignore[return-value]

    def process(self, obj: Any, frame: FrameT) -> Any:
        """
        Main conversion dispatcher: find the first matching rule and invoke it.
        """
        rule = self.__find_rule(obj, frame)
        if rule is None:
            raise self._no_match_error(obj, frame)

        try:
            return rule.convert(obj, frame)
        except HatchetError:
            # already describes the failure and its path
            raise
        except Exception as e:
            raise self._wrap_error(obj, frame, rule, e) from e

    @abstractmethod
    def _get_builtin_registry(self) -> RegistryT:
        """
        Get the builtin rules, consulted after the user's rules.
        """

    @abstractmethod
    def _no_match_error(self, obj: Any, frame: FrameT) -> HatchetError:
        """
        Create the error raised when no rule matches.
        """

    @abstractmethod
    def _wrap_error(
        self, obj: Any, frame: FrameT, rule: RuleT, exc: Exception
    ) -> HatchetError:
        """
        Create the error raised when a rule fails with a non-library exception.
        """

    def __find_rule(self, obj: Any, frame: FrameT) -> RuleT | None:
        for registry in (self.__user_registry, self._get_builtin_registry()):
            if rule := registry.find(obj, frame):
                return rule
        return None
