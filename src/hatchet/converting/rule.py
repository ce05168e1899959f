"""
Interface for rules: ordered (predicate, handler) pairs consulted by the conversion
engines.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from inspect import Parameter
from typing import Any, cast

from .frame import BaseConversionFrame

__all__ = [
    "FuncConverterType",
    "FuncWrapper",
    "BaseRule",
    "BaseRuleRegistry",
]

type FuncConverterType[FrameT: BaseConversionFrame] = Callable[[Any], Any] | Callable[
    [Any, FrameT], Any
]
"""
Function which converts an object.

Can take the object by itself or the object with frame for recursion or parameter
access.
"""


class FuncWrapper[FrameT: BaseConversionFrame]:
    """
    Encapsulates a user function, invoking it with or without the frame depending on
    its signature.
    """

    func: Callable[..., Any]
    """
    Converter function.
    """

    takes_frame: bool
    """
    Whether the function takes the frame as its second positional parameter.
    """

    def __init__(self, func: FuncConverterType[FrameT]):
        try:
            params = [
                p
                for p in inspect.signature(func).parameters.values()
                if p.kind in (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)
            ]
        except (ValueError, TypeError):
            # can't get signature (e.g. builtins like `str`): assume object only
            params = [None]

        assert len(
            params
        ), f"Function {func} does not take any positional params, must take obj as positional"

        self.func = func
        self.takes_frame = len(params) > 1

    def __repr__(self) -> str:
        return getattr(self.func, "__name__", repr(self.func))

    def invoke(self, obj: Any, frame: FrameT, /) -> Any:
        if self.takes_frame:
            # invoke with frame
            return cast(Callable[[Any, FrameT], Any], self.func)(obj, frame)
        # invoke without frame
        return cast(Callable[[Any], Any], self.func)(obj)


class BaseRule[FrameT: BaseConversionFrame](ABC):
    """
    A single dispatch rule: `matches()` selects the rule, `convert()` handles the
    object.
    """

    def __repr__(self) -> str:
        return type(self).__name__

    @abstractmethod
    def matches(self, obj: Any, frame: FrameT, /) -> bool:
        """
        Check whether this rule handles the object at the given frame.
        """

    @abstractmethod
    def convert(self, obj: Any, frame: FrameT, /) -> Any:
        """
        Convert the object; only called if `matches()` returned `True`.
        """


class BaseRuleRegistry[RuleT: BaseRule](ABC):
    """
    Ordered collection of rules: the first matching rule wins.
    """

    _rules: list[RuleT]
    """
    List of all rules in precedence order.
    """

    def __init__(self, *rules: RuleT):
        self._rules = []
        self.extend(rules)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(rules={self._rules})"

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[RuleT]:
        return iter(self._rules)

    @property
    def rules(self) -> tuple[RuleT, ...]:
        """
        Get rules currently registered.
        """
        return tuple(self._rules)

    def find(self, obj: Any, frame: BaseConversionFrame, /) -> RuleT | None:
        """
        Find the first rule, in registration order, which matches the object.
        """
        for rule in self._rules:
            if rule.matches(obj, frame):
                return rule
        return None

    def register(self, rule: RuleT, /):
        """
        Register a rule with lower precedence than those already registered.
        """
        self._rules.append(rule)

    def extend(self, rules: Iterable[RuleT]):
        """
        Register multiple rules.
        """
        for rule in rules:
            self.register(rule)
