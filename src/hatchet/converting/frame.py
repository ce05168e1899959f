"""
Per-recursion state shared by both conversion directions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Self

from ..exceptions import DepthExceededError
from ..inspecting.annotations import ANY, Annotation
from ..registry import TYPE_REGISTRY, TypeRegistry
from ..typedefs import DEFAULT_MAX_DEPTH

if TYPE_CHECKING:
    from .engine import BaseConversionEngine

__all__ = [
    "BaseConversionParams",
    "BaseConversionFrame",
]


@dataclass(kw_only=True)
class BaseConversionParams:
    """
    Common params passed by user.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    """
    Maximum nesting depth before `DepthExceededError` is raised.
    """


class BaseConversionFrame[ParamsT: BaseConversionParams]:
    """
    Internal recursion state per frame.
    """

    params_cls: ClassVar[type[BaseConversionParams]] = BaseConversionParams
    """
    Params class instantiated when no params are passed.
    """

    annotation: Annotation
    """
    Type at this level: the target type when deserializing, the declared type when
    serializing.
    """

    params: ParamsT
    """
    Parameters passed at the entry point.
    """

    type_registry: TypeRegistry
    """
    Registry used to resolve and name discriminators.
    """

    __engine: BaseConversionEngine
    """
    Conversion engine for recursion.
    """

    __path: tuple[str | int, ...]
    """
    Member/index path at this level in recursion.
    """

    __depth: int
    """
    Nesting depth at this level in recursion.
    """

    def __init__(
        self,
        *,
        annotation: Annotation,
        params: ParamsT | None,
        type_registry: TypeRegistry | None,
        engine: BaseConversionEngine,
        path: tuple[str | int, ...] = (),
        depth: int = 0,
    ):
        self.annotation = annotation
        self.params = params or type(self).params_cls()  # type: ignore[assignment]
        self.type_registry = (
            type_registry if type_registry is not None else TYPE_REGISTRY
        )
        self.__engine = engine
        self.__path = path
        self.__depth = depth

    def __repr__(self) -> str:
        return "{}(annotation={}, path={}, depth={})".format(
            type(self).__name__,
            self.annotation,
            self.path,
            self.depth,
        )

    @property
    def path(self) -> tuple[str | int, ...]:
        """
        The current path in the object tree.
        """
        return self.__path

    @property
    def depth(self) -> int:
        return self.__depth

    @property
    def engine(self) -> BaseConversionEngine:
        return self.__engine

    def recurse(
        self,
        obj: Any,
        path_segment: str | int,
        /,
        *,
        annotation: Annotation | Any = ANY,
    ) -> Any:
        """
        Create a new frame one level down and recurse using the engine.
        """
        next_frame = self._copy(
            annotation=Annotation._normalize(annotation),
            path_append=path_segment,
        )
        return self._process(obj, next_frame)

    def process_as(self, obj: Any, annotation: Annotation | Any, /) -> Any:
        """
        Process an object at this same path with a different annotation, e.g. a union
        member or a substituted object. Stays at the current nesting depth.
        """
        next_frame = self._copy(
            annotation=Annotation._normalize(annotation), path_append=None
        )
        return self._process(obj, next_frame)

    def _process(self, obj: Any, frame: Self) -> Any:
        if frame.depth > frame.params.max_depth:
            raise DepthExceededError(frame.params.max_depth, frame.path)
        return self.__engine.process(obj, frame)

    def _get_copy_kwargs(self) -> dict[str, Any]:
        """
        Get constructor arguments carried over to child frames.
        """
        return {
            "params": self.params,
            "type_registry": self.type_registry,
            "engine": self.__engine,
        }

    def _copy(
        self,
        *,
        annotation: Annotation,
        path_append: str | int | None,
        **kwargs: Any,
    ) -> Self:
        """
        Create a frame with the given annotation, one level deeper if a path segment
        is appended.
        """
        if path_append is None:
            path, depth = self.__path, self.__depth
        else:
            path, depth = (*self.__path, path_append), self.__depth + 1
        return type(self)(
            **self._get_copy_kwargs(),
            annotation=annotation,
            path=path,
            depth=depth,
            **kwargs,
        )
