"""
Registry mapping discriminator names to concrete types, used to resolve the `Class`
key of a mapping to a constructible subtype.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

__all__ = [
    "TypeRegistry",
    "TYPE_REGISTRY",
    "register_type",
]

logger = logging.getLogger(__name__)


class TypeRegistry:
    """
    Mapping of discriminator name to type.

    Populated by the host application before any polymorphic deserialization; only
    read by the conversion engines.
    """

    __types: dict[str, type]
    __names: dict[type, str]

    def __init__(self, *types: type):
        self.__types = {}
        self.__names = {}
        for cls in types:
            self.register(cls)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(self.__types)})"

    def __contains__(self, name: object) -> bool:
        return name in self.__types

    def __len__(self) -> int:
        return len(self.__types)

    def __iter__(self) -> Iterator[str]:
        return iter(self.__types)

    def register(self, cls: type, /, name: str | None = None) -> type:
        """
        Register a type under the given name, defaulting to the class name.

        :raises ValueError: If the name is already registered to a different type
        """
        name_ = name or cls.__name__
        if (existing := self.__types.get(name_)) is not None and existing is not cls:
            raise ValueError(
                f"Name '{name_}' already registered to {existing.__qualname__}, "
                f"can't register {cls.__qualname__}"
            )

        self.__types[name_] = cls
        self.__names.setdefault(cls, name_)
        logger.debug("Registered type %s as '%s'", cls.__qualname__, name_)
        return cls

    def resolve(self, name: str, /) -> type | None:
        """
        Get the type registered under the given name, or `None` if not registered.
        """
        return self.__types.get(name)

    def name_of(self, cls: type, /) -> str:
        """
        Get the name under which a type was first registered, falling back to the class
        name.
        """
        return self.__names.get(cls, cls.__name__)


TYPE_REGISTRY = TypeRegistry()
"""
Process-wide registry used when no registry is passed explicitly.
"""


def register_type[T: type](
    name: str | None = None, /, *, registry: TypeRegistry | None = None
) -> Callable[[T], T]:
    """
    Class decorator to register a type, by default in the process-wide registry.

    ```python
    @register_type()
    @dataclass
    class Dog(Animal):
        name: str = ""
    ```
    """

    def wrapper(cls: T) -> T:
        (registry if registry is not None else TYPE_REGISTRY).register(cls, name)
        return cls

    return wrapper
