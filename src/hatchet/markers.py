"""
Markers attached to member annotations via `Annotated[]`.

```python
@dataclass
class Money:
    amount: Annotated[str, ValueSurrogate]
    note: Annotated[str, Ignore] = ""
```
"""

from __future__ import annotations

from typing import Any

from .inspecting.annotations import Annotation

__all__ = [
    "Ignore",
    "ValueSurrogate",
    "is_ignored",
    "is_value_surrogate",
]


class Ignore:
    """
    Member is never serialized or deserialized.
    """


class ValueSurrogate:
    """
    Member represents its entire owning object as a single value: the object is
    emitted as this member's value rather than as a block, and can be constructed
    from a scalar.
    """


def is_ignored(annotation: Annotation | Any, /) -> bool:
    return _has_marker(annotation, Ignore)


def is_value_surrogate(annotation: Annotation | Any, /) -> bool:
    return _has_marker(annotation, ValueSurrogate)


def _has_marker(annotation: Annotation | Any, marker: type) -> bool:
    extras = Annotation._normalize(annotation).extras
    return any(e is marker or isinstance(e, marker) for e in extras)
