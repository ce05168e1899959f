"""
Types used throughout subpackage.
"""

__all__ = [
    "MissingSentinel",
    "MISSING",
]


class MissingSentinel:
    def __repr__(self) -> str:
        return type(self).__name__

    def __bool__(self) -> bool:
        return False


MISSING = MissingSentinel()
"""
Marks the absence of a value where `None` is a legitimate value.
"""
