"""
Sentinel objects for values the renderer cannot obtain from the caller's data.

All sentinels use identity checks (using 'is') rather than equality checks.

Sentinels:
    INVALID: A record field that exists in the declaration but cannot be read
             (an unset __slots__ member, a ctypes field raising on access)
    DANGLING: The missing target of an indirection (a dead weakref, a NULL ctypes
              pointer, an empty closure cell)

Example:
    >>> value = read_field(obj, "x")
    >>> if value is INVALID:
    ...     sink.write("<invalid>")
"""

from typing import Any

__all__ = [
    'INVALID',
    'DANGLING',
    'InvalidType',
    'DanglingType',
]


# Base Sentinel --------------------------------------------------------------------------------------------------------

class _SentinelBase:
    """
    Base class for all sentinel objects.

    Sentinels are singleton objects optimized for identity checks.
    They provide clean representations and consistent behavior.
    """
    __slots__ = ('_name',)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        """Returns a clean string representation for debugging."""
        return f'<{self._name}>'

    def __eq__(self, other: Any) -> bool:
        """Ensures identity-based comparison."""
        return self is other

    def __hash__(self) -> int:
        """Returns a hash based on object identity."""
        return id(self)

    def __bool__(self) -> bool:
        """Sentinels are falsy, they stand for an absent value."""
        return False

    def __reduce__(self) -> tuple:
        """Ensure pickling returns the singleton instance."""
        return (self.__class__, ())


# Sentinel Types -------------------------------------------------------------------------------------------------------

class InvalidType(_SentinelBase):
    """
    Sentinel type for INVALID.

    Marks a declared record field whose value could not be read.
    """
    _instance: 'InvalidType | None' = None

    def __new__(cls) -> 'InvalidType':
        """Ensures singleton behavior."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, '_name'):
            super().__init__("INVALID")


class DanglingType(_SentinelBase):
    """
    Sentinel type for DANGLING.

    Returned when following an indirection that points nowhere. Distinct from None,
    which is a perfectly valid target of a closure cell or a ctypes py_object.
    """
    _instance: 'DanglingType | None' = None

    def __new__(cls) -> 'DanglingType':
        """Ensures singleton behavior."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, '_name'):
            super().__init__("DANGLING")


# Sentinel Instances ---------------------------------------------------------------------------------------------------

INVALID = InvalidType()
DANGLING = DanglingType()
