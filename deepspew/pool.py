"""
Process-wide pools of reusable scratch objects.

Rendering is a hot debug path: every call needs a cycle tracker, per-call traversal
state and often a scratch text buffer. Pools keep idle instances around and hand
them out reset, so nothing leaks from one call into the next.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import io
import threading

from contextlib import contextmanager
from typing import Callable, Generic, Iterator, TypeVar

# Local ----------------------------------------------------------------------------------------------------------------
from .cycles import CycleTracker

T = TypeVar("T")

DEFAULT_POOL_SIZE = 32


# Classes --------------------------------------------------------------------------------------------------------------

class ResourcePool(Generic[T]):
    """
    A lock-guarded free list of reusable objects.

    Pooled objects are owned by exactly one caller between ``acquire`` and ``release``;
    only the free list itself is shared between threads.

    Args:
        factory: Creates a new object when the pool is empty.
        reset: Called on every object handed out by ``acquire``.
        max_size: Maximum number of idle objects kept; extra releases are dropped.

    Examples:
        >>> pool = ResourcePool(list, reset=list.clear)
        >>> with pool.borrow() as scratch:
        ...     scratch.append(1)
        >>> pool.acquire()
        []
    """

    def __init__(
        self,
        factory: Callable[[], T],
        reset: Callable[[T], None] | None = None,
        max_size: int = DEFAULT_POOL_SIZE,
    ) -> None:
        if not callable(factory):
            raise TypeError("factory must be callable")
        if reset is not None and not callable(reset):
            raise TypeError("reset must be callable or None")
        if max_size < 0:
            raise ValueError(f"max_size must be >=0, but got {max_size}")
        self._factory = factory
        self._reset = reset
        self._max_size = max_size
        self._idle: list[T] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        """Number of idle objects."""
        return len(self._idle)

    def acquire(self) -> T:
        """Take an idle object, or create one, and reset it."""
        with self._lock:
            item = self._idle.pop() if self._idle else None
        if item is None:
            item = self._factory()
        if self._reset is not None:
            self._reset(item)
        return item

    def release(self, item: T) -> None:
        """Return an object to the pool."""
        if item is None:
            return
        with self._lock:
            if len(self._idle) < self._max_size:
                self._idle.append(item)

    @contextmanager
    def borrow(self) -> Iterator[T]:
        """Acquire an object for the duration of a ``with`` block; released on every exit path."""
        item = self.acquire()
        try:
            yield item
        finally:
            self.release(item)


# Methods --------------------------------------------------------------------------------------------------------------

def _reset_buffer(buf: io.StringIO) -> None:
    buf.seek(0)
    buf.truncate(0)


# Shared Pools ---------------------------------------------------------------------------------------------------------

cycle_trackers: ResourcePool[CycleTracker] = ResourcePool(CycleTracker, reset=CycleTracker.reset)
text_buffers: ResourcePool[io.StringIO] = ResourcePool(io.StringIO, reset=_reset_buffer)
