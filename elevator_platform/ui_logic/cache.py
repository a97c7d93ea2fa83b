from __future__ import annotations

"""Time-bounded cache for a single fetched collection."""

import time
from typing import Callable, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class TtlCache(Generic[T]):
    """Holds one collection together with the time it was stored.

    ``get()`` hands back the very object passed to ``store()`` while it is
    younger than ``ttl_seconds``; after that, or after ``invalidate()``, it
    returns None.
    """

    def __init__(self, ttl_seconds: float = 120.0, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: Optional[Tuple[T, float]] = None

    def get(self) -> Optional[T]:
        if self._entry is None:
            return None
        value, stored_at = self._entry
        if self._clock() - stored_at < self.ttl_seconds:
            return value
        return None

    def store(self, value: T) -> None:
        self._entry = (value, self._clock())

    def invalidate(self) -> None:
        self._entry = None

    @property
    def stored_at(self) -> Optional[float]:
        return self._entry[1] if self._entry else None
