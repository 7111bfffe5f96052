"""Counter store interface.

The engine never reads-then-writes a counter. Every store exposes a single
atomic increment that returns the post-increment value together with the
time left in the current window.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CounterSnapshot:
    """State of a counter right after an increment.

    Attributes:
        count: Post-increment value for the current window.
        ttl_seconds: Seconds until the window expires, or None when the store
            reported no expiry for the key.
    """

    count: int
    ttl_seconds: int | None


class AbstractCounterStore(ABC):
    """Interface for fixed-window counter backends."""

    @abstractmethod
    async def increment_and_get(self, key: str, window_seconds: int) -> CounterSnapshot:
        """Atomically increment ``key`` and read its remaining lifetime.

        The first increment of a window creates the key with a time-to-live of
        ``window_seconds``. Later increments never extend it.

        Args:
            key: Fully composed counter key.
            window_seconds: Window length applied when the key is created.

        Returns:
            CounterSnapshot for the incremented key.
        """
        raise NotImplementedError

    @abstractmethod
    async def reset(self) -> None:
        """Drop every counter. Intended for test isolation."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release backend resources."""
        return None
