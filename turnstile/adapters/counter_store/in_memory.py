"""In-memory fixed-window counter store.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from turnstile.adapters.counter_store.base import AbstractCounterStore, CounterSnapshot


@dataclass
class _Counter:
    count: int
    expires_at: float


class InMemoryCounterStore(AbstractCounterStore):
    """Counter store keeping per-key windows in a dict.

    Windows are anchored at the first increment of a key, matching the Redis
    backend where the expiry is set once on creation.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.time,
        sweep_interval_seconds: float = 60.0,
    ) -> None:
        """Initialize the store.

        Args:
            clock: Time source function returning UNIX time in seconds.
            sweep_interval_seconds: Minimum time between purges of expired
                counters left behind by keys that are never hit again.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._counters: dict[str, _Counter] = {}
        self._sweep_interval_seconds = sweep_interval_seconds
        self._next_sweep_at = clock() + sweep_interval_seconds

    def _live_counter(self, key: str, now: float) -> _Counter | None:
        counter = self._counters.get(key)
        if counter is not None and counter.expires_at <= now:
            del self._counters[key]
            return None
        return counter

    def _sweep_expired(self, now: float) -> None:
        if now < self._next_sweep_at:
            return
        expired = [key for key, counter in self._counters.items() if counter.expires_at <= now]
        for key in expired:
            del self._counters[key]
        self._next_sweep_at = now + self._sweep_interval_seconds

    def size(self) -> int:
        """Number of counters currently held, expired or not."""
        with self._lock:
            return len(self._counters)

    async def increment_and_get(self, key: str, window_seconds: int) -> CounterSnapshot:
        """Increment ``key`` within its current window.

        Raises:
            ValueError: If key is empty or window_seconds is invalid.
        """
        if not key:
            raise ValueError("key must be a non-empty string")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        now = self._clock()

        with self._lock:
            self._sweep_expired(now)
            counter = self._live_counter(key, now)
            if counter is None:
                counter = _Counter(count=0, expires_at=now + window_seconds)
                self._counters[key] = counter

            counter.count += 1
            ttl = max(0, int(math.ceil(counter.expires_at - now)))
            return CounterSnapshot(count=counter.count, ttl_seconds=ttl)

    def current_count(self, key: str) -> int:
        """Return the live count for ``key`` (0 when absent or expired)."""
        with self._lock:
            counter = self._live_counter(key, self._clock())
            return counter.count if counter else 0

    async def reset(self) -> None:
        with self._lock:
            self._counters.clear()
