"""Counter store adapters.

The admission engine depends only on ``AbstractCounterStore``. Redis is the
production backend; the in-memory store serves tests and single-process
deployments.
"""

from turnstile.adapters.counter_store.base import AbstractCounterStore, CounterSnapshot
from turnstile.adapters.counter_store.in_memory import InMemoryCounterStore
from turnstile.adapters.counter_store.redis_store import RedisCounterStore

__all__ = [
    "AbstractCounterStore",
    "CounterSnapshot",
    "InMemoryCounterStore",
    "RedisCounterStore",
]
