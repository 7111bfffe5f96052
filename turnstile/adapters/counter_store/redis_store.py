"""Redis-backed fixed-window counter store.

A single Lua script increments the counter, sets its expiry on the first
increment of a window and reads the remaining TTL. Redis runs scripts
atomically, so concurrent requests on the same key never observe the same
count and the window boundary never slides.

Connection and timeout errors are deliberately not handled here. They reach
the engine's failure boundary and are reported as engine failures.
"""

from __future__ import annotations

import logging

from redis.asyncio import Redis

from turnstile.adapters.counter_store.base import AbstractCounterStore, CounterSnapshot
from turnstile.core.config import RedisSettings

logger = logging.getLogger(__name__)


# KEYS[1] counter key, ARGV[1] window seconds.
# A key left without expiry (TTL -1) is given one so it cannot count forever.
INCREMENT_SCRIPT = """
local count = redis.call('INCR', KEYS[1])
if count == 1 then
    redis.call('EXPIRE', KEYS[1], ARGV[1])
end
local ttl = redis.call('TTL', KEYS[1])
if ttl == -1 then
    redis.call('EXPIRE', KEYS[1], ARGV[1])
    ttl = tonumber(ARGV[1])
end
return {count, ttl}
"""


class RedisCounterStore(AbstractCounterStore):
    """Counter store using a shared Redis instance.

    Attributes:
        redis: Async Redis client. Owned by this store once passed in.
    """

    def __init__(self, redis: Redis) -> None:
        self.redis = redis
        self._increment = redis.register_script(INCREMENT_SCRIPT)

    @classmethod
    def from_settings(cls, redis_settings: RedisSettings) -> "RedisCounterStore":
        """Build a store from connection settings.

        Args:
            redis_settings: URL and socket timeout for the client.

        Returns:
            RedisCounterStore wrapping a new connection pool.
        """
        client = Redis.from_url(
            redis_settings.url,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=redis_settings.socket_timeout_seconds,
            socket_connect_timeout=redis_settings.socket_timeout_seconds,
        )
        logger.debug("redis_counter_store.created")
        return cls(client)

    async def increment_and_get(self, key: str, window_seconds: int) -> CounterSnapshot:
        count, ttl = await self._increment(keys=[key], args=[window_seconds])
        ttl = int(ttl)
        # Negative TTL: Redis reports no expiry for the key
        return CounterSnapshot(count=int(count), ttl_seconds=ttl if ttl >= 0 else None)

    async def reset(self) -> None:
        await self.redis.flushdb()

    async def close(self) -> None:
        await self.redis.aclose()
        logger.debug("redis_counter_store.closed")
