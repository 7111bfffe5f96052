"""Factory for the configured counter store backend."""

from turnstile.adapters.counter_store.base import AbstractCounterStore
from turnstile.adapters.counter_store.in_memory import InMemoryCounterStore
from turnstile.adapters.counter_store.redis_store import RedisCounterStore
from turnstile.core.config import Settings, settings as default_settings
from turnstile.core.errors import ConfigurationAppError


def create_counter_store(settings: Settings | None = None) -> AbstractCounterStore:
    """Instantiate the counter store selected by ``RATE_LIMIT_BACKEND``.

    Args:
        settings: Settings to read; defaults to the global instance.

    Returns:
        AbstractCounterStore: Redis or in-memory store.

    Raises:
        ConfigurationAppError: If the backend name is unknown.
    """
    cfg = settings or default_settings
    backend = cfg.rate_limit.backend.lower()

    if backend == "redis":
        return RedisCounterStore.from_settings(cfg.redis)

    # Per-process counts only; fine for tests and single-worker deployments
    if backend == "memory":
        return InMemoryCounterStore()

    raise ConfigurationAppError(
        code="rate_limit_unknown_backend",
        message=(
            f"Unknown counter store backend: '{backend}'. Supported backends: redis, memory"
        ),
    )
