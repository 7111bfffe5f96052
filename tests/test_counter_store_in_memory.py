"""Unit tests for the in-memory counter store adapter."""

import asyncio
from unittest.mock import Mock

import pytest

from turnstile.adapters.counter_store.in_memory import InMemoryCounterStore


def _incr(store: InMemoryCounterStore, key: str, window: int = 60):
    return asyncio.run(store.increment_and_get(key, window))


def test_counts_up_within_window() -> None:
    store = InMemoryCounterStore(clock=Mock(return_value=1000.0))

    assert _incr(store, "k").count == 1
    assert _incr(store, "k").count == 2
    snapshot = _incr(store, "k")
    assert snapshot.count == 3
    assert snapshot.ttl_seconds == 60


def test_ttl_is_set_on_first_increment_only() -> None:
    clock = Mock(return_value=1000.0)
    store = InMemoryCounterStore(clock=clock)

    assert _incr(store, "k").ttl_seconds == 60

    clock.return_value = 1045.0
    snapshot = _incr(store, "k")
    assert snapshot.count == 2
    assert snapshot.ttl_seconds == 15


def test_fractional_ttl_rounds_up() -> None:
    clock = Mock(return_value=1000.0)
    store = InMemoryCounterStore(clock=clock)
    _incr(store, "k")

    clock.return_value = 1059.2
    assert _incr(store, "k").ttl_seconds == 1


def test_resets_after_expiry() -> None:
    clock = Mock(return_value=1000.0)
    store = InMemoryCounterStore(clock=clock)

    _incr(store, "k", window=10)
    _incr(store, "k", window=10)

    clock.return_value = 1010.0
    snapshot = _incr(store, "k", window=10)
    assert snapshot.count == 1
    assert snapshot.ttl_seconds == 10


def test_isolated_by_key() -> None:
    store = InMemoryCounterStore(clock=Mock(return_value=1000.0))

    _incr(store, "k1")
    _incr(store, "k1")

    assert _incr(store, "k2").count == 1
    assert store.current_count("k1") == 2
    assert store.current_count("missing") == 0


def test_reset_drops_all_counters() -> None:
    store = InMemoryCounterStore(clock=Mock(return_value=1000.0))
    _incr(store, "k1")
    _incr(store, "k2")

    asyncio.run(store.reset())

    assert store.current_count("k1") == 0
    assert _incr(store, "k2").count == 1


def test_concurrent_increments_never_share_a_count() -> None:
    store = InMemoryCounterStore(clock=Mock(return_value=1000.0))

    async def burst():
        return await asyncio.gather(*(store.increment_and_get("k", 60) for _ in range(50)))

    counts = sorted(snapshot.count for snapshot in asyncio.run(burst()))
    assert counts == list(range(1, 51))


def test_invalid_increment_args() -> None:
    store = InMemoryCounterStore()

    with pytest.raises(ValueError):
        _incr(store, "")

    with pytest.raises(ValueError):
        _incr(store, "k", window=0)


def test_expired_counters_of_idle_keys_are_purged() -> None:
    clock = Mock(return_value=1000.0)
    store = InMemoryCounterStore(clock=clock)

    for i in range(1000):
        _incr(store, f"client-{i}", window=60)
    assert store.size() == 1000

    clock.return_value = 4600.0
    _incr(store, "client-new", window=60)

    assert store.size() == 1
    assert store.current_count("client-new") == 1


def test_live_counters_survive_purge() -> None:
    clock = Mock(return_value=1000.0)
    store = InMemoryCounterStore(clock=clock, sweep_interval_seconds=10)

    _incr(store, "short", window=30)
    _incr(store, "long", window=3600)

    clock.return_value = 1100.0
    _incr(store, "other", window=60)

    assert store.size() == 2
    assert store.current_count("long") == 1
    assert store.current_count("short") == 0
