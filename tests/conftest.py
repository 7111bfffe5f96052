"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any turnstile import so the global
settings never point at a real Redis during tests.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import asyncio
from typing import Callable
from unittest.mock import Mock

import pytest
from starlette.requests import Request
from starlette.responses import Response

from turnstile.adapters.counter_store.in_memory import InMemoryCounterStore


FIXED_NOW = 1_000_000.0


def build_request(
    headers: dict[str, str] | None = None,
    client: str | None = "127.0.0.1",
    path: str = "/",
    method: str = "GET",
) -> Request:
    """Build a bare Starlette request without going through a server."""

    raw_headers = [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in (headers or {}).items()
    ]
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "root_path": "",
        "query_string": b"",
        "headers": raw_headers,
        "client": (client, 50000) if client else None,
        "server": ("testserver", 80),
    }
    return Request(scope)


async def ok_handler(request: Request) -> Response:
    return Response(
        content="{}",
        status_code=200,
        headers={"Content-Type": "application/json"},
    )


@pytest.fixture
def clock() -> Mock:
    """Frozen time source; tests advance it by setting return_value."""
    return Mock(return_value=FIXED_NOW)


@pytest.fixture
def store(clock: Mock):
    """In-memory counter store, flushed before and after every test."""
    counter_store = InMemoryCounterStore(clock=clock)
    asyncio.run(counter_store.reset())
    yield counter_store
    asyncio.run(counter_store.reset())


@pytest.fixture
def make_request() -> Callable[..., Request]:
    return build_request


@pytest.fixture
def call() -> Callable:
    """Run an endpoint coroutine to completion for a single request."""

    def _call(endpoint, request: Request) -> Response:
        return asyncio.run(endpoint(request))

    return _call
