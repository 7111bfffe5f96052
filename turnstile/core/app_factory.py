"""Application factory for the FastAPI app.

Centralizes app construction (logging, counter store, middleware, handlers,
routers) so tests can build isolated apps with their own store.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from turnstile.adapters.counter_store.base import AbstractCounterStore
from turnstile.adapters.counter_store.factory import create_counter_store
from turnstile.api.routes import health_router, ping_router
from turnstile.core.config import Settings, settings as default_settings
from turnstile.core.exception_handlers import setup_exception_handlers
from turnstile.core.logging import configure_logging
from turnstile.core.middleware import request_id_middleware
from turnstile.core.rate_limit import build_rate_limit_config
from turnstile.limiter.middleware import RateLimitMiddleware

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    counter_store: AbstractCounterStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        settings: Settings to use; defaults to the global instance.
        counter_store: Store override; defaults to the configured backend.

    Returns:
        Configured FastAPI app.
    """
    cfg = settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    store = counter_store if counter_store is not None else create_counter_store(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await store.close()

    app = FastAPI(
        title="Turnstile",
        description=(
            "Fixed-window admission engine. Every response carries "
            "X-RateLimit-<RULE>-Limit headers; rejected requests get 429 with "
            "Retry-After."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.counter_store = store

    # Middleware: last added runs first, so request ids wrap rate limit logs
    if cfg.rate_limit.enabled:
        app.add_middleware(
            RateLimitMiddleware,
            config=build_rate_limit_config(cfg.rate_limit, store),
        )
    else:
        logger.warning("rate_limit.disabled")
    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(ping_router, prefix="/v1")
    app.include_router(health_router)

    return app
