"""Admission gate: the request-wrapping entry point of the engine.

On admission the wrapped handler runs and the ``X-RateLimit-<NAME>-*``
headers are merged into its response. On rejection the wrapped handler is
not called and the rate limit handler owns the whole response.

Usage:
    >>> config = RateLimitConfig(
    ...     counter_store=InMemoryCounterStore(),
    ...     rules=[ip_rule(5)],
    ...     remaining_header_enabled=True,
    ... )
    >>> endpoint = wrap_rate_limit(endpoint, config)
"""

from __future__ import annotations

import functools
import inspect
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import Response

from turnstile.adapters.counter_store.base import AbstractCounterStore
from turnstile.limiter.aggregator import aggregate
from turnstile.limiter.boundary import failure_boundary
from turnstile.limiter.models import Decision, RejectionContext, RuleOutcome
from turnstile.limiter.rules import Rule, limit_header, remaining_header, validate_rules

logger = logging.getLogger(__name__)

Handler = Callable[[Request], "Response | Awaitable[Response]"]
RateLimitHandler = Callable[[Request, int, RejectionContext], "Response | Awaitable[Response]"]

TOO_MANY_REQUESTS_BODY = '{"error": "Too Many Requests"}'


def default_rate_limit_handler(
    request: Request,
    retry_after_seconds: int,
    context: RejectionContext | None,
) -> Response:
    """Build the default 429 response."""

    return Response(
        content=TOO_MANY_REQUESTS_BODY,
        status_code=429,
        headers={
            "Content-Type": "application/json",
            "Retry-After": str(retry_after_seconds),
        },
    )


@dataclass
class RateLimitConfig:
    """Configuration of one engine instance.

    Attributes:
        counter_store: Atomic counter backend.
        rules: Rules evaluated on every request, in priority order.
        key_prefix: Namespace isolating this engine's counters from others.
        remaining_header_enabled: Expose ``X-RateLimit-<NAME>-Remaining``.
            The decision and the ``-Limit`` headers are unaffected.
        rate_limit_handler: Builds the response for rejected requests.
        concurrent_evaluation: Issue the per-rule store round trips concurrently.
    """

    counter_store: AbstractCounterStore
    rules: Sequence[Rule]
    key_prefix: str = ""
    remaining_header_enabled: bool = False
    rate_limit_handler: RateLimitHandler = default_rate_limit_handler
    concurrent_evaluation: bool = False

    def __post_init__(self) -> None:
        self.rules = tuple(self.rules)
        validate_rules(self.rules)


def _is_async_callable(obj: object) -> bool:
    return inspect.iscoroutinefunction(obj) or inspect.iscoroutinefunction(
        getattr(obj, "__call__", None)
    )


def rate_limit_headers(decision: Decision, remaining_header_enabled: bool) -> dict[str, str]:
    """Headers describing every applicable rule of ``decision``."""

    headers: dict[str, str] = {}
    for outcome in decision.outcomes:
        headers[limit_header(outcome.rule_name)] = str(outcome.capacity)
        if remaining_header_enabled:
            headers[remaining_header(outcome.rule_name)] = str(outcome.remaining)
    return headers


class AdmissionGate:
    """Applies a ``RateLimitConfig`` around a request handler."""

    def __init__(self, config: RateLimitConfig) -> None:
        self.config = config

    async def decide(self, request: Request) -> Decision:
        """Count the request against every rule.

        Raises:
            RateLimitEngineError: If evaluation fails.
        """
        with failure_boundary():
            return await aggregate(
                self.config.rules,
                request,
                self.config.counter_store,
                self.config.key_prefix,
                concurrent=self.config.concurrent_evaluation,
            )

    async def __call__(self, request: Request, handler: Handler) -> Response:
        decision = await self.decide(request)

        first_exceeded = decision.first_exceeded
        if first_exceeded is not None:
            return await self._reject(request, decision, first_exceeded)

        logger.debug(
            "rate_limit.admitted",
            extra={
                "rules": [outcome.rule_name for outcome in decision.outcomes],
                "request_path": request.url.path,
            },
        )

        if _is_async_callable(handler):
            response = await handler(request)
        else:
            response = await run_in_threadpool(handler, request)
        response.headers.update(
            rate_limit_headers(decision, self.config.remaining_header_enabled)
        )
        return response

    async def _reject(
        self,
        request: Request,
        decision: Decision,
        first_exceeded: RuleOutcome,
    ) -> Response:
        logger.warning(
            "rate_limit.rejected",
            extra={
                "rule_name": first_exceeded.rule_name,
                "count": first_exceeded.count,
                "limit": first_exceeded.capacity,
                "retry_after_s": first_exceeded.reset_in_seconds,
                "request_path": request.url.path,
                "request_method": request.method,
            },
        )

        context = RejectionContext(outcomes=decision.outcomes, first_exceeded=first_exceeded)
        response = self.config.rate_limit_handler(
            request, first_exceeded.reset_in_seconds, context
        )
        if inspect.isawaitable(response):
            response = await response
        return response


def wrap_rate_limit(handler: Handler, config: RateLimitConfig) -> Handler:
    """Wrap a Starlette-style endpoint with the admission gate.

    Args:
        handler: ``(Request) -> Response`` endpoint, sync or async. Sync
            endpoints run in the threadpool, as Starlette runs them.
        config: Engine configuration.

    Returns:
        Endpoint with the same signature.

    Raises:
        ConfigurationAppError: If the rules are invalid.
    """
    gate = AdmissionGate(config)

    @functools.wraps(handler)
    async def rate_limited(request: Request) -> Response:
        return await gate(request, handler)

    return rate_limited
