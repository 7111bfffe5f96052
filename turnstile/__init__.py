"""Turnstile: multi-rule fixed-window request admission for ASGI apps."""

from turnstile.core.errors import ENGINE_ORIGIN, RateLimitEngineError, is_engine_failure
from turnstile.limiter import (
    RateLimitConfig,
    RateLimitMiddleware,
    Rule,
    default_rate_limit_handler,
    exempt,
    exempt_paths,
    header_rule,
    ip_rule,
    wrap_rate_limit,
)

__all__ = [
    "ENGINE_ORIGIN",
    "RateLimitConfig",
    "RateLimitEngineError",
    "RateLimitMiddleware",
    "Rule",
    "default_rate_limit_handler",
    "exempt",
    "exempt_paths",
    "header_rule",
    "ip_rule",
    "is_engine_failure",
    "wrap_rate_limit",
]
