"""Multi-rule fixed-window admission engine."""

from turnstile.limiter.aggregator import aggregate
from turnstile.limiter.evaluator import build_counter_key, evaluate
from turnstile.limiter.gate import (
    AdmissionGate,
    RateLimitConfig,
    default_rate_limit_handler,
    rate_limit_headers,
    wrap_rate_limit,
)
from turnstile.limiter.middleware import RateLimitMiddleware
from turnstile.limiter.models import Decision, RejectionContext, RuleOutcome
from turnstile.limiter.rules import (
    Rule,
    exempt,
    exempt_paths,
    header_rule,
    ip_rule,
    validate_rules,
)

__all__ = [
    "AdmissionGate",
    "Decision",
    "RateLimitConfig",
    "RateLimitMiddleware",
    "RejectionContext",
    "Rule",
    "RuleOutcome",
    "aggregate",
    "build_counter_key",
    "default_rate_limit_handler",
    "evaluate",
    "exempt",
    "exempt_paths",
    "header_rule",
    "ip_rule",
    "rate_limit_headers",
    "validate_rules",
    "wrap_rate_limit",
]
