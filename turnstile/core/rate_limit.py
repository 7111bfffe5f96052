"""Settings-driven construction of the admission engine.

Design goals:
- Rules come from environment configuration; code only picks the rule kinds.
- The header rule runs first so API clients see their own budget before the
  shared per-address budget.
- Exempt paths are applied to every rule.
"""

from __future__ import annotations

import logging

from turnstile.adapters.counter_store.base import AbstractCounterStore
from turnstile.core.config import RateLimitSettings, parse_csv
from turnstile.limiter.gate import RateLimitConfig
from turnstile.limiter.rules import Rule, exempt_paths, header_rule, ip_rule

logger = logging.getLogger(__name__)


def build_rules(rate_limit_settings: RateLimitSettings) -> list[Rule]:
    """Build the configured rule list, in evaluation order.

    Args:
        rate_limit_settings: Resolved ``RATE_LIMIT_*`` settings.

    Returns:
        Rules ready for ``RateLimitConfig``.
    """
    cfg = rate_limit_settings
    rules: list[Rule] = []

    if cfg.header_capacity is not None:
        rules.append(
            header_rule(
                cfg.header_capacity,
                cfg.header_name,
                cfg.header_rule_name,
                cfg.header_window_seconds,
            )
        )

    rules.append(
        ip_rule(
            cfg.ip_capacity,
            cfg.ip_window_seconds,
            forwarded_header=cfg.forwarded_header,
        )
    )

    skipped = parse_csv(cfg.exempt_paths)
    return [exempt_paths(rule, skipped) for rule in rules]


def build_rate_limit_config(
    rate_limit_settings: RateLimitSettings,
    counter_store: AbstractCounterStore,
) -> RateLimitConfig:
    """Assemble the engine configuration from settings and a store."""

    rules = build_rules(rate_limit_settings)
    config = RateLimitConfig(
        counter_store=counter_store,
        rules=rules,
        key_prefix=rate_limit_settings.key_prefix,
        remaining_header_enabled=rate_limit_settings.remaining_header_enabled,
        concurrent_evaluation=rate_limit_settings.concurrent_evaluation,
    )

    logger.info(
        "rate_limit.configured",
        extra={
            "rules": [
                {"name": rule.name, "limit": rule.capacity, "window_s": rule.window_seconds}
                for rule in rules
            ],
            "backend": rate_limit_settings.backend,
            "key_prefix": rate_limit_settings.key_prefix,
            "remaining_header_enabled": rate_limit_settings.remaining_header_enabled,
        },
    )
    return config
