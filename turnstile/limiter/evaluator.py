"""Evaluation of a single rule against a single request."""

from __future__ import annotations

import logging

from starlette.requests import Request

from turnstile.adapters.counter_store.base import AbstractCounterStore
from turnstile.core.logging import hash_key
from turnstile.limiter.models import RuleOutcome
from turnstile.limiter.rules import Rule

logger = logging.getLogger(__name__)


def build_counter_key(key_prefix: str, rule_name: str, key_component: str) -> str:
    """Compose the store key for one rule and key component.

    The prefix is always present (possibly empty) so engines with different
    prefixes can never write the same key.
    """
    return f"{key_prefix}:{rule_name}:{key_component}"


async def evaluate(
    rule: Rule,
    request: Request,
    counter_store: AbstractCounterStore,
    key_prefix: str = "",
) -> RuleOutcome | None:
    """Count ``request`` against ``rule``.

    Args:
        rule: Rule to apply.
        request: Incoming request.
        counter_store: Store performing the atomic increment.
        key_prefix: Engine namespace.

    Returns:
        RuleOutcome, or None when the rule does not apply to the request. An
        inapplicable rule never touches the store.
    """
    key_component = rule.key_extractor(request)
    if key_component is None:
        return None

    key_component = str(key_component)
    snapshot = await counter_store.increment_and_get(
        build_counter_key(key_prefix, rule.name, key_component),
        rule.window_seconds,
    )

    # A key without known expiry is treated as a freshly opened window
    reset_in_seconds = snapshot.ttl_seconds
    if reset_in_seconds is None:
        reset_in_seconds = rule.window_seconds

    logger.debug(
        "rate_limit.counted",
        extra={
            "rule_name": rule.name,
            "key_hash": hash_key(key_component),
            "count": snapshot.count,
            "limit": rule.capacity,
            "reset_in_s": reset_in_seconds,
        },
    )

    return RuleOutcome(
        rule_name=rule.name,
        count=snapshot.count,
        capacity=rule.capacity,
        reset_in_seconds=reset_in_seconds,
    )
