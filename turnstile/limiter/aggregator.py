"""Evaluation of every configured rule and reduction into a Decision.

All applicable rules are counted on every request, even once an earlier rule
has already exceeded its capacity. Only the admission outcome short-circuits,
never the store writes.

Failure policy: sequential evaluation stops at the first failing rule; the
rules before it keep their increments. Concurrent evaluation attempts every
rule and reports the failure of the earliest failing rule in configured order.
"""

from __future__ import annotations

import asyncio
from typing import Sequence

from starlette.requests import Request

from turnstile.adapters.counter_store.base import AbstractCounterStore
from turnstile.limiter.boundary import failure_boundary
from turnstile.limiter.evaluator import evaluate
from turnstile.limiter.models import Decision, RuleOutcome
from turnstile.limiter.rules import Rule


async def _evaluate_in_boundary(
    rule: Rule,
    request: Request,
    counter_store: AbstractCounterStore,
    key_prefix: str,
) -> RuleOutcome | None:
    with failure_boundary(rule_name=rule.name):
        return await evaluate(rule, request, counter_store, key_prefix)


async def aggregate(
    rules: Sequence[Rule],
    request: Request,
    counter_store: AbstractCounterStore,
    key_prefix: str = "",
    *,
    concurrent: bool = False,
) -> Decision:
    """Evaluate ``rules`` in order and build the admission decision.

    Args:
        rules: Configured rules, in priority order.
        request: Incoming request.
        counter_store: Store shared by all rules.
        key_prefix: Engine namespace.
        concurrent: Issue the store round trips concurrently.

    Returns:
        Decision whose outcomes follow the configured rule order.

    Raises:
        RateLimitEngineError: If any rule fails to evaluate.
    """
    if concurrent:
        results = await asyncio.gather(
            *(_evaluate_in_boundary(rule, request, counter_store, key_prefix) for rule in rules),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        outcomes = [result for result in results if result is not None]
    else:
        outcomes = []
        for rule in rules:
            outcome = await _evaluate_in_boundary(rule, request, counter_store, key_prefix)
            if outcome is not None:
                outcomes.append(outcome)

    return Decision(outcomes=tuple(outcomes))
