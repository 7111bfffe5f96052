"""Failure boundary around rule evaluation.

Only the evaluation phase (key extraction and counter store access) runs
inside the boundary. The wrapped handler never does, so its exceptions keep
their identity and are never mistaken for limiter failures.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from turnstile.core.errors import ENGINE_ORIGIN, RateLimitEngineError

logger = logging.getLogger(__name__)


@contextmanager
def failure_boundary(rule_name: str | None = None) -> Iterator[None]:
    """Re-raise any evaluation failure as ``RateLimitEngineError``.

    Errors already tagged by an inner boundary pass through unchanged.
    Nothing is swallowed: the request is neither admitted nor rejected.

    Args:
        rule_name: Rule being evaluated, recorded on the error when known.

    Raises:
        RateLimitEngineError: Chained to the original exception.
    """
    try:
        yield
    except RateLimitEngineError:
        raise
    except Exception as exc:
        logger.error(
            "rate_limit.engine_failure",
            extra={
                "origin": ENGINE_ORIGIN,
                "rule_name": rule_name,
                "error_type": type(exc).__name__,
                "error_msg": str(exc),
            },
        )
        details = {"error_type": type(exc).__name__}
        if rule_name is not None:
            details["rule_name"] = rule_name
        raise RateLimitEngineError(
            code="rate_limit_engine_error",
            message="Rate limit evaluation failed",
            details=details,
            rule_name=rule_name,
        ) from exc
