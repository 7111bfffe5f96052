"""Application-level exception types.

This module defines the errors raised by the admission engine and its
adapters, enabling consistent error handling, logging, and API responses.

Errors raised while the engine evaluates its rules are re-raised as
``RateLimitEngineError`` carrying ``origin = ENGINE_ORIGIN`` so outer error
handlers can tell a broken limiter apart from a broken downstream service.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict


ENGINE_ORIGIN = "rate-limit-engine"


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    rule_name: str
    error_type: str


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ConfigurationAppError(AppError):
    """Raised when rules or settings are invalid."""


@dataclass
class RateLimitEngineError(AppError):
    """Raised when the admission engine itself fails during evaluation.

    The original failure is chained as ``__cause__``.

    Attributes:
        origin: Marker identifying the engine as the failing component.
        rule_name: Rule being evaluated when the failure happened, if known.
    """

    origin: str = ENGINE_ORIGIN
    rule_name: str | None = None


def is_engine_failure(exc: BaseException) -> bool:
    """Return True when ``exc`` was raised by the admission engine."""

    return getattr(exc, "origin", None) == ENGINE_ORIGIN
