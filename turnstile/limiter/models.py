"""Per-request evaluation results."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RuleOutcome:
    """Result of counting one request against one applicable rule.

    Attributes:
        rule_name: Name of the evaluated rule.
        count: Post-increment counter value for the current window.
        capacity: Rule capacity.
        reset_in_seconds: Time left in the current window.
    """

    rule_name: str
    count: int
    capacity: int
    reset_in_seconds: int

    @property
    def remaining(self) -> int:
        return max(self.capacity - self.count, 0)

    @property
    def exceeded(self) -> bool:
        return self.count > self.capacity


@dataclass(frozen=True)
class Decision:
    """Admission decision for one request.

    ``outcomes`` holds one entry per applicable rule, in configured order.
    """

    outcomes: tuple[RuleOutcome, ...] = ()

    @property
    def first_exceeded(self) -> RuleOutcome | None:
        return next((outcome for outcome in self.outcomes if outcome.exceeded), None)

    @property
    def admitted(self) -> bool:
        return self.first_exceeded is None


@dataclass(frozen=True)
class RejectionContext:
    """Context handed to the rate limit handler on rejection."""

    outcomes: tuple[RuleOutcome, ...]
    first_exceeded: RuleOutcome
