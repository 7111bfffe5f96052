"""Rate limit rules.

A rule is plain data: a name, a key extractor, a capacity and a window. New
kinds of limits are added by writing a new extractor function, not by
subclassing. An extractor returns ``None`` when the rule does not apply to a
request; such a request is neither counted nor limited by that rule.

Example:
    >>> rules = [
    ...     exempt(header_rule(10, "x-id", "ID"), lambda r: r.headers.get("x-id") == "1234"),
    ...     ip_rule(8),
    ... ]
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Sequence

from starlette.requests import Request

from turnstile.core.errors import ConfigurationAppError

KeyExtractor = Callable[[Request], "str | None"]
RequestPredicate = Callable[[Request], bool]

DEFAULT_WINDOW_SECONDS = 3600

# HTTP header token characters (RFC 9110 tchar); excludes ':' and whitespace
RULE_NAME_PATTERN = re.compile(r"[A-Za-z0-9!#$%&'*+.^_`|~-]+")


@dataclass(frozen=True)
class Rule:
    """A named fixed-window limit.

    Attributes:
        name: Identifier namespacing the counter key and the
            ``X-RateLimit-<name>-*`` response headers.
        key_extractor: Returns the key component for a request, or None when
            the rule does not apply.
        capacity: Requests admitted per key per window.
        window_seconds: Window length in seconds.
    """

    name: str
    key_extractor: KeyExtractor
    capacity: int
    window_seconds: int = DEFAULT_WINDOW_SECONDS

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not RULE_NAME_PATTERN.fullmatch(self.name):
            raise ConfigurationAppError(
                code="rate_limit_invalid_rule",
                message=(
                    f"Rule name {self.name!r} must be a non-empty HTTP header token "
                    "without ':' or whitespace"
                ),
            )
        if self.capacity < 1:
            raise ConfigurationAppError(
                code="rate_limit_invalid_rule",
                message=f"Rule '{self.name}' capacity must be >= 1",
                details={"rule_name": self.name},
            )
        if self.window_seconds < 1:
            raise ConfigurationAppError(
                code="rate_limit_invalid_rule",
                message=f"Rule '{self.name}' window_seconds must be >= 1",
                details={"rule_name": self.name},
            )


def limit_header(rule_name: str) -> str:
    return f"X-RateLimit-{rule_name}-Limit"


def remaining_header(rule_name: str) -> str:
    return f"X-RateLimit-{rule_name}-Remaining"


def client_address(request: Request, forwarded_header: str | None = None) -> str:
    """Resolve the client address of a request.

    Args:
        request: Incoming request.
        forwarded_header: Proxy header to trust (first hop wins), if any.

    Returns:
        The address, or "unknown" when the transport exposes none.
    """
    if forwarded_header:
        forwarded = request.headers.get(forwarded_header, "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


def ip_rule(
    capacity: int,
    window_seconds: int = DEFAULT_WINDOW_SECONDS,
    *,
    name: str = "IP",
    forwarded_header: str | None = None,
) -> Rule:
    """Limit requests per client address."""

    def extract(request: Request) -> str | None:
        return client_address(request, forwarded_header)

    return Rule(name=name, key_extractor=extract, capacity=capacity, window_seconds=window_seconds)


def header_rule(
    capacity: int,
    header_name: str,
    name: str,
    window_seconds: int = DEFAULT_WINDOW_SECONDS,
) -> Rule:
    """Limit requests per value of a request header.

    Requests without the header (or with an empty value) are not limited by
    this rule.
    """

    def extract(request: Request) -> str | None:
        return request.headers.get(header_name) or None

    return Rule(name=name, key_extractor=extract, capacity=capacity, window_seconds=window_seconds)


def exempt(rule: Rule, predicate: RequestPredicate) -> Rule:
    """Return a copy of ``rule`` that skips requests matching ``predicate``."""

    extract = rule.key_extractor

    def extract_unless_exempt(request: Request) -> str | None:
        if predicate(request):
            return None
        return extract(request)

    return replace(rule, key_extractor=extract_unless_exempt)


def exempt_paths(rule: Rule, paths: Iterable[str]) -> Rule:
    """Return a copy of ``rule`` that skips the given URL paths."""

    skipped = frozenset(paths)
    if not skipped:
        return rule
    return exempt(rule, lambda request: request.url.path in skipped)


def validate_rules(rules: Sequence[Rule]) -> None:
    """Check a rule list before it is used by an engine.

    Raises:
        ConfigurationAppError: If the list is empty or two rules share a name.
    """
    if not rules:
        raise ConfigurationAppError(
            code="rate_limit_no_rules",
            message="At least one rate limit rule must be configured",
        )

    seen: set[str] = set()
    for rule in rules:
        if rule.name in seen:
            raise ConfigurationAppError(
                code="rate_limit_duplicate_rule",
                message=f"Rule name '{rule.name}' is configured more than once",
                details={"rule_name": rule.name},
            )
        seen.add(rule.name)
