"""Tests for rule construction, key extraction and validation."""

import pytest

from turnstile.core.errors import ConfigurationAppError
from turnstile.limiter.rules import (
    DEFAULT_WINDOW_SECONDS,
    Rule,
    client_address,
    exempt,
    exempt_paths,
    header_rule,
    ip_rule,
    limit_header,
    remaining_header,
    validate_rules,
)


class TestRule:
    def test_default_window_is_one_hour(self) -> None:
        rule = Rule(name="IP", key_extractor=lambda r: "x", capacity=5)
        assert rule.window_seconds == DEFAULT_WINDOW_SECONDS == 3600

    def test_header_names(self) -> None:
        assert limit_header("IP") == "X-RateLimit-IP-Limit"
        assert remaining_header("IP") == "X-RateLimit-IP-Remaining"

    @pytest.mark.parametrize("name", ["A:B", "client ip", " IP", "ID\n", "X/Y"])
    def test_name_must_be_header_token(self, name: str) -> None:
        with pytest.raises(ConfigurationAppError) as exc_info:
            Rule(name=name, key_extractor=lambda r: "x", capacity=1)
        assert exc_info.value.code == "rate_limit_invalid_rule"

    @pytest.mark.parametrize("name", ["IP", "api-key", "User_ID", "v2.tier"])
    def test_token_names_accepted(self, name: str) -> None:
        assert Rule(name=name, key_extractor=lambda r: "x", capacity=1).name == name

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"name": "", "capacity": 1},
            {"name": "IP", "capacity": 0},
            {"name": "IP", "capacity": 1, "window_seconds": 0},
        ],
    )
    def test_invalid_rule_raises(self, kwargs: dict) -> None:
        with pytest.raises(ConfigurationAppError):
            Rule(key_extractor=lambda r: "x", **kwargs)


class TestIpRule:
    def test_uses_client_host(self, make_request) -> None:
        rule = ip_rule(8)
        assert rule.name == "IP"
        assert rule.capacity == 8
        assert rule.key_extractor(make_request(client="10.0.0.7")) == "10.0.0.7"

    def test_missing_client_counts_as_unknown(self, make_request) -> None:
        assert ip_rule(8).key_extractor(make_request(client=None)) == "unknown"

    def test_forwarded_header_first_hop_wins(self, make_request) -> None:
        rule = ip_rule(8, forwarded_header="X-Forwarded-For")
        request = make_request(
            headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"}, client="10.0.0.1"
        )
        assert rule.key_extractor(request) == "203.0.113.9"

    def test_forwarded_header_absent_falls_back(self, make_request) -> None:
        assert client_address(make_request(client="10.0.0.1"), "X-Forwarded-For") == "10.0.0.1"


class TestHeaderRule:
    def test_extracts_header_value(self, make_request) -> None:
        rule = header_rule(10, "x-id", "ID")
        assert rule.key_extractor(make_request(headers={"X-Id": "abc"})) == "abc"

    def test_missing_or_empty_header_is_inapplicable(self, make_request) -> None:
        rule = header_rule(10, "x-id", "ID")
        assert rule.key_extractor(make_request()) is None
        assert rule.key_extractor(make_request(headers={"x-id": ""})) is None


class TestExemptions:
    def test_exempt_predicate_disables_rule(self, make_request) -> None:
        rule = exempt(ip_rule(8), lambda r: r.headers.get("x-id") == "1234")

        assert rule.key_extractor(make_request(headers={"x-id": "1234"})) is None
        assert rule.key_extractor(make_request(headers={"x-id": "1"})) == "127.0.0.1"
        assert rule.name == "IP"
        assert rule.capacity == 8

    def test_exempt_paths(self, make_request) -> None:
        rule = exempt_paths(ip_rule(8), ["/health"])

        assert rule.key_extractor(make_request(path="/health")) is None
        assert rule.key_extractor(make_request(path="/v1/ping")) == "127.0.0.1"

    def test_exempt_paths_without_paths_returns_rule(self) -> None:
        rule = ip_rule(8)
        assert exempt_paths(rule, []) is rule


class TestValidateRules:
    def test_duplicate_names_rejected(self) -> None:
        with pytest.raises(ConfigurationAppError) as exc_info:
            validate_rules([ip_rule(5), ip_rule(10)])
        assert exc_info.value.code == "rate_limit_duplicate_rule"

    def test_empty_rule_list_rejected(self) -> None:
        with pytest.raises(ConfigurationAppError) as exc_info:
            validate_rules([])
        assert exc_info.value.code == "rate_limit_no_rules"

    def test_distinct_names_accepted(self) -> None:
        validate_rules([header_rule(10, "x-id", "ID"), ip_rule(8)])
