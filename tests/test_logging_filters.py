"""Tests for log redaction, formatting and key hashing."""

from __future__ import annotations

import json
import logging
from io import StringIO

from turnstile.core.logging import (
    JsonFormatter,
    SensitiveDataFilter,
    clear_request_id,
    hash_key,
    set_request_id,
)


def _logger(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_keys():
    logger, stream = _logger("test_redaction")

    logger.info(
        "test_event",
        extra={
            "api_key": "sk-secret-123",
            "key_component": "203.0.113.9",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()
    assert "sk-secret-123" not in output
    assert "203.0.113.9" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_nested_values_are_redacted():
    logger, stream = _logger("test_nested_redaction")

    logger.info("nested", extra={"context": {"Authorization": "Bearer abc", "rule_name": "IP"}})

    record = json.loads(stream.getvalue())
    assert record["context"]["Authorization"] == "[REDACTED]"
    assert record["context"]["rule_name"] == "IP"


def test_json_formatter_includes_request_id():
    logger, stream = _logger("test_request_id")

    set_request_id("req-1")
    try:
        logger.warning("rate_limit.rejected", extra={"rule_name": "IP", "retry_after_s": 3600})
    finally:
        clear_request_id()

    record = json.loads(stream.getvalue())
    assert record["message"] == "rate_limit.rejected"
    assert record["level"] == "warning"
    assert record["request_id"] == "req-1"
    assert record["retry_after_s"] == 3600


def test_hash_key_is_stable_and_short():
    assert hash_key("203.0.113.9") == hash_key("203.0.113.9")
    assert hash_key("203.0.113.9") != hash_key("203.0.113.10")
    assert len(hash_key("203.0.113.9")) == 16
