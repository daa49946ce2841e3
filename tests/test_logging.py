from __future__ import annotations

import json
import logging

import pytest

from src.shared.infrastructure.logging import (
    REDACTED,
    CustomJsonFormatter,
    get_context_logger,
    log_latency,
)


def _format(record: logging.LogRecord) -> dict:
    formatter = CustomJsonFormatter("%(name)s %(levelname)s %(message)s", environment="staging")
    return json.loads(formatter.format(record))


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("src.sla", logging.INFO, __file__, 1, "SLA created", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_adds_context_fields() -> None:
    data = _format(_record(correlation_id="abc-123", sla_id="sla_1_x"))
    assert data["message"] == "SLA created"
    assert data["correlation_id"] == "abc-123"
    assert data["environment"] == "staging"
    assert data["sla_id"] == "sla_1_x"
    assert data["timestamp"]


def test_formatter_redacts_secrets() -> None:
    data = _format(_record(api_key="k-123", auth_token="t-456", attempts=3))
    assert data["api_key"] == REDACTED
    assert data["auth_token"] == REDACTED
    assert data["attempts"] == 3


def test_context_logger_carries_correlation_id() -> None:
    adapter = get_context_logger("src.sla", "abc-123")
    assert isinstance(adapter, logging.LoggerAdapter)
    assert adapter.extra == {"correlation_id": "abc-123"}
    assert isinstance(get_context_logger("src.sla"), logging.Logger)


def test_log_latency_logs_even_on_error(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tests.latency")
    with caplog.at_level(logging.INFO, logger="tests.latency"):
        with pytest.raises(RuntimeError):
            with log_latency(logger, "global_compliance", sop_id="2"):
                raise RuntimeError("boom")

    record = caplog.records[-1]
    assert record.getMessage() == "global_compliance completed"
    assert record.operation == "global_compliance"
    assert record.sop_id == "2"
    assert record.latency_ms >= 0
