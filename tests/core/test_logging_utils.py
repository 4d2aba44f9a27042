"""Tests for JSON logging helpers."""

import json
import logging

from loguru import logger as loguru_logger

from travelsync.core.logging_utils import (
    EnhancedJsonFormatter,
    InterceptHandler,
    generate_correlation_id,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="travelsync.domain.services.merge",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="snapshots_merged",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestEnhancedJsonFormatter:
    """Test suite for EnhancedJsonFormatter."""

    def test_groups_extra_fields(self):
        formatter = EnhancedJsonFormatter(include_location=False, include_process_info=False)

        payload = json.loads(
            formatter.format(
                _record(merged_items=3, delay_seconds=0.5, user_id="u1", correlation_id="abc")
            )
        )

        assert payload["message"] == "snapshots_merged"
        assert payload["level"] == "INFO"
        assert payload["sync"] == {"merged_items": 3}
        assert payload["performance"] == {"delay_seconds": 0.5}
        assert payload["extra"] == {"user_id": "u1"}
        assert payload["correlation_id"] == "abc"
        assert "module" not in payload

    def test_includes_location_when_requested(self):
        payload = json.loads(EnhancedJsonFormatter().format(_record()))

        assert payload["line"] == 10
        assert "process" in payload


class TestInterceptHandler:
    """Test suite for InterceptHandler."""

    def test_forwards_message_and_extra_to_loguru(self):
        captured: list[dict] = []
        sink_id = loguru_logger.add(lambda message: captured.append(message.record), level="DEBUG")
        try:
            InterceptHandler().emit(_record(store_key="travelmap_selections"))
        finally:
            loguru_logger.remove(sink_id)

        assert captured[0]["message"] == "snapshots_merged"
        assert captured[0]["extra"]["store_key"] == "travelmap_selections"


def test_correlation_ids_are_unique():
    assert generate_correlation_id() != generate_correlation_id()
