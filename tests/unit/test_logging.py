"""
Unit tests for the structured logging helpers.
"""

import json
import logging

import pytest

from guildhall.core.logging.logger import (
    ContextFilter,
    JSONFormatter,
    LogContext,
    clear_log_context,
    get_log_context,
    get_logging_health,
    set_log_context,
)


def make_record(msg="hello", **extra):
    record = logging.LogRecord("guildhall.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def clean_context():
    clear_log_context()
    yield
    clear_log_context()


@pytest.mark.unit
class TestLogContext:
    def test_sync_context_scopes_fields(self):
        with LogContext(actor_id=7, operation="join_team", resource="team:3"):
            context = get_log_context()
            assert context["actor_id"] == "7"
            assert context["operation"] == "join_team"
            assert context["resource"] == "team:3"

        assert get_log_context() == {}

    async def test_async_context_nests_and_keeps_correlation(self):
        async with LogContext(operation="outer", correlation_id="abc123"):
            async with LogContext(component="event_bus"):
                inner = get_log_context()

        assert inner["operation"] == "outer"
        assert inner["component"] == "event_bus"
        assert inner["correlation_id"] == "abc123"

    def test_set_log_context_ignores_none(self):
        set_log_context(actor_id="5", resource=None)

        assert get_log_context() == {"actor_id": "5"}


@pytest.mark.unit
class TestFormatting:
    def test_context_filter_adds_fields(self):
        record = make_record()

        with LogContext(actor_id=1, operation="cast_vote", correlation_id="c0ffee"):
            assert ContextFilter().filter(record) is True

        assert record.actor_id == "1"
        assert record.operation == "cast_vote"
        assert record.correlation_id == "c0ffee"

    def test_json_formatter_includes_extra(self):
        record = make_record("Service operation: join_team", team_id=4, service_operation="join_team")

        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "Service operation: join_team"
        assert payload["extra"]["team_id"] == 4
        assert payload["extra"]["service_operation"] == "join_team"
        assert payload["level"] == "INFO"

    def test_health_snapshot(self):
        health = get_logging_health()

        assert health.initialized is True
        assert health.queue_max_size > 0
