from __future__ import annotations

import json
import logging

import pytest

from core.exceptions import ValidationError
from infra.logging_config import resolve_log_level, setup_logging
from infra.operational_support import (
    REDACTED,
    REDACTED_EMAIL,
    TRACE_PREFIX,
    OperationalSupport,
    bind_trace_id,
    current_trace_id,
    redact_text,
    redact_value,
)


def test_operational_support_emits_redacted_structured_event(tmp_path):
    events_path = tmp_path / "support-events.jsonl"
    support = OperationalSupport(events_path=events_path)

    with bind_trace_id("trc-test-123"):
        trace_id = support.emit_event(
            event_type="support.test",
            message="token=abc123 alice@example.com",
            data={
                "password": "StrongPass123",
                "contact": "alice@example.com",
                "nested": {"api_token": "secret-value", "dea_number": "AB1234563"},
                "deadline": "2026-03-01",
            },
        )

    assert trace_id == "trc-test-123"
    rows = events_path.read_text(encoding="utf-8").splitlines()
    assert len(rows) == 1
    payload = json.loads(rows[0])
    assert payload["trace_id"] == "trc-test-123"
    assert payload["event_type"] == "support.test"
    assert "abc123" not in payload["message"]
    assert "alice@example.com" not in payload["message"]
    assert payload["data"]["password"] == REDACTED
    assert payload["data"]["nested"]["api_token"] == REDACTED
    assert payload["data"]["nested"]["dea_number"] == REDACTED
    assert payload["data"]["contact"] == REDACTED_EMAIL
    assert payload["data"]["deadline"] == "2026-03-01"


def test_redaction_helpers():
    assert redact_text("retrying with Bearer abc.def") == f"retrying with Bearer {REDACTED}"
    assert redact_text("api_key=xyz, ok") == f"api_key={REDACTED}, ok"
    assert redact_value({"ids": {"b", "a"}, "count": 3, "flag": None}) == {
        "ids": ["a", "b"],
        "count": 3,
        "flag": None,
    }
    assert redact_value({"a": {"b": {"c": 1}}}, max_depth=2) == {"a": {"b": "<max-depth>"}}


def test_trace_ids_are_generated_and_scoped():
    assert current_trace_id() is None
    with bind_trace_id(None) as outer:
        assert outer.startswith(f"{TRACE_PREFIX}-")
        with bind_trace_id("trc-inner") as inner:
            assert current_trace_id() == inner == "trc-inner"
        assert current_trace_id() == outer
    assert current_trace_id() is None


def test_operational_support_capture_exception_records_crash_event(tmp_path):
    events_path = tmp_path / "support-events.jsonl"
    support = OperationalSupport(events_path=events_path)

    try:
        raise RuntimeError("token=bad-token")
    except RuntimeError as exc:
        support.capture_exception(
            exc_type=RuntimeError,
            exc_value=exc,
            exc_traceback=exc.__traceback__,
            context="unit-test",
            trace_id="trc-crash-1",
        )

    [payload] = support.read_events(event_type="app.crash")
    assert payload["level"] == "ERROR"
    assert payload["trace_id"] == "trc-crash-1"
    assert "bad-token" not in payload["message"]
    assert payload["data"]["exception_type"] == "RuntimeError"
    assert support.read_events(trace_id="trc-other") == []


def test_read_events_skips_corrupt_lines(tmp_path):
    events_path = tmp_path / "support-events.jsonl"
    support = OperationalSupport(events_path=events_path)
    support.emit_event(event_type="a", message="first", trace_id="trc-1")
    with events_path.open("a", encoding="utf-8") as handle:
        handle.write("{not json\n\n[1, 2]\n")
    support.emit_event(event_type="b", message="second", trace_id="trc-2")

    assert [e["event_type"] for e in support.read_events()] == ["a", "b"]
    assert [e["message"] for e in support.read_events(trace_id="trc-2")] == ["second"]


def test_dispatch_records_domain_failures_with_trace_id(services, support, agents, login):
    graph = services["graph"]
    login(agents["user"])

    def _fail():
        raise ValidationError("Phase name is required.", code="PHASE_NAME_EMPTY")

    with pytest.raises(ValidationError):
        graph.dispatch("workflow.create", _fail)

    [event] = support.read_events(event_type="service.call_failed")
    assert event["level"] == "WARNING"
    assert event["trace_id"].startswith(f"{TRACE_PREFIX}-")
    assert event["data"] == {
        "operation": "workflow.create",
        "code": "PHASE_NAME_EMPTY",
        "error_type": "ValidationError",
        "agent_id": agents["user"].id,
    }


def test_dispatch_passes_results_through(services, support, agents, login):
    graph = services["graph"]
    login(agents["user"])

    options = graph.dispatch("directory.providers", graph.directory_service.list_providers_for_dropdown)

    assert options == []
    assert support.read_events() == []


def test_resolve_log_level_reads_environment(monkeypatch):
    assert resolve_log_level() == logging.INFO
    monkeypatch.setenv("CREDOPS_LOG_LEVEL", "debug")
    assert resolve_log_level() == logging.DEBUG
    monkeypatch.setenv("CREDOPS_LOG_LEVEL", "chatty")
    assert resolve_log_level(default=logging.WARNING) == logging.WARNING


def test_setup_logging_writes_trace_tagged_file(tmp_path, support):
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        log_file = setup_logging(tmp_path / "logs", support=support, install_hooks=False)
        with bind_trace_id("trc-log-1"):
            logging.getLogger("credops.test").info("phase claimed")
        for handler in root.handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert log_file.name == "credops.log"
        assert "trace=trc-log-1 credops.test - phase claimed" in text
        [event] = support.read_events(event_type="app.logging.initialized")
        assert event["data"]["log_file"] == str(log_file)
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
