"""Support journal for the back office.

Every support event is one JSON line carrying a trace id, so a failed
claim or a crash seen by an agent can be matched to the log lines written
while it ran. Free text and payloads are scrubbed of emails, credentials
and provider identifiers (NPI, DEA, SSN) before they reach disk.
"""
from __future__ import annotations

import json
import logging
import os
import re
import sys
import threading
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from functools import singledispatch
from pathlib import Path
from threading import Lock
from typing import Any, Iterator, Mapping

from infra.path import user_data_dir
from infra.version import get_app_version

logger = logging.getLogger(__name__)

REDACTED = "<redacted>"
REDACTED_EMAIL = "<redacted-email>"
TRACE_PREFIX = "trc"
MAX_REDACTION_DEPTH = 8

_active_trace: ContextVar[str | None] = ContextVar("credops_trace_id", default=None)

# Substrings of payload keys whose values never leave the process.
SENSITIVE_KEY_PARTS = frozenset(
    {
        "password",
        "token",
        "secret",
        "api_key",
        "apikey",
        "authorization",
        "cookie",
        "ssn",
        "dea_number",
        "npi",
    }
)

_EMAIL = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_KEY_VALUE_SECRET = re.compile(
    r"(?i)\b(password|token|secret|api[_-]?key|authorization)\b\s*[:=]\s*([^\s,;]+)"
)
_BEARER = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._\-~=+/]+")


def new_trace_id() -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"{TRACE_PREFIX}-{stamp}-{uuid.uuid4().hex[:8]}"


def current_trace_id() -> str | None:
    return (_active_trace.get() or "").strip() or None


@contextmanager
def bind_trace_id(trace_id: str | None) -> Iterator[str]:
    """Bind a trace id for log records and support events emitted inside the block."""
    bound = (trace_id or "").strip() or new_trace_id()
    reset_token = _active_trace.set(bound)
    try:
        yield bound
    finally:
        _active_trace.reset(reset_token)


def _is_sensitive_key(key: object) -> bool:
    name = str(key or "").strip().lower().replace("-", "_")
    return any(part in name for part in SENSITIVE_KEY_PARTS)


def redact_text(value: str) -> str:
    scrubbed = _EMAIL.sub(REDACTED_EMAIL, str(value or ""))
    scrubbed = _KEY_VALUE_SECRET.sub(lambda m: f"{m.group(1)}={REDACTED}", scrubbed)
    return _BEARER.sub(f"Bearer {REDACTED}", scrubbed)


@singledispatch
def _scrub(value: Any, depth: int, max_depth: int) -> Any:
    return redact_text(str(value))


@_scrub.register(type(None))
@_scrub.register(bool)
@_scrub.register(int)
@_scrub.register(float)
def _(value: Any, depth: int, max_depth: int) -> Any:
    return value


@_scrub.register(date)
def _(value: date, depth: int, max_depth: int) -> str:
    return value.isoformat()


@_scrub.register(dict)
def _(value: dict, depth: int, max_depth: int) -> dict[str, Any]:
    return {
        str(key): REDACTED if _is_sensitive_key(key) else redact_value(item, depth=depth + 1, max_depth=max_depth)
        for key, item in value.items()
    }


@_scrub.register(list)
@_scrub.register(tuple)
def _(value: Any, depth: int, max_depth: int) -> list[Any]:
    return [redact_value(item, depth=depth + 1, max_depth=max_depth) for item in value]


@_scrub.register(set)
@_scrub.register(frozenset)
def _(value: Any, depth: int, max_depth: int) -> list[Any]:
    return [redact_value(item, depth=depth + 1, max_depth=max_depth) for item in sorted(value, key=str)]


def redact_value(value: Any, *, depth: int = 0, max_depth: int = MAX_REDACTION_DEPTH) -> Any:
    """JSON-safe copy of value with sensitive keys and free-text secrets masked."""
    if depth >= max_depth:
        return "<max-depth>"
    if isinstance(value, Mapping) and not isinstance(value, dict):
        value = dict(value)
    return _scrub(value, depth, max_depth)


class TraceIdLogFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = current_trace_id() or "-"
        return True


@dataclass(frozen=True)
class SupportEvent:
    event_type: str
    level: str
    trace_id: str
    message: str
    timestamp_utc: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    app_version: str = field(default_factory=get_app_version)
    pid: int = field(default_factory=os.getpid)
    data: dict[str, Any] | None = None

    def to_json(self) -> str:
        record = {k: v for k, v in asdict(self).items() if not (k == "data" and v is None)}
        return json.dumps(record, ensure_ascii=True, sort_keys=True)


def _parse_line(line: str) -> dict[str, Any] | None:
    if not line.strip():
        return None
    try:
        payload = json.loads(line)
    except json.JSONDecodeError:
        return None
    return payload if isinstance(payload, dict) else None


class OperationalSupport:
    """Append-only JSONL journal of support events (failed calls, crashes, startup)."""

    def __init__(self, events_path: str | Path | None = None) -> None:
        self._events_path = Path(events_path or user_data_dir() / "logs" / "support-events.jsonl")
        self._events_path.parent.mkdir(parents=True, exist_ok=True)
        self._write_lock = Lock()

    @property
    def events_path(self) -> Path:
        return self._events_path

    def emit_event(
        self,
        *,
        event_type: str,
        message: str,
        level: str = "INFO",
        trace_id: str | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> str:
        """Append one event and return the trace id it was filed under."""
        event = SupportEvent(
            event_type=(event_type or "").strip() or "support.event",
            level=(level or "INFO").strip().upper(),
            trace_id=(trace_id or current_trace_id() or new_trace_id()).strip(),
            message=redact_text(message or ""),
            data=redact_value(dict(data)) if data else None,
        )
        with self._write_lock, self._events_path.open("a", encoding="utf-8") as handle:
            handle.write(event.to_json() + "\n")
        return event.trace_id

    def capture_exception(
        self,
        *,
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_traceback: Any,
        context: str,
        trace_id: str | None = None,
    ) -> str:
        return self.emit_event(
            event_type="app.crash",
            level="ERROR",
            trace_id=trace_id,
            message=f"Unhandled exception in {context}: {exc_value}",
            data={
                "context": context,
                "exception_type": getattr(exc_type, "__name__", str(exc_type)),
                "stacktrace": "".join(traceback.format_exception(exc_type, exc_value, exc_traceback)),
            },
        )

    def read_events(
        self,
        *,
        trace_id: str | None = None,
        event_type: str | None = None,
    ) -> list[dict[str, Any]]:
        """Events in write order; unreadable lines are skipped."""
        if not self._events_path.exists():
            return []
        lines = self._events_path.read_text(encoding="utf-8", errors="ignore").splitlines()
        return [
            payload
            for payload in map(_parse_line, lines)
            if payload is not None
            and (not trace_id or payload.get("trace_id") == trace_id)
            and (not event_type or payload.get("event_type") == event_type)
        ]


_default_support: OperationalSupport | None = None
_hooks_installed = False


def get_operational_support() -> OperationalSupport:
    global _default_support
    if _default_support is None:
        _default_support = OperationalSupport()
    return _default_support


class _CrashRecorder:
    def __init__(self, support: OperationalSupport) -> None:
        self._support = support
        self._previous_sys_hook = sys.excepthook
        self._previous_thread_hook = threading.excepthook

    def _record(self, exc_type, exc_value, exc_tb, context: str) -> None:
        try:
            self._support.capture_exception(
                exc_type=exc_type,
                exc_value=exc_value,
                exc_traceback=exc_tb,
                context=context,
            )
        except OSError:
            logger.exception("Could not record crash event")

    def sys_hook(self, exc_type, exc_value, exc_tb) -> None:
        self._record(exc_type, exc_value, exc_tb, "main-thread")
        self._previous_sys_hook(exc_type, exc_value, exc_tb)

    def thread_hook(self, args: threading.ExceptHookArgs) -> None:
        thread_name = getattr(args.thread, "name", "worker-thread")
        self._record(args.exc_type, args.exc_value, args.exc_traceback, f"thread:{thread_name}")
        self._previous_thread_hook(args)


def install_global_exception_hooks(support: OperationalSupport | None = None) -> None:
    global _hooks_installed
    if _hooks_installed:
        return
    recorder = _CrashRecorder(support or get_operational_support())
    sys.excepthook = recorder.sys_hook
    threading.excepthook = recorder.thread_hook
    _hooks_installed = True


__all__ = [
    "OperationalSupport",
    "REDACTED",
    "REDACTED_EMAIL",
    "SENSITIVE_KEY_PARTS",
    "SupportEvent",
    "TRACE_PREFIX",
    "TraceIdLogFilter",
    "bind_trace_id",
    "current_trace_id",
    "get_operational_support",
    "install_global_exception_hooks",
    "new_trace_id",
    "redact_text",
    "redact_value",
]
