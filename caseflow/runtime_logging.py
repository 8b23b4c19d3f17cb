"""JSON-lines diagnostics for projection, parsing and solver events.

Every record carries ``timestamp_utc``, ``level``, ``event``, ``message`` and
``context``; records raised with an exception also carry its type, message and
traceback. The log lives at ``<root>/runtime_events.jsonl`` where the root
comes from ``CASEFLOW_STORAGE_ROOT`` (default ``.local_store``).
"""

from __future__ import annotations

import json
import os
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


STORAGE_ENV_VAR = "CASEFLOW_STORAGE_ROOT"
DEFAULT_LOG_ROOT = Path(".local_store")
EVENTS_FILE_NAME = "runtime_events.jsonl"

LOG_DIR = DEFAULT_LOG_ROOT
RUNTIME_EVENTS_LOG_FILE = LOG_DIR / EVENTS_FILE_NAME


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _json_fallback(value: Any):
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


def configure_log_root(path_value: str | Path | None) -> Path:
    """Point the event log at ``path_value``; blank values select the default root."""
    global LOG_DIR, RUNTIME_EVENTS_LOG_FILE
    text = "" if path_value is None else str(path_value).strip()
    LOG_DIR = Path(os.path.expandvars(os.path.expanduser(text))) if text else DEFAULT_LOG_ROOT
    RUNTIME_EVENTS_LOG_FILE = LOG_DIR / EVENTS_FILE_NAME
    return LOG_DIR


def runtime_log_path() -> str:
    return str(RUNTIME_EVENTS_LOG_FILE.resolve())


def _exception_fields(exc: BaseException) -> dict[str, str]:
    fields = {"exception_type": type(exc).__name__, "exception_message": str(exc)}
    if exc.__traceback__ is not None:
        fields["traceback"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return fields


def _event_record(
    level: str,
    event: str,
    message: str,
    context: dict[str, Any] | None,
    exc: BaseException | None,
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "timestamp_utc": _utc_now(),
        "level": str(level).upper(),
        "event": str(event),
        "message": str(message),
        "context": dict(context or {}),
    }
    if exc is not None:
        record.update(_exception_fields(exc))
    return record


def append_runtime_event(
    level: str,
    event: str,
    message: str,
    context: dict[str, Any] | None = None,
    exc: BaseException | None = None,
) -> None:
    """Append one event to the log file."""
    try:
        line = json.dumps(_event_record(level, event, message, context, exc), default=_json_fallback, ensure_ascii=False)
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        with RUNTIME_EVENTS_LOG_FILE.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
    except Exception:
        # Diagnostics must never break a projection run.
        pass


def record_warnings(event: str, warnings: list[str], context: dict[str, Any] | None = None) -> None:
    """Log a batch of advisory warnings as one WARNING event (no-op when empty)."""
    if not warnings:
        return
    payload = dict(context or {})
    payload["warnings"] = list(warnings)
    append_runtime_event("warning", event, f"{len(warnings)} warning(s) raised.", context=payload)


def _decode_line(line: str) -> dict[str, Any]:
    try:
        return json.loads(line)
    except json.JSONDecodeError:
        return {
            "timestamp_utc": _utc_now(),
            "level": "ERROR",
            "event": "log_parse_error",
            "message": "Malformed log line encountered.",
            "context": {"line": line},
        }


def read_runtime_events(limit: int = 200, event: str | None = None) -> list[dict[str, Any]]:
    """Return the newest ``limit`` log lines as records, optionally only one event type."""
    if limit <= 0 or not RUNTIME_EVENTS_LOG_FILE.exists():
        return []
    try:
        lines = RUNTIME_EVENTS_LOG_FILE.read_text(encoding="utf-8").splitlines()
    except OSError:
        return []
    records = [_decode_line(line) for line in lines[-int(limit) :]]
    if event is None:
        return records
    return [r for r in records if r.get("event") == event]


configure_log_root(os.getenv(STORAGE_ENV_VAR, ""))
