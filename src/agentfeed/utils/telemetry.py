"""Structured telemetry log (opt-out) used for diagnostics."""

from __future__ import annotations

import json
import os
import time
from typing import Any, Callable, Iterable, Iterator

import jsonschema

from agentfeed.domain.activity import LoadCorruptionWarning, warn_diagnostics
from agentfeed.resources import load_schema
from agentfeed.settings import RuntimeSettings

_DISABLE_VALUES = {"0", "false", "no", "off"}

_TELEMETRY_VALIDATOR: jsonschema.Draft202012Validator | None = None


def telemetry_enabled() -> bool:
    value = os.getenv("AGENTFEED_TELEMETRY", "1").lower()
    return value not in _DISABLE_VALUES


def record_structured_event(
    settings: RuntimeSettings,
    event: str,
    *,
    payload: dict[str, Any] | None = None,
    level: str = "info",
    status: str | None = None,
    component: str | None = None,
    correlation_id: str | None = None,
    duration_ms: float | None = None,
) -> None:
    if not telemetry_enabled():
        return
    record: dict[str, Any] = {
        "ts": time.time(),
        "event": event,
        "payload": payload or {},
        "level": level,
    }
    if status:
        record["status"] = status
    if component:
        record["component"] = component
    if correlation_id:
        record["correlationId"] = correlation_id
    if duration_ms is not None:
        record["durationMs"] = duration_ms
    _telemetry_validator().validate(record)
    log_path = settings.telemetry_file
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as fh:
        fh.write(json.dumps(record, ensure_ascii=False) + "\n")


def telemetry_diagnostics(settings: RuntimeSettings) -> Callable[[LoadCorruptionWarning], None]:
    """Route activity log load warnings into the telemetry log.

    Falls back to ``warnings.warn`` when the telemetry log cannot be written.
    """

    def _sink(warning: LoadCorruptionWarning) -> None:
        try:
            record_structured_event(
                settings,
                "activity.load",
                level="warn",
                status="corrupt",
                component="activity",
                payload={"location": warning.location, "reason": warning.reason},
            )
        except OSError:
            warn_diagnostics(warning)

    return _sink


def iter_events(settings: RuntimeSettings) -> Iterator[dict[str, Any]]:
    log_path = settings.telemetry_file
    if not log_path.exists():
        return
    with log_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                continue


def summarize(events: Iterable[dict[str, Any]]) -> dict[str, Any]:
    total = 0
    by_event: dict[str, int] = {}
    by_level: dict[str, int] = {}
    for evt in events:
        name = evt.get("event", "unknown")
        by_event[name] = by_event.get(name, 0) + 1
        level = evt.get("level", "info")
        by_level[level] = by_level.get(level, 0) + 1
        total += 1
    return {"total": total, "by_event": by_event, "by_level": by_level}


def clear(settings: RuntimeSettings) -> None:
    settings.telemetry_file.unlink(missing_ok=True)


def _telemetry_validator() -> jsonschema.Draft202012Validator:
    global _TELEMETRY_VALIDATOR
    if _TELEMETRY_VALIDATOR is None:
        _TELEMETRY_VALIDATOR = jsonschema.Draft202012Validator(load_schema("telemetry.schema.json"))
    return _TELEMETRY_VALIDATOR
