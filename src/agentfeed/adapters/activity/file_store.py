"""JSON file store for activity logs."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Sequence

import jsonschema
from jsonschema.exceptions import best_match

from agentfeed.domain.activity import (
    ActivityEvent,
    ActivityEventError,
    ActivityStoreCorruptError,
    PersistenceError,
)
from agentfeed.ports.activity.store import ActivityLogStore
from agentfeed.resources import load_schema
from agentfeed.utils.timestamps import utc_now_iso

LOG_VERSION = 1
STATE_DIR = Path(".agentfeed") / "state"
LOG_FILENAME = "activity-log.json"

_VALIDATOR: jsonschema.Draft202012Validator | None = None


def default_log_path(workspace_root: Path) -> Path:
    return workspace_root / STATE_DIR / LOG_FILENAME


def _validator() -> jsonschema.Draft202012Validator:
    global _VALIDATOR
    if _VALIDATOR is None:
        _VALIDATOR = jsonschema.Draft202012Validator(load_schema("activity_log.schema.json"))
    return _VALIDATOR


class FileActivityLogStore(ActivityLogStore):
    """Stores the retained window as one versioned JSON document, newest first.

    Each save replaces the document through a temp file and ``os.replace``.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @classmethod
    def for_workspace(cls, workspace_root: Path) -> "FileActivityLogStore":
        return cls(default_log_path(workspace_root))

    def describe(self) -> str:
        return str(self._path)

    def load(self) -> List[ActivityEvent] | None:
        try:
            raw_text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise ActivityStoreCorruptError(f"cannot read activity log: {exc}") from exc

        try:
            raw = json.loads(raw_text)
        except json.JSONDecodeError as exc:
            raise ActivityStoreCorruptError(f"activity log invalid JSON: {exc}") from exc
        except RecursionError as exc:
            raise ActivityStoreCorruptError("activity log invalid JSON: nested too deeply") from exc

        if isinstance(raw, dict) and raw.get("version") != LOG_VERSION:
            raise ActivityStoreCorruptError(
                f"activity log version mismatch: expected {LOG_VERSION}, found {raw.get('version')!r}"
            )
        error = best_match(_validator().iter_errors(raw))
        if error is not None:
            location = "/".join(str(part) for part in error.absolute_path) or "<root>"
            raise ActivityStoreCorruptError(f"activity log schema violation at {location}: {error.message}")

        events: List[ActivityEvent] = []
        for entry in raw["events"]:
            try:
                events.append(ActivityEvent.from_dict(entry))
            except ActivityEventError as exc:
                raise ActivityStoreCorruptError(str(exc)) from exc
        return events

    def save(self, events: Sequence[ActivityEvent]) -> None:
        payload: Dict[str, Any] = {
            "version": LOG_VERSION,
            "updated_at": utc_now_iso(),
            "events": [event.to_dict() for event in events],
        }
        try:
            data = json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
            self._path.parent.mkdir(parents=True, exist_ok=True)
            _atomic_write(self._path, data)
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"failed to write activity log {self._path}: {exc}") from exc


def _atomic_write(path: Path, data: str) -> None:
    fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data.encode("utf-8"))
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, path)
        _fsync_dir(path.parent)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def _fsync_dir(directory: Path) -> None:
    if not hasattr(os, "O_DIRECTORY"):
        return
    fd = os.open(str(directory), os.O_RDONLY | os.O_DIRECTORY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


__all__ = ["FileActivityLogStore", "LOG_FILENAME", "LOG_VERSION", "default_log_path"]
