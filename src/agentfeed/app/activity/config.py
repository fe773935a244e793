"""Per-workspace activity feed configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

from agentfeed.adapters.activity.file_store import default_log_path
from agentfeed.settings import RuntimeSettings

CONFIG_PATH = Path(".agentfeed") / "config" / "activity.yaml"


class ActivityConfigError(RuntimeError):
    """Raised when the workspace activity config is invalid."""


@dataclass(frozen=True)
class ActivityFeedConfig:
    workspace_root: Path
    capacity: int
    log_path: Path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workspace": str(self.workspace_root),
            "capacity": self.capacity,
            "logPath": str(self.log_path),
        }


def load_feed_config(workspace_root: Path, settings: RuntimeSettings) -> ActivityFeedConfig:
    root = workspace_root.expanduser().resolve()
    config_path = root / CONFIG_PATH
    raw: Any = {}
    if config_path.exists():
        try:
            raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ActivityConfigError(f"activity.config_invalid: {exc}") from exc
    if not isinstance(raw, dict):
        raise ActivityConfigError("activity.config_invalid: root must be a mapping")

    capacity = raw.get("capacity", settings.activity_capacity)
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
        raise ActivityConfigError("activity.config_invalid: capacity must be a positive integer")

    log_path = default_log_path(root)
    raw_path = raw.get("log_path")
    if raw_path is not None:
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise ActivityConfigError("activity.config_invalid: log_path must be a non-empty string")
        candidate = Path(raw_path).expanduser()
        log_path = candidate if candidate.is_absolute() else (root / candidate).resolve()

    return ActivityFeedConfig(workspace_root=root, capacity=capacity, log_path=log_path)


__all__ = ["ActivityConfigError", "ActivityFeedConfig", "CONFIG_PATH", "load_feed_config"]
