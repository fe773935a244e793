"""Runtime settings for the agentfeed toolkit."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from agentfeed import __version__

DEFAULT_ACTIVITY_CAPACITY = 50


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path
    state_dir: Path
    log_dir: Path
    cli_version: str = __version__
    activity_capacity: int = DEFAULT_ACTIVITY_CAPACITY

    @property
    def telemetry_file(self) -> Path:
        return self.log_dir / "telemetry.jsonl"


def _default_home_dir() -> Path:
    override = os.environ.get("AGENTFEED_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".agentfeed"


def _capacity_from_env() -> int:
    raw = os.environ.get("AGENTFEED_ACTIVITY_CAPACITY", "").strip()
    if not raw:
        return DEFAULT_ACTIVITY_CAPACITY
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_ACTIVITY_CAPACITY
    return value if value > 0 else DEFAULT_ACTIVITY_CAPACITY


def load_settings() -> RuntimeSettings:
    base = _default_home_dir()
    return RuntimeSettings(
        home_dir=base,
        state_dir=base / "state",
        log_dir=base / "logs",
        activity_capacity=_capacity_from_env(),
    )


SETTINGS = load_settings()
