from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SANDBOX_HOME = ROOT / ".test_place" / "global-home"
os.environ.setdefault("AGENTFEED_HOME", str(SANDBOX_HOME))
SANDBOX_HOME.mkdir(parents=True, exist_ok=True)
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from agentfeed.domain.activity import ActivityEvent  # noqa: E402
from agentfeed.settings import RuntimeSettings  # noqa: E402


@pytest.fixture()
def runtime_settings(tmp_path: Path) -> RuntimeSettings:
    base = tmp_path / "runtime"
    home = base / "home"
    state_dir = base / "state"
    log_dir = base / "logs"
    for directory in (home, state_dir, log_dir):
        directory.mkdir(parents=True, exist_ok=True)
    return RuntimeSettings(home_dir=home, state_dir=state_dir, log_dir=log_dir)


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture()
def make_event() -> Callable[..., ActivityEvent]:
    def _make(details: str | None = None, *, agent_id: str = "agent-1", event_type: str = "claimed", **extra: Any) -> ActivityEvent:
        return ActivityEvent(
            timestamp=extra.pop("timestamp", "2025-10-01T12:00:00Z"),
            agent_id=agent_id,
            event_type=event_type,
            details=details,
            **extra,
        )

    return _make
