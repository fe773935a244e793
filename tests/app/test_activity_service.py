from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List

import pytest

from agentfeed.app.activity import ActivityConfigError, ActivityFeedService
from agentfeed.domain.activity import ActivityEventError, ActivityQueryError, LoadCorruptionWarning
from agentfeed.settings import RuntimeSettings
from agentfeed.utils.telemetry import iter_events


def _service(settings: RuntimeSettings, **kwargs: Any) -> ActivityFeedService:
    return ActivityFeedService(settings, **kwargs)


def test_record_activity_stamps_timestamp(runtime_settings: RuntimeSettings, workspace: Path) -> None:
    service = _service(runtime_settings)
    event = service.record_activity(workspace, agent_id="agent-1", event_type="claimed", project_number=42)
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", event.timestamp)
    assert service.count(workspace) == 1
    assert service.recent(workspace) == [event]


def test_record_activity_keeps_caller_timestamp(runtime_settings: RuntimeSettings, workspace: Path) -> None:
    service = _service(runtime_settings)
    event = service.record_activity(
        workspace,
        agent_id="agent-1",
        event_type="completed",
        timestamp="2025-10-02T08:00:00Z",
        details="APPROVED",
    )
    assert event.timestamp == "2025-10-02T08:00:00Z"


def test_unknown_event_type_is_rejected(runtime_settings: RuntimeSettings, workspace: Path) -> None:
    service = _service(runtime_settings)
    with pytest.raises(ActivityEventError, match="unknown event type"):
        service.record_activity(workspace, agent_id="agent-1", event_type="merged")
    assert service.count(workspace) == 0


def test_one_log_per_workspace(runtime_settings: RuntimeSettings, tmp_path: Path) -> None:
    service = _service(runtime_settings)
    first = tmp_path / "one"
    second = tmp_path / "two"
    first.mkdir()
    second.mkdir()
    assert service.log_for(first) is service.log_for(first / ".")
    assert service.log_for(first) is not service.log_for(second)

    service.record_activity(first, agent_id="agent-1", event_type="claimed")
    assert service.count(first) == 1
    assert service.count(second) == 0


def test_subscribers_receive_updates(runtime_settings: RuntimeSettings, workspace: Path) -> None:
    service = _service(runtime_settings)
    messages: List[Dict[str, Any]] = []
    unsubscribe = service.subscribe(messages.append)

    service.record_activity(workspace, agent_id="agent-2", event_type="paused", timestamp="t1")
    service.clear(workspace)
    unsubscribe()
    service.record_activity(workspace, agent_id="agent-2", event_type="resumed", timestamp="t2")

    assert messages == [
        {"type": "activityUpdate", "event": {"timestamp": "t1", "agentId": "agent-2", "eventType": "paused"}},
        {"type": "activityCleared"},
    ]


def test_failing_subscriber_is_reported(runtime_settings: RuntimeSettings, workspace: Path) -> None:
    service = _service(runtime_settings)
    received: List[Dict[str, Any]] = []

    def _broken(message: Dict[str, Any]) -> None:
        raise RuntimeError("webview gone")

    service.subscribe(_broken)
    service.subscribe(received.append)
    service.record_activity(workspace, agent_id="agent-1", event_type="error")

    assert service.count(workspace) == 1
    assert len(received) == 1
    errors = [evt for evt in iter_events(runtime_settings) if evt["event"] == "activity.listener"]
    assert errors and errors[0]["level"] == "error"
    assert errors[0]["payload"]["error"] == "webview gone"


def test_recent_filters(runtime_settings: RuntimeSettings, workspace: Path) -> None:
    service = _service(runtime_settings)
    for i in range(6):
        service.record_activity(
            workspace,
            agent_id=f"agent-{i % 2}",
            event_type="claimed" if i < 3 else "completed",
            details=f"Event {i}",
        )

    only_agent = service.recent(workspace, agents=["agent-1"])
    assert [event.details for event in only_agent] == ["Event 5", "Event 3", "Event 1"]
    combined = service.recent(workspace, 1, agents=["agent-0"], event_types=["completed"])
    assert [event.details for event in combined] == ["Event 4"]
    with pytest.raises(ActivityQueryError):
        service.recent(workspace, -2)


def test_feed_payload(runtime_settings: RuntimeSettings, workspace: Path) -> None:
    service = _service(runtime_settings)
    service.record_activity(workspace, agent_id="agent-1", event_type="claimed", timestamp="2025-10-01T00:00:00Z")
    service.record_activity(workspace, agent_id="agent-2", event_type="completed", timestamp="2025-10-01T00:05:00Z")
    service.record_activity(workspace, agent_id="agent-1", event_type="completed", timestamp="2025-10-01T00:09:00Z")

    feed = service.feed(workspace, 2)
    assert feed["count"] == 3
    assert feed["capacity"] == runtime_settings.activity_capacity
    assert [entry["timestamp"] for entry in feed["recent"]] == ["2025-10-01T00:09:00Z", "2025-10-01T00:05:00Z"]
    assert feed["agents"] == {"agent-1": 1, "agent-2": 1}
    assert feed["eventTypes"] == {"completed": 2}
    assert feed["lastTimestamp"] == "2025-10-01T00:09:00Z"
    assert feed["logPath"].endswith("activity-log.json")


def test_workspace_config_controls_capacity_and_path(runtime_settings: RuntimeSettings, workspace: Path) -> None:
    config_dir = workspace / ".agentfeed" / "config"
    config_dir.mkdir(parents=True)
    (config_dir / "activity.yaml").write_text("capacity: 3\nlog_path: logs/feed.json\n", encoding="utf-8")

    service = _service(runtime_settings)
    for i in range(5):
        service.record_activity(workspace, agent_id="agent-1", event_type="claimed", details=f"Event {i}")

    assert service.count(workspace) == 3
    document = json.loads((workspace / "logs" / "feed.json").read_text(encoding="utf-8"))
    assert [entry["details"] for entry in document["events"]] == ["Event 4", "Event 3", "Event 2"]


def test_invalid_workspace_config(runtime_settings: RuntimeSettings, workspace: Path) -> None:
    config_dir = workspace / ".agentfeed" / "config"
    config_dir.mkdir(parents=True)
    (config_dir / "activity.yaml").write_text("capacity: -1\n", encoding="utf-8")
    with pytest.raises(ActivityConfigError, match="capacity"):
        _service(runtime_settings).count(workspace)


def test_corrupt_log_is_reported_to_telemetry(runtime_settings: RuntimeSettings, workspace: Path) -> None:
    path = workspace / ".agentfeed" / "state" / "activity-log.json"
    path.parent.mkdir(parents=True)
    path.write_text("garbage", encoding="utf-8")

    service = _service(runtime_settings)
    assert service.count(workspace) == 0
    warnings = [evt for evt in iter_events(runtime_settings) if evt["event"] == "activity.load"]
    assert len(warnings) == 1
    assert warnings[0]["level"] == "warn"
    assert warnings[0]["payload"]["location"] == str(path)


def test_custom_diagnostics_sink(runtime_settings: RuntimeSettings, workspace: Path) -> None:
    path = workspace / ".agentfeed" / "state" / "activity-log.json"
    path.parent.mkdir(parents=True)
    path.write_text("{}", encoding="utf-8")

    received: List[LoadCorruptionWarning] = []
    service = _service(runtime_settings, diagnostics=received.append)
    assert service.recent(workspace) == []
    assert len(received) == 1
