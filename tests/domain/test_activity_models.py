from __future__ import annotations

import dataclasses

import pytest

from agentfeed.domain.activity import ActivityEvent, ActivityEventError, ActivityEventType


def test_to_dict_uses_wire_keys() -> None:
    event = ActivityEvent(
        timestamp="2025-10-01T00:00:00Z",
        agent_id="agent-3",
        event_type=ActivityEventType.REVIEWED,
        project_number=0,
        issue_number=12,
        details="Looks good",
    )
    assert event.event_type == "reviewed"
    assert event.to_dict() == {
        "timestamp": "2025-10-01T00:00:00Z",
        "agentId": "agent-3",
        "eventType": "reviewed",
        "projectNumber": 0,
        "issueNumber": 12,
        "details": "Looks good",
    }


def test_from_dict_restores_event() -> None:
    payload = {"timestamp": "2025-10-01T00:00:00Z", "agentId": "agent-1", "eventType": "ideated"}
    event = ActivityEvent.from_dict(payload)
    assert event.project_number is None
    assert event.details is None
    assert event.to_dict() == payload


def test_events_are_immutable() -> None:
    event = ActivityEvent(timestamp="t", agent_id="agent-1", event_type="claimed")
    with pytest.raises(dataclasses.FrozenInstanceError):
        event.details = "changed"  # type: ignore[misc]


def test_log_level_does_not_enforce_event_type() -> None:
    event = ActivityEvent(timestamp="t", agent_id="agent-1", event_type="custom-kind")
    assert event.event_type == "custom-kind"


@pytest.mark.parametrize(
    "payload",
    [
        {"agentId": "agent-1", "eventType": "claimed"},
        {"timestamp": "t", "agentId": "", "eventType": "claimed"},
        {"timestamp": "t", "agentId": "agent-1", "eventType": "claimed", "projectNumber": "42"},
        {"timestamp": "t", "agentId": "agent-1", "eventType": "claimed", "issueNumber": True},
        {"timestamp": "t", "agentId": "agent-1", "eventType": "claimed", "details": 5},
    ],
)
def test_invalid_payloads_are_rejected(payload: dict) -> None:
    with pytest.raises(ActivityEventError):
        ActivityEvent.from_dict(payload)


def test_empty_details_are_normalised() -> None:
    event = ActivityEvent(timestamp="t", agent_id="agent-1", event_type="claimed", details="")
    assert event.details is None
    assert "details" not in event.to_dict()
    assert ActivityEvent.from_dict(event.to_dict()) == event
