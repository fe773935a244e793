"""Activity event value objects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping

from .errors import ActivityEventError

_REQUIRED_KEYS = (("timestamp", "timestamp"), ("agentId", "agent_id"), ("eventType", "event_type"))


class ActivityEventType(str, Enum):
    CLAIMED = "claimed"
    COMPLETED = "completed"
    REVIEWED = "reviewed"
    IDEATED = "ideated"
    CREATED = "created"
    PAUSED = "paused"
    RESUMED = "resumed"
    ERROR = "error"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)


def _optional_int(name: str, value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ActivityEventError(f"activity event {name} must be an integer")
    return value


@dataclass(frozen=True)
class ActivityEvent:
    """One observed occurrence in an agent workflow.

    ``timestamp`` is assigned by whoever reports the event; the log never
    rewrites it. Optional fields left as ``None`` are dropped from the wire
    representation rather than serialised as nulls. An empty ``details``
    string is stored as ``None``.
    """

    timestamp: str
    agent_id: str
    event_type: str
    project_number: int | None = None
    issue_number: int | None = None
    details: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.event_type, ActivityEventType):
            object.__setattr__(self, "event_type", self.event_type.value)
        for _, attr in _REQUIRED_KEYS:
            value = getattr(self, attr)
            if not isinstance(value, str) or not value.strip():
                raise ActivityEventError(f"activity event {attr} must be a non-empty string")
        _optional_int("project_number", self.project_number)
        _optional_int("issue_number", self.issue_number)
        if self.details is not None and not isinstance(self.details, str):
            raise ActivityEventError("activity event details must be a string")
        if self.details == "":
            object.__setattr__(self, "details", None)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "timestamp": self.timestamp,
            "agentId": self.agent_id,
            "eventType": self.event_type,
        }
        if self.project_number is not None:
            payload["projectNumber"] = self.project_number
        if self.issue_number is not None:
            payload["issueNumber"] = self.issue_number
        if self.details is not None:
            payload["details"] = self.details
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ActivityEvent":
        if not isinstance(data, Mapping):
            raise ActivityEventError("activity event must be an object")
        missing = [key for key, _ in _REQUIRED_KEYS if key not in data]
        if missing:
            raise ActivityEventError(f"activity event missing {', '.join(missing)}")
        return cls(
            timestamp=data["timestamp"],
            agent_id=data["agentId"],
            event_type=data["eventType"],
            project_number=data.get("projectNumber"),
            issue_number=data.get("issueNumber"),
            details=data.get("details"),
        )
