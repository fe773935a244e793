"""Application service feeding agent activity to dashboards."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List

from agentfeed.adapters.activity.file_store import FileActivityLogStore
from agentfeed.app.activity.config import ActivityFeedConfig, load_feed_config
from agentfeed.domain.activity import (
    ActivityEvent,
    ActivityEventError,
    ActivityEventType,
    ActivityLog,
    ActivityQueryError,
    Diagnostics,
)
from agentfeed.ports.activity.store import ActivityLogStore
from agentfeed.settings import RuntimeSettings
from agentfeed.utils.telemetry import record_structured_event, telemetry_diagnostics
from agentfeed.utils.timestamps import utc_now_iso

ActivityListener = Callable[[Dict[str, Any]], None]
StoreFactory = Callable[[ActivityFeedConfig], ActivityLogStore]


def _file_store(config: ActivityFeedConfig) -> ActivityLogStore:
    return FileActivityLogStore(config.log_path)


class _Workspace:
    __slots__ = ("config", "log", "lock")

    def __init__(self, config: ActivityFeedConfig, log: ActivityLog) -> None:
        self.config = config
        self.log = log
        self.lock = threading.Lock()


class ActivityFeedService:
    """Owns one activity log per workspace and fans out updates to listeners.

    Writes to a workspace log are serialised here, which is what the log
    itself expects from its owner. Reads go straight to the log.
    """

    def __init__(
        self,
        settings: RuntimeSettings,
        *,
        store_factory: StoreFactory | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        self._settings = settings
        self._store_factory = store_factory or _file_store
        self._diagnostics = diagnostics or telemetry_diagnostics(settings)
        self._workspaces: Dict[Path, _Workspace] = {}
        self._registry_lock = threading.Lock()
        self._listeners: List[ActivityListener] = []

    def log_for(self, workspace_root: Path) -> ActivityLog:
        return self._workspace(workspace_root).log

    def config_for(self, workspace_root: Path) -> ActivityFeedConfig:
        return self._workspace(workspace_root).config

    def subscribe(self, listener: ActivityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def record(self, workspace_root: Path, event: ActivityEvent) -> ActivityEvent:
        workspace = self._workspace(workspace_root)
        with workspace.lock:
            workspace.log.append(event)
        self._publish({"type": "activityUpdate", "event": event.to_dict()})
        return event

    def record_activity(
        self,
        workspace_root: Path,
        *,
        agent_id: str,
        event_type: str,
        project_number: int | None = None,
        issue_number: int | None = None,
        details: str | None = None,
        timestamp: str | None = None,
    ) -> ActivityEvent:
        try:
            kind = ActivityEventType(event_type)
        except ValueError as exc:
            allowed = ", ".join(ActivityEventType.values())
            raise ActivityEventError(f"unknown event type '{event_type}' (expected one of: {allowed})") from exc
        event = ActivityEvent(
            timestamp=timestamp or utc_now_iso(),
            agent_id=agent_id,
            event_type=kind.value,
            project_number=project_number,
            issue_number=issue_number,
            details=details,
        )
        return self.record(workspace_root, event)

    def recent(
        self,
        workspace_root: Path,
        limit: int | None = None,
        *,
        agents: Iterable[str] | None = None,
        event_types: Iterable[str] | None = None,
    ) -> List[ActivityEvent]:
        log = self.log_for(workspace_root)
        if limit is None:
            limit = log.capacity
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise ActivityQueryError("limit must be a non-negative integer")
        agent_filter = set(agents or ())
        type_filter = set(event_types or ())
        if not agent_filter and not type_filter:
            return log.get_recent(limit)

        matched: List[ActivityEvent] = []
        for event in log.get_recent(log.capacity):
            if agent_filter and event.agent_id not in agent_filter:
                continue
            if type_filter and event.event_type not in type_filter:
                continue
            matched.append(event)
        return matched[:limit]

    def count(self, workspace_root: Path) -> int:
        return self.log_for(workspace_root).get_count()

    def clear(self, workspace_root: Path) -> None:
        workspace = self._workspace(workspace_root)
        with workspace.lock:
            workspace.log.clear()
        self._publish({"type": "activityCleared"})

    def feed(
        self,
        workspace_root: Path,
        limit: int | None = None,
        *,
        agents: Iterable[str] | None = None,
        event_types: Iterable[str] | None = None,
    ) -> Dict[str, Any]:
        """Dashboard payload: recent events plus per-agent and per-type counts."""

        workspace = self._workspace(workspace_root)
        events = self.recent(workspace_root, limit, agents=agents, event_types=event_types)
        by_agent: Dict[str, int] = {}
        by_type: Dict[str, int] = {}
        for event in events:
            by_agent[event.agent_id] = by_agent.get(event.agent_id, 0) + 1
            by_type[event.event_type] = by_type.get(event.event_type, 0) + 1
        return {
            "count": workspace.log.get_count(),
            "capacity": workspace.log.capacity,
            "recent": [event.to_dict() for event in events],
            "agents": by_agent,
            "eventTypes": by_type,
            "lastTimestamp": events[0].timestamp if events else None,
            "logPath": workspace.log.location,
        }

    def _workspace(self, workspace_root: Path) -> _Workspace:
        key = workspace_root.expanduser().resolve()
        with self._registry_lock:
            workspace = self._workspaces.get(key)
            if workspace is None:
                config = load_feed_config(key, self._settings)
                log = ActivityLog(
                    self._store_factory(config),
                    capacity=config.capacity,
                    diagnostics=self._diagnostics,
                )
                workspace = _Workspace(config, log)
                self._workspaces[key] = workspace
            return workspace

    def _publish(self, message: Dict[str, Any]) -> None:
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception as exc:  # noqa: BLE001
                record_structured_event(
                    self._settings,
                    "activity.listener",
                    level="error",
                    status="failed",
                    component="activity",
                    payload={"message": message.get("type"), "error": str(exc)},
                )


__all__ = ["ActivityFeedService", "ActivityListener"]
