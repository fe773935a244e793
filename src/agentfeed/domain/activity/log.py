"""Bounded, durable activity log."""

from __future__ import annotations

import warnings
from typing import TYPE_CHECKING, Callable, List, Tuple

from .errors import (
    ActivityQueryError,
    ActivityStoreCorruptError,
    LoadCorruptionWarning,
    PersistenceError,
)
from .models import ActivityEvent

if TYPE_CHECKING:  # pragma: no cover
    from agentfeed.ports.activity.store import ActivityLogStore

DEFAULT_CAPACITY = 50

Diagnostics = Callable[[LoadCorruptionWarning], None]


def warn_diagnostics(warning: LoadCorruptionWarning) -> None:
    warnings.warn(warning, stacklevel=4)


class ActivityLog:
    """Keeps the most recent ``capacity`` events, newest first.

    Every mutation rewrites the whole window through the store before the
    in-memory window is replaced, so a failed write leaves the log exactly as
    it was and the caller sees ``PersistenceError``. The window itself is an
    immutable tuple swapped in one assignment; readers never see a partial
    update.

    One instance per storage location. The log has no locking of its own:
    concurrent writers in one process must serialise ``append``/``clear``, and
    two processes sharing a location will overwrite each other.
    """

    def __init__(
        self,
        store: "ActivityLogStore",
        *,
        capacity: int = DEFAULT_CAPACITY,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ActivityQueryError("activity log capacity must be a positive integer")
        self._store = store
        self._capacity = capacity
        self._diagnostics = diagnostics or warn_diagnostics
        self._events: Tuple[ActivityEvent, ...] = self._load()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def location(self) -> str:
        return self._store.describe()

    def append(self, event: ActivityEvent) -> None:
        window = ((event,) + self._events)[: self._capacity]
        self._persist(window)
        self._events = window

    def get_recent(self, limit: int = DEFAULT_CAPACITY) -> List[ActivityEvent]:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise ActivityQueryError("limit must be a non-negative integer")
        window = self._events
        return list(window[:limit])

    def get_count(self) -> int:
        return len(self._events)

    def clear(self) -> None:
        self._persist(())
        self._events = ()

    def _persist(self, window: Tuple[ActivityEvent, ...]) -> None:
        try:
            self._store.save(window)
        except PersistenceError:
            raise
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"failed to persist activity log at {self._store.describe()}: {exc}") from exc

    def _load(self) -> Tuple[ActivityEvent, ...]:
        try:
            stored = self._store.load()
        except ActivityStoreCorruptError as exc:
            self._diagnostics(LoadCorruptionWarning(self._store.describe(), str(exc)))
            return ()
        if not stored:
            return ()
        return tuple(stored[: self._capacity])

    def __repr__(self) -> str:
        return f"ActivityLog(location={self.location!r}, capacity={self._capacity}, count={len(self._events)})"
