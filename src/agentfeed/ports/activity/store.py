"""Port for durable activity log storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

from agentfeed.domain.activity import ActivityEvent


class ActivityLogStore(ABC):
    """Backing store holding the whole retained window of one activity log."""

    @abstractmethod
    def load(self) -> List[ActivityEvent] | None:
        """Return the persisted window newest-first, or ``None`` if nothing is stored.

        Raises ``ActivityStoreCorruptError`` when stored state cannot be used.
        """

    @abstractmethod
    def save(self, events: Sequence[ActivityEvent]) -> None:
        """Rewrite the full window; raise ``PersistenceError`` on any failure."""

    @abstractmethod
    def describe(self) -> str:
        """Human readable location used in diagnostics."""


__all__ = ["ActivityLogStore"]
