"""Error taxonomy for the activity log."""

from __future__ import annotations


class ActivityLogError(RuntimeError):
    """Base class for activity log failures."""


class PersistenceError(ActivityLogError):
    """Raised when the backing store cannot be written."""


class ActivityStoreCorruptError(ActivityLogError):
    """Raised by a store when the persisted window cannot be used."""


class ActivityEventError(ValueError):
    """Raised when an activity event payload is invalid."""


class ActivityQueryError(ValueError):
    """Raised for invalid query or sizing arguments."""


class LoadCorruptionWarning(UserWarning):
    """Persisted activity could not be loaded; the log started empty."""

    def __init__(self, location: str, reason: str) -> None:
        super().__init__(f"activity log at {location} is unreadable ({reason}); starting empty")
        self.location = location
        self.reason = reason
