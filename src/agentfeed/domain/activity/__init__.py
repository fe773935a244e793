"""Activity feed domain exports."""

from .errors import (
    ActivityEventError,
    ActivityLogError,
    ActivityQueryError,
    ActivityStoreCorruptError,
    LoadCorruptionWarning,
    PersistenceError,
)
from .models import ActivityEvent, ActivityEventType
from .log import DEFAULT_CAPACITY, ActivityLog, Diagnostics, warn_diagnostics

__all__ = [
    "ActivityEvent",
    "ActivityEventError",
    "ActivityEventType",
    "ActivityLog",
    "ActivityLogError",
    "ActivityQueryError",
    "ActivityStoreCorruptError",
    "DEFAULT_CAPACITY",
    "Diagnostics",
    "LoadCorruptionWarning",
    "PersistenceError",
    "warn_diagnostics",
]
