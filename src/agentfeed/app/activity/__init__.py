"""Activity feed application package."""

from .config import ActivityConfigError, ActivityFeedConfig, load_feed_config  # noqa: F401
from .service import ActivityFeedService, ActivityListener  # noqa: F401

__all__ = [
    "ActivityConfigError",
    "ActivityFeedConfig",
    "ActivityFeedService",
    "ActivityListener",
    "load_feed_config",
]
