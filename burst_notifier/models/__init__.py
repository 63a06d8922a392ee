"""SQLAlchemy models."""

from burst_notifier.models.notification_config import NotificationConfig
from burst_notifier.models.user_notification import UserNotification

__all__ = [
    "NotificationConfig",
    "UserNotification",
]
