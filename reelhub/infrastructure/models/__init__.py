"""ORM models used by the notification core."""

from .notification import NotificationModel

__all__ = ["NotificationModel"]
