"""Domain entities exposed by the notification core."""

from .events import (
    BanEvent,
    CommentDeletedEvent,
    FollowEvent,
    NotificationEvent,
    ReviewDeletedEvent,
    ReviewEvent,
    message_type_from,
)
from .notification import (
    UNKNOWN_NOTIFICATION_TYPE,
    NotificationRecord,
    OutboundEnvelope,
)

__all__ = [
    "BanEvent",
    "CommentDeletedEvent",
    "FollowEvent",
    "NotificationEvent",
    "NotificationRecord",
    "OutboundEnvelope",
    "ReviewDeletedEvent",
    "ReviewEvent",
    "UNKNOWN_NOTIFICATION_TYPE",
    "message_type_from",
]
