"""Public helpers for emitting platform notifications."""

from .events import (
    NotificationSink,
    notify_comment_deleted,
    notify_followers_new_review,
    notify_new_follower,
    notify_review_deleted,
    notify_user_banned,
    notify_user_unbanned,
)

__all__ = [
    "NotificationSink",
    "notify_new_follower",
    "notify_followers_new_review",
    "notify_review_deleted",
    "notify_comment_deleted",
    "notify_user_banned",
    "notify_user_unbanned",
]
