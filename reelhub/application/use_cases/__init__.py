"""Aggregate application use cases."""

from .notifications import (
    notify_comment_deleted,
    notify_followers_new_review,
    notify_new_follower,
    notify_review_deleted,
    notify_user_banned,
    notify_user_unbanned,
)

__all__ = [
    "notify_comment_deleted",
    "notify_followers_new_review",
    "notify_new_follower",
    "notify_review_deleted",
    "notify_user_banned",
    "notify_user_unbanned",
]
