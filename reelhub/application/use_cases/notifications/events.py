"""Utility helpers to build and dispatch platform notifications."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol

from reelhub.domain.entities import (
    BanEvent,
    CommentDeletedEvent,
    FollowEvent,
    ReviewDeletedEvent,
    ReviewEvent,
)


class NotificationSink(Protocol):
    """What the use cases need from :class:`NotificationHub`."""

    def deliver(self, user_id: int, payload: Any) -> None: ...

    def deliver_to_many(self, user_ids: Iterable[int | None], payload: Any) -> None: ...


def notify_new_follower(
    hub: NotificationSink, *, target_id: int, follower_id: int, follower_name: str
) -> None:
    """Tell ``target_id`` that somebody started following them."""

    hub.deliver(
        target_id,
        FollowEvent(
            follower_id=follower_id,
            follower_name=follower_name,
            text=f"{follower_name} started following you",
        ),
    )


def notify_followers_new_review(
    hub: NotificationSink,
    *,
    follower_ids: Iterable[int],
    author_id: int,
    author_name: str,
    movie_id: int,
    movie_title: str,
) -> None:
    """Announce a freshly published review to the author's followers."""

    event = ReviewEvent(
        author_id=author_id,
        author_name=author_name,
        movie_id=movie_id,
        movie_title=movie_title,
        text=f"{author_name} wrote a new review for a movie «{movie_title}»",
    )
    hub.deliver_to_many(
        (follower_id for follower_id in follower_ids if follower_id != author_id), event
    )


def notify_review_deleted(hub: NotificationSink, *, author_id: int, review_id: int) -> None:
    hub.deliver(
        author_id,
        ReviewDeletedEvent(
            review_id=review_id, text="Your review was deleted by a moderator"
        ),
    )


def notify_comment_deleted(
    hub: NotificationSink, *, author_id: int, comment_id: int
) -> None:
    hub.deliver(
        author_id,
        CommentDeletedEvent(
            comment_id=comment_id, text="Your comment was deleted by a moderator"
        ),
    )


def notify_user_banned(hub: NotificationSink, *, user_id: int) -> None:
    hub.deliver(user_id, BanEvent(text="Your account has been banned by a moderator"))


def notify_user_unbanned(hub: NotificationSink, *, user_id: int) -> None:
    hub.deliver(user_id, BanEvent(text="Your account has been unbanned by a moderator"))


__all__ = [
    "NotificationSink",
    "notify_comment_deleted",
    "notify_followers_new_review",
    "notify_new_follower",
    "notify_review_deleted",
    "notify_user_banned",
    "notify_user_unbanned",
]
