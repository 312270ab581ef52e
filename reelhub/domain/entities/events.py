"""Typed notification events emitted by the movie platform."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, ClassVar

from .notification import UNKNOWN_NOTIFICATION_TYPE


@dataclass(frozen=True)
class NotificationEvent:
    """Base class for events; ``type`` is the discriminator sent to clients."""

    type: ClassVar[str] = UNKNOWN_NOTIFICATION_TYPE

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type}
        payload.update(asdict(self))
        return payload


@dataclass(frozen=True)
class FollowEvent(NotificationEvent):
    type: ClassVar[str] = "follow"

    follower_id: int
    follower_name: str
    text: str


@dataclass(frozen=True)
class ReviewEvent(NotificationEvent):
    """A followed user published a review."""

    type: ClassVar[str] = "review"

    author_id: int
    author_name: str
    movie_id: int
    movie_title: str
    text: str


@dataclass(frozen=True)
class ReviewDeletedEvent(NotificationEvent):
    type: ClassVar[str] = "review_deleted"

    review_id: int
    text: str


@dataclass(frozen=True)
class CommentDeletedEvent(NotificationEvent):
    type: ClassVar[str] = "comment_deleted"

    comment_id: int
    text: str


@dataclass(frozen=True)
class BanEvent(NotificationEvent):
    """Ban and unban share the ``banned`` type; ``text`` tells them apart."""

    type: ClassVar[str] = "banned"

    text: str


def message_type_from(payload: Any) -> str:
    """Return the ``type`` discriminator of ``payload`` or ``"unknown"``."""

    if isinstance(payload, NotificationEvent):
        return payload.type
    if isinstance(payload, Mapping):
        value = payload.get("type")
        if isinstance(value, str):
            return value
    return UNKNOWN_NOTIFICATION_TYPE


__all__ = [
    "BanEvent",
    "CommentDeletedEvent",
    "FollowEvent",
    "NotificationEvent",
    "ReviewDeletedEvent",
    "ReviewEvent",
    "message_type_from",
]
