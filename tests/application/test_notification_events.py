"""Tests for the helpers that build platform notifications."""

from __future__ import annotations

import pathlib
import sys

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from reelhub.application.use_cases.notifications import (
    notify_comment_deleted,
    notify_followers_new_review,
    notify_new_follower,
    notify_review_deleted,
    notify_user_banned,
    notify_user_unbanned,
)
from reelhub.domain.entities import FollowEvent, message_type_from


class RecordingHub:
    def __init__(self) -> None:
        self.delivered: list[tuple[int, dict]] = []

    def deliver(self, user_id, payload) -> None:
        self.delivered.append((user_id, payload.to_payload()))

    def deliver_to_many(self, user_ids, payload) -> None:
        for user_id in user_ids:
            self.deliver(user_id, payload)


def test_new_follower_notification() -> None:
    hub = RecordingHub()

    notify_new_follower(hub, target_id=42, follower_id=7, follower_name="Mia")

    assert hub.delivered == [
        (
            42,
            {
                "type": "follow",
                "follower_id": 7,
                "follower_name": "Mia",
                "text": "Mia started following you",
            },
        )
    ]


def test_new_review_goes_to_followers_but_not_the_author() -> None:
    hub = RecordingHub()

    notify_followers_new_review(
        hub,
        follower_ids=[3, 4, 9],
        author_id=9,
        author_name="Leo",
        movie_id=550,
        movie_title="Fight Club",
    )

    assert [user_id for user_id, _ in hub.delivered] == [3, 4]
    payload = hub.delivered[0][1]
    assert payload["type"] == "review"
    assert payload["movie_id"] == 550
    assert payload["text"] == "Leo wrote a new review for a movie «Fight Club»"


@pytest.mark.parametrize(
    ("notify", "kwargs", "expected_type", "id_field"),
    [
        (notify_review_deleted, {"author_id": 5, "review_id": 11}, "review_deleted", "review_id"),
        (notify_comment_deleted, {"author_id": 5, "comment_id": 12}, "comment_deleted", "comment_id"),
    ],
)
def test_moderation_notifications(notify, kwargs, expected_type, id_field) -> None:
    hub = RecordingHub()

    notify(hub, **kwargs)

    user_id, payload = hub.delivered[0]
    assert user_id == 5
    assert payload["type"] == expected_type
    assert payload[id_field] == kwargs[id_field]
    assert "deleted by a moderator" in payload["text"]


def test_ban_and_unban_share_the_banned_type() -> None:
    hub = RecordingHub()

    notify_user_banned(hub, user_id=8)
    notify_user_unbanned(hub, user_id=8)

    assert [payload["type"] for _, payload in hub.delivered] == ["banned", "banned"]
    assert hub.delivered[0][1]["text"] == "Your account has been banned by a moderator"
    assert hub.delivered[1][1]["text"] == "Your account has been unbanned by a moderator"


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"type": "follow"}, "follow"),
        ({"type": ""}, ""),
        ({"type": None}, "unknown"),
        ({}, "unknown"),
        ("plain text", "unknown"),
        (FollowEvent(follower_id=1, follower_name="a", text="b"), "follow"),
    ],
)
def test_message_type_from(payload, expected) -> None:
    assert message_type_from(payload) == expected
