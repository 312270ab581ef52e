"""Domain entities for stored notifications and queued outbound messages."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

UNKNOWN_NOTIFICATION_TYPE = "unknown"


@dataclass
class NotificationRecord:
    """A message kept in storage until a connection of its user receives it."""

    id: int | None
    user_id: int
    type: str
    data: str
    read: bool = False
    created_at: datetime | None = None
    deleted_at: datetime | None = None


@dataclass(frozen=True)
class OutboundEnvelope:
    """Serialized message waiting on a connection's outbound queue.

    ``notification_id`` is only set for messages flushed from storage; the
    record is removed once the envelope has been written to the socket.
    """

    data: str
    notification_id: int | None = None


__all__ = ["NotificationRecord", "OutboundEnvelope", "UNKNOWN_NOTIFICATION_TYPE"]
