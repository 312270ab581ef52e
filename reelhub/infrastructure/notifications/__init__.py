"""Realtime notification delivery for the infrastructure layer."""

from .connection import HEARTBEAT_MESSAGE, PONG_MESSAGE, Connection, Transport
from .gateway import NotificationGateway, SqlAlchemyNotificationGateway
from .hub import NotificationHub, serialize_payload
from .purge import NotificationPurger

__all__ = [
    "Connection",
    "HEARTBEAT_MESSAGE",
    "PONG_MESSAGE",
    "Transport",
    "NotificationGateway",
    "SqlAlchemyNotificationGateway",
    "NotificationHub",
    "serialize_payload",
    "NotificationPurger",
]
