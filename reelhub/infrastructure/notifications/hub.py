"""Connection registry and delivery routing for notification websockets."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

from anyio import to_thread

from reelhub.domain.entities import (
    NotificationEvent,
    NotificationRecord,
    OutboundEnvelope,
    message_type_from,
)
from reelhub.utils import now_in_app_timezone

from .connection import Connection, Transport
from .gateway import NotificationGateway

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_payload(payload: Any) -> tuple[str, str]:
    """Return ``(type tag, JSON text)`` for ``payload``.

    Dates and datetimes are sent as ISO 8601 strings. Raises
    ``TypeError``/``ValueError`` when the payload is not strict JSON
    (``NaN`` and infinities included).
    """

    if isinstance(payload, NotificationEvent):
        payload = payload.to_payload()
    data = json.dumps(payload, ensure_ascii=False, allow_nan=False, default=_json_default)
    return message_type_from(payload), data


class NotificationHub:
    """Deliver notifications to live websockets, or store them for later.

    The registry maps each user to the set of their live connections. It is
    guarded by one lock, held only while the map is read or changed.
    Every hand-off (to a connection queue or to a background worker) is a
    ``put_nowait``: producers never wait, and saturated queues drop work.
    """

    def __init__(
        self,
        gateway: NotificationGateway,
        *,
        queue_size: int = 256,
        write_timeout: float = 10.0,
        ping_period: float = 54.0,
        persist_queue_size: int = 1024,
        delete_queue_size: int = 1024,
    ) -> None:
        self._gateway = gateway
        self._queue_size = queue_size
        self.write_timeout = write_timeout
        self.ping_period = ping_period
        self._connections: dict[int, set[Connection]] = {}
        self._lock = threading.Lock()
        self._persist_queue: asyncio.Queue[NotificationRecord] = asyncio.Queue(
            maxsize=persist_queue_size
        )
        self._delete_queue: asyncio.Queue[int] = asyncio.Queue(maxsize=delete_queue_size)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._workers: list[asyncio.Task[None]] = []

    # -- registry -----------------------------------------------------------

    def register(self, user_id: int, transport: Transport) -> Connection:
        """Track ``transport`` for ``user_id`` and start its writer task."""

        connection = Connection(user_id, transport, queue_size=self._queue_size)
        with self._lock:
            self._connections.setdefault(user_id, set()).add(connection)
        connection.start(self)
        logger.info("User %s connected", user_id)
        return connection

    def deregister(self, user_id: int, connection: Connection) -> None:
        """Forget ``connection`` and close it. Safe to call more than once."""

        removed = False
        with self._lock:
            connections = self._connections.get(user_id)
            if connections is not None and connection in connections:
                connections.discard(connection)
                removed = True
                if not connections:
                    del self._connections[user_id]
        connection.close()
        if removed:
            logger.info("User %s disconnected", user_id)

    def list_connected_users(self) -> set[int]:
        with self._lock:
            return set(self._connections)

    def connections_for(self, user_id: int) -> tuple[Connection, ...]:
        with self._lock:
            return tuple(self._connections.get(user_id, ()))

    def is_registered(self, user_id: int, connection: Connection) -> bool:
        with self._lock:
            return connection in self._connections.get(user_id, ())

    # -- delivery -----------------------------------------------------------

    def deliver(self, user_id: int, payload: Any) -> None:
        """Send ``payload`` to every live connection of ``user_id``.

        Users without a live connection get the payload stored instead. Never
        raises and never blocks; failures are logged and the message dropped.
        Safe to call from threads other than the hub's event loop.
        """

        try:
            message_type, data = serialize_payload(payload)
        except (TypeError, ValueError):
            logger.exception("Could not serialize notification for user %s", user_id)
            return

        loop = self._loop
        if loop is None:
            if not _has_running_loop():
                logger.warning(
                    "Notification hub is not running; dropping %s notification for user %s",
                    message_type,
                    user_id,
                )
                return
        elif not _is_running_in(loop):
            try:
                loop.call_soon_threadsafe(self._route, user_id, message_type, data)
            except RuntimeError:
                logger.warning(
                    "Event loop closed; dropping %s notification for user %s",
                    message_type,
                    user_id,
                )
            return
        self._route(user_id, message_type, data)

    def deliver_to_many(self, user_ids: Iterable[int | None], payload: Any) -> None:
        """Call :meth:`deliver` once for each distinct recipient."""

        # Repeated and empty ids are skipped, so a user listed twice gets one copy.
        seen: set[int] = set()
        for user_id in user_ids:
            if not user_id or user_id in seen:
                continue
            seen.add(user_id)
            self.deliver(user_id, payload)

    def _route(self, user_id: int, message_type: str, data: str) -> None:
        connections = self.connections_for(user_id)
        if connections:
            envelope = OutboundEnvelope(data=data)
            for connection in connections:
                if not connection.enqueue(envelope):
                    logger.warning(
                        "Outbound queue of user %s is full; dropping the connection",
                        user_id,
                    )
                    self.deregister(user_id, connection)
            return

        record = NotificationRecord(
            id=None,
            user_id=user_id,
            type=message_type,
            data=data,
            created_at=now_in_app_timezone(),
        )
        try:
            self._persist_queue.put_nowait(record)
        except asyncio.QueueFull:
            logger.warning(
                "Persistence queue is full; dropping %s notification for user %s",
                message_type,
                user_id,
            )

    # -- reconnect ----------------------------------------------------------

    async def flush_pending(self, user_id: int, connection: Connection) -> int:
        """Queue the user's stored notifications on ``connection``.

        Records are only removed after the writer has sent them. Stops at the
        first full queue; whatever is left stays stored for the next
        reconnect. Returns the number of queued records.
        """

        if not self.is_registered(user_id, connection):
            return 0
        try:
            records = await to_thread.run_sync(self._gateway.list_pending, user_id)
        except Exception:
            logger.exception("Failed to load pending notifications for user %s", user_id)
            return 0

        flushed = 0
        for record in records:
            envelope = OutboundEnvelope(data=record.data, notification_id=record.id)
            if not connection.enqueue(envelope):
                logger.warning(
                    "Stopped flushing for user %s; %d notification(s) left stored",
                    user_id,
                    len(records) - flushed,
                )
                break
            flushed += 1
        if flushed:
            logger.debug("Flushed %d stored notification(s) to user %s", flushed, user_id)
        return flushed

    def confirm_delivery(self, notification_id: int) -> None:
        """Schedule removal of a stored record that reached the socket."""

        try:
            self._delete_queue.put_nowait(notification_id)
        except asyncio.QueueFull:
            logger.warning(
                "Delete queue is full; notification %s will be purged later",
                notification_id,
            )

    # -- background workers -------------------------------------------------

    def start(self) -> None:
        """Bind the hub to the running loop and start both storage workers."""

        if self._workers:
            return
        loop = asyncio.get_running_loop()
        self._loop = loop
        self._workers = [
            loop.create_task(self._persist_records(), name="notification-persist"),
            loop.create_task(self._delete_delivered(), name="notification-delete"),
        ]

    async def shutdown(self) -> None:
        """Stop the workers and close every remaining connection.

        Records and ids still queued for the workers are abandoned.
        """

        workers, self._workers = self._workers, []
        for worker in workers:
            worker.cancel()
        if workers:
            await asyncio.gather(*workers, return_exceptions=True)

        with self._lock:
            remaining = [
                (user_id, connection)
                for user_id, connections in self._connections.items()
                for connection in connections
            ]
        for user_id, connection in remaining:
            self.deregister(user_id, connection)

        writers = [c.writer for _, c in remaining if c.writer is not None]
        if writers:
            await asyncio.wait(writers, timeout=self.write_timeout)
        self._loop = None

    async def _persist_records(self) -> None:
        while True:
            record = await self._persist_queue.get()
            try:
                await to_thread.run_sync(self._gateway.create_notification, record)
            except Exception:
                logger.exception(
                    "Failed to store %s notification for user %s",
                    record.type,
                    record.user_id,
                )

    async def _delete_delivered(self) -> None:
        while True:
            notification_id = await self._delete_queue.get()
            try:
                await to_thread.run_sync(self._gateway.soft_delete, notification_id)
            except Exception:
                logger.exception("Failed to delete delivered notification %s", notification_id)


def _is_running_in(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


def _has_running_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


__all__ = ["NotificationHub", "serialize_payload"]
