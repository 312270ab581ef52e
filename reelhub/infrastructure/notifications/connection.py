"""A single websocket session and the task that writes to it."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol

from reelhub.domain.entities import OutboundEnvelope

if TYPE_CHECKING:
    from .hub import NotificationHub

logger = logging.getLogger(__name__)

HEARTBEAT_MESSAGE = '{"type": "ping"}'
PONG_MESSAGE = '{"type": "pong"}'

# Queue marker telling the writer to stop once everything before it is sent.
_CLOSE = object()


class Transport(Protocol):
    """The part of a Starlette ``WebSocket`` the writer relies on."""

    async def send_text(self, data: str) -> None: ...

    async def close(self, code: int = 1000, reason: str | None = None) -> None: ...


class Connection:
    """Outbound side of one live websocket belonging to ``user_id``.

    Producers only ever touch :meth:`enqueue`; the writer task started by
    :meth:`start` is the only code that writes to ``transport``.
    """

    def __init__(self, user_id: int, transport: Transport, *, queue_size: int) -> None:
        self.user_id = user_id
        self.transport = transport
        self.queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=queue_size)
        self.closed = False
        self._writer: asyncio.Task[None] | None = None

    def __repr__(self) -> str:
        return f"<Connection user_id={self.user_id} closed={self.closed}>"

    @property
    def writer(self) -> asyncio.Task[None] | None:
        return self._writer

    def enqueue(self, envelope: OutboundEnvelope) -> bool:
        """Queue ``envelope`` without waiting; ``False`` if closed or full."""

        if self.closed:
            return False
        try:
            self.queue.put_nowait(envelope)
        except asyncio.QueueFull:
            return False
        return True

    def start(self, hub: NotificationHub) -> None:
        if self._writer is not None:
            return
        loop = asyncio.get_running_loop()
        self._writer = loop.create_task(
            self._write_loop(hub), name=f"notification-writer-{self.user_id}"
        )

    def close(self) -> None:
        """Stop accepting messages and let the writer finish. Idempotent."""

        if self.closed:
            return
        self.closed = True
        try:
            self.queue.put_nowait(_CLOSE)
        except asyncio.QueueFull:
            # The consumer is stuck; whatever is still queued is abandoned.
            dropped = 0
            while not self.queue.empty():
                self.queue.get_nowait()
                dropped += 1
            logger.debug(
                "Dropped %d queued message(s) for user %s on close", dropped, self.user_id
            )
            self.queue.put_nowait(_CLOSE)

    async def _write_loop(self, hub: NotificationHub) -> None:
        try:
            while True:
                try:
                    item = await asyncio.wait_for(
                        self.queue.get(), timeout=hub.ping_period
                    )
                except asyncio.TimeoutError:
                    if not await self._send(HEARTBEAT_MESSAGE, hub.write_timeout):
                        hub.deregister(self.user_id, self)
                        return
                    continue

                if item is _CLOSE:
                    return

                if not await self._send(item.data, hub.write_timeout):
                    hub.deregister(self.user_id, self)
                    return
                if item.notification_id is not None:
                    hub.confirm_delivery(item.notification_id)
        finally:
            await self._close_transport()

    async def _send(self, data: str, timeout: float) -> bool:
        try:
            await asyncio.wait_for(self.transport.send_text(data), timeout=timeout)
        except asyncio.TimeoutError:
            logger.info("Write to user %s timed out after %.1fs", self.user_id, timeout)
            return False
        except Exception as exc:  # noqa: BLE001 - any transport failure ends the session
            logger.info("Write to user %s failed: %s", self.user_id, exc)
            return False
        return True

    async def _close_transport(self) -> None:
        try:
            await self.transport.close()
        except Exception as exc:  # noqa: BLE001 - socket may already be gone
            logger.debug("Closing socket of user %s raised %r", self.user_id, exc)


__all__ = ["Connection", "HEARTBEAT_MESSAGE", "PONG_MESSAGE", "Transport"]
