"""Periodic removal of delivered and expired notification records."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import timedelta

from anyio import to_thread

from .gateway import NotificationGateway

logger = logging.getLogger(__name__)


class NotificationPurger:
    """Run the storage cleanup every ``interval`` seconds.

    Soft-deleted records are removed for good, and records older than
    ``retention`` are removed whether or not they were delivered.
    """

    def __init__(
        self,
        gateway: NotificationGateway,
        *,
        interval: float = 3600.0,
        retention: timedelta = timedelta(days=30),
    ) -> None:
        self._gateway = gateway
        self._interval = interval
        self._retention = retention
        self._task: asyncio.Task[None] | None = None

    async def run_once(self) -> tuple[int, int]:
        """Run both sweeps and return ``(soft_deleted, expired)`` counts."""

        removed = await self._sweep("soft-deleted", self._gateway.purge_soft_deleted)
        expired = await self._sweep(
            "expired", lambda: self._gateway.purge_older_than(self._retention)
        )
        if removed or expired:
            logger.info(
                "Purged %d delivered and %d expired notification(s)", removed, expired
            )
        return removed, expired

    async def _sweep(self, label: str, operation: Callable[[], int]) -> int:
        try:
            return await to_thread.run_sync(operation)
        except Exception:
            logger.exception("Purge of %s notifications failed", label)
            return 0

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(
                self._run(), name="notification-purge"
            )

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.run_once()


__all__ = ["NotificationPurger"]
