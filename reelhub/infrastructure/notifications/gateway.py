"""Storage boundary used by the notification hub."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from datetime import timedelta
from typing import Protocol

from sqlalchemy.orm import Session

from reelhub.domain.entities import NotificationRecord
from reelhub.infrastructure.repositories import NotificationRepository


class NotificationGateway(Protocol):
    """Operations the hub needs from durable storage.

    Implementations are synchronous; the hub always calls them from a worker
    thread.
    """

    def create_notification(self, record: NotificationRecord) -> NotificationRecord: ...

    def list_pending(self, user_id: int) -> Sequence[NotificationRecord]: ...

    def soft_delete(self, notification_id: int) -> bool: ...

    def purge_soft_deleted(self) -> int: ...

    def purge_older_than(self, age: timedelta) -> int: ...


class SqlAlchemyNotificationGateway:
    """:class:`NotificationGateway` backed by :class:`NotificationRepository`.

    Each call opens and closes its own session so calls from different
    threads never share one.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _repository(self) -> Iterator[NotificationRepository]:
        session = self._session_factory()
        try:
            yield NotificationRepository(session)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_notification(self, record: NotificationRecord) -> NotificationRecord:
        with self._repository() as repository:
            return repository.create(record)

    def list_pending(self, user_id: int) -> Sequence[NotificationRecord]:
        with self._repository() as repository:
            return repository.list_pending(user_id)

    def soft_delete(self, notification_id: int) -> bool:
        with self._repository() as repository:
            return repository.soft_delete(notification_id)

    def purge_soft_deleted(self) -> int:
        with self._repository() as repository:
            return repository.purge_soft_deleted()

    def purge_older_than(self, age: timedelta) -> int:
        with self._repository() as repository:
            return repository.purge_older_than(age)


__all__ = ["NotificationGateway", "SqlAlchemyNotificationGateway"]
