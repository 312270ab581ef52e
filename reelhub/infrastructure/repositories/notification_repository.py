"""Persistence helpers for notification records."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta

from sqlalchemy.orm import Session

from reelhub.domain.entities import NotificationRecord
from reelhub.infrastructure.models import NotificationModel
from reelhub.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide storage operations for :class:`NotificationRecord` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, record: NotificationRecord) -> NotificationRecord:
        if record.user_id is None:
            raise ValueError("Notification user_id is required")
        model = NotificationModel(
            user_id=record.user_id,
            type=record.type,
            data=record.data,
            read=record.read,
            created_at=ensure_app_naive_datetime(
                record.created_at or now_in_app_timezone()
            ),
            deleted_at=ensure_app_naive_datetime(record.deleted_at),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, notification_id: int) -> NotificationRecord | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model is not None else None

    def list_pending(self, user_id: int) -> Sequence[NotificationRecord]:
        """Return the user's records that were not delivered yet, oldest first."""

        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.deleted_at.is_(None))
            .order_by(NotificationModel.created_at.asc(), NotificationModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def soft_delete(self, notification_id: int) -> bool:
        """Mark the record as delivered; returns ``False`` if nothing changed."""

        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.deleted_at.is_(None),
            )
            .update(
                {
                    NotificationModel.deleted_at: ensure_app_naive_datetime(
                        now_in_app_timezone()
                    ),
                    NotificationModel.read: True,
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return bool(updated)

    def purge_soft_deleted(self) -> int:
        removed = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.deleted_at.is_not(None))
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return removed

    def purge_older_than(self, age: timedelta) -> int:
        if age <= timedelta(0):
            raise ValueError("Retention window must be positive")
        cutoff = ensure_app_naive_datetime(now_in_app_timezone() - age)
        removed = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.created_at < cutoff)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return removed

    @staticmethod
    def _to_entity(model: NotificationModel) -> NotificationRecord:
        return NotificationRecord(
            id=model.id,
            user_id=model.user_id,
            type=model.type,
            data=model.data,
            read=bool(model.read),
            created_at=ensure_app_timezone(model.created_at),
            deleted_at=ensure_app_timezone(model.deleted_at),
        )


__all__ = ["NotificationRepository"]
