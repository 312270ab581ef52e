"""SQLAlchemy model for notifications waiting to be delivered."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from reelhub.infrastructure.database import Base
from reelhub.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation of an undelivered user notification."""

    __tablename__ = "notification"

    id = Column(Integer, primary_key=True, index=True)
    # Users live in the platform's own tables; no foreign key from the core.
    user_id = Column(Integer, nullable=False, index=True)
    type = Column(String(50), nullable=False, default="unknown")
    data = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )
    deleted_at = Column(DateTime(), nullable=True, index=True)


__all__ = ["NotificationModel"]
