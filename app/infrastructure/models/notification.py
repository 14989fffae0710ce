"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.sql import expression

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """One notification row per recipient.

    ``announcement_id`` links a delivered copy to its announcement; the
    announcement's own canonical copy leaves it empty.
    """

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_announcement_read", "announcement_id", "is_read"),
    )

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(30), nullable=False, index=True)
    recipient_id = Column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    recipient_type = Column(String(30), nullable=True)
    sender_id = Column(Integer, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    announcement_id = Column(
        Integer,
        ForeignKey("announcement.id", ondelete="CASCADE", use_alter=True),
        nullable=True,
        index=True,
    )
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    content_format = Column(String(10), nullable=False, default="plain")
    content_images = Column(JSON, nullable=False, default=list)
    is_read = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    read_at = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["NotificationModel"]
