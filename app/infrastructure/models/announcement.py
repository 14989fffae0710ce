"""SQLAlchemy models for announcements and their dispatch bookkeeping."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class AnnouncementModel(Base):
    """Broadcast configuration. Deleting the canonical notification removes it."""

    __tablename__ = "announcement"

    id = Column(Integer, primary_key=True, index=True)
    notification_id = Column(
        Integer,
        ForeignKey("notification.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    target_user_types = Column(JSON, nullable=False, default=list)
    priority = Column(String(10), nullable=False, default="NORMAL")
    images = Column(JSON, nullable=False, default=list)
    content_type = Column(String(20), nullable=False, default="text")
    created_by = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    expires_at = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    notification = relationship(
        "NotificationModel", foreign_keys=[notification_id], lazy="joined"
    )
    author = relationship("UserModel", foreign_keys=[created_by], lazy="joined")
    batches = relationship(
        "NotificationBatchModel",
        back_populates="announcement",
        order_by="NotificationBatchModel.id",
        lazy="selectin",
        passive_deletes=True,
    )


class NotificationBatchModel(Base):
    """One dispatch attempt. Written once as PENDING and once when terminal."""

    __tablename__ = "notification_batch"

    id = Column(Integer, primary_key=True, index=True)
    announcement_id = Column(
        Integer,
        ForeignKey("announcement.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    total_recipients = Column(Integer, nullable=False, default=0)
    sent_count = Column(Integer, nullable=False, default=0)
    failed_count = Column(Integer, nullable=False, default=0)
    status = Column(String(12), nullable=False, default="PENDING", index=True)
    initiated_by = Column(Integer, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    retry_of_id = Column(
        Integer, ForeignKey("notification_batch.id", ondelete="SET NULL"), nullable=True
    )
    started_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    completed_at = Column(DateTime(), nullable=True)

    announcement = relationship("AnnouncementModel", back_populates="batches")


class NotificationDeliveryModel(Base):
    """Per-recipient outcome of a batch, used to retry only failed recipients."""

    __tablename__ = "notification_delivery"

    id = Column(Integer, primary_key=True, index=True)
    batch_id = Column(
        Integer,
        ForeignKey("notification_batch.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    recipient_id = Column(Integer, nullable=False, index=True)
    recipient_type = Column(String(30), nullable=True)
    notification_id = Column(
        Integer, ForeignKey("notification.id", ondelete="SET NULL"), nullable=True
    )
    status = Column(String(10), nullable=False)
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["AnnouncementModel", "NotificationBatchModel", "NotificationDeliveryModel"]
