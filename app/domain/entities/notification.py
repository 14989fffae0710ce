"""Domain entity representing a delivered notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .content import NotificationContent


class NotificationType(str, Enum):
    """Origin of a notification. Only ``ANNOUNCEMENT`` is produced by broadcasts."""

    ANNOUNCEMENT = "ANNOUNCEMENT"
    SYSTEM = "SYSTEM"
    JOB = "JOB"
    FORUM = "FORUM"


@dataclass
class Notification:
    """Message instance addressed to exactly one recipient."""

    id: int | None
    type: NotificationType
    recipient_id: int
    recipient_type: str | None
    sender_id: int | None
    title: str
    content: NotificationContent
    announcement_id: int | None = None
    is_read: bool = False
    read_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def text(self) -> str:
        return self.content.text

    @property
    def images(self) -> tuple[str, ...]:
        return self.content.images


__all__ = ["Notification", "NotificationType"]
