"""Domain entities for administrator announcements."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .notification import Notification
from .notification_batch import NotificationBatch
from .user import UserType

DEFAULT_CONTENT_TYPE = "text"
DEFAULT_TARGET_USER_TYPES: tuple[str, ...] = tuple(member.value for member in UserType)


class AnnouncementPriority(str, Enum):
    HIGH = "HIGH"
    NORMAL = "NORMAL"
    LOW = "LOW"


class AnnouncementStatus(str, Enum):
    """Presentation status, always derived from the announcement's batches."""

    DRAFT = "DRAFT"
    SENT = "SENT"


@dataclass
class Announcement:
    """Broadcast configuration bound to its canonical notification."""

    id: int | None
    notification_id: int | None
    created_by: int
    priority: AnnouncementPriority = AnnouncementPriority.NORMAL
    target_user_types: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    content_type: str = DEFAULT_CONTENT_TYPE
    expires_at: datetime | None = None
    created_at: datetime | None = None


@dataclass
class AnnouncementView:
    """Announcement composed with its canonical notification and batch history."""

    announcement: Announcement
    notification: Notification | None
    batches: list[NotificationBatch] = field(default_factory=list)
    author_name: str | None = None
    read_count: int = 0

    @property
    def id(self) -> int:
        return self.announcement.id

    @property
    def title(self) -> str:
        return self.notification.title if self.notification else ""

    @property
    def content(self) -> str:
        return self.notification.text if self.notification else ""

    @property
    def completed_batch(self) -> NotificationBatch | None:
        """Most recently completed batch, if any."""

        completed = [batch for batch in self.batches if batch.is_completed()]
        if not completed:
            return None
        return max(completed, key=lambda batch: (batch.completed_at or batch.started_at, batch.id or 0))

    @property
    def status(self) -> AnnouncementStatus:
        if self.completed_batch is not None:
            return AnnouncementStatus.SENT
        return AnnouncementStatus.DRAFT

    def _retry_chain(self) -> list[NotificationBatch]:
        """Completed batch followed by the batches it retried, oldest last."""

        batch = self.completed_batch
        if batch is None:
            return []
        by_id = {item.id: item for item in self.batches}
        chain = [batch]
        while chain[-1].retry_of_id in by_id and len(chain) <= len(by_id):
            chain.append(by_id[chain[-1].retry_of_id])
        return chain

    @property
    def sent_count(self) -> int:
        return sum(batch.sent_count for batch in self._retry_chain())

    @property
    def total_recipients(self) -> int:
        chain = self._retry_chain()
        return chain[-1].total_recipients if chain else 0

    @property
    def sent_at(self) -> datetime | None:
        batch = self.completed_batch
        return batch.completed_at if batch else None


@dataclass
class Notice:
    """Public projection of a sent announcement, keyed by its canonical notification."""

    id: int
    announcement_id: int
    title: str
    content: str
    images: list[str]
    priority: AnnouncementPriority
    target_user_types: list[str]
    expires_at: datetime | None
    author_name: str
    author_nickname: str | None = None
    is_read: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = [
    "Announcement",
    "AnnouncementPriority",
    "AnnouncementStatus",
    "AnnouncementView",
    "DEFAULT_CONTENT_TYPE",
    "DEFAULT_TARGET_USER_TYPES",
    "Notice",
]
