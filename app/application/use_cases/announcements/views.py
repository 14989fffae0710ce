"""Compose announcement rows with their batches, author and read statistics."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import DEFAULT_AUTHOR_NAME, Announcement, AnnouncementView
from app.infrastructure.repositories import (
    AnnouncementRecord,
    NotificationBatchRepository,
    NotificationRepository,
    UserRepository,
)


def get_read_count(session: Session, announcement: Announcement) -> int:
    """Return how many delivered copies of ``announcement`` were read."""

    if announcement.id is None:
        return 0
    return NotificationRepository(session).count_read_for_announcement(announcement.id)


def build_announcement_views(
    session: Session, records: Sequence[AnnouncementRecord]
) -> list[AnnouncementView]:
    if not records:
        return []

    announcement_ids = [announcement.id for announcement, _ in records]
    batches = NotificationBatchRepository(session).list_for_announcements(announcement_ids)
    authors = UserRepository(session).get_display_names(
        [announcement.created_by for announcement, _ in records]
    )

    views: list[AnnouncementView] = []
    for announcement, notification in records:
        view = AnnouncementView(
            announcement=announcement,
            notification=notification,
            batches=list(batches.get(announcement.id, [])),
            author_name=authors.get(announcement.created_by, DEFAULT_AUTHOR_NAME),
        )
        if view.completed_batch is not None:
            view.read_count = get_read_count(session, announcement)
        views.append(view)
    return views


def build_announcement_view(session: Session, record: AnnouncementRecord) -> AnnouncementView:
    return build_announcement_views(session, [record])[0]


__all__ = ["build_announcement_view", "build_announcement_views", "get_read_count"]
