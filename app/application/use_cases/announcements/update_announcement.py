"""Use case for editing announcements."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from sqlalchemy.orm import Session

from app.domain.entities import AnnouncementPriority, AnnouncementView, compose_content
from app.domain.exceptions import NotFoundError
from app.infrastructure.database import transaction
from app.infrastructure.repositories import AnnouncementRepository, NotificationRepository

from .validators import (
    ensure_content,
    ensure_title,
    normalize_images,
    normalize_target_user_types,
    parse_priority,
)
from .views import build_announcement_view

logger = logging.getLogger(__name__)


def update_announcement(
    session: Session,
    announcement_id: int,
    *,
    title: str | None = None,
    content: str | None = None,
    images: Sequence[str | None] | None = None,
    priority: str | AnnouncementPriority | None = None,
    target_user_types: Sequence[str] | None = None,
) -> AnnouncementView:
    """Apply the provided changes to the canonical notification and metadata.

    Editing is allowed after sending; copies already delivered to recipients
    keep the content they were sent with.
    """

    announcement_repository = AnnouncementRepository(session)
    notification_repository = NotificationRepository(session)

    record = announcement_repository.get(announcement_id)
    if record is None:
        raise NotFoundError("Announcement not found")
    announcement, canonical = record

    updated_announcement = replace(
        announcement,
        priority=parse_priority(priority) if priority is not None else announcement.priority,
        target_user_types=(
            normalize_target_user_types(target_user_types)
            if target_user_types is not None
            else announcement.target_user_types
        ),
        images=normalize_images(images) if images is not None else announcement.images,
    )

    updated_canonical = canonical
    if canonical is not None and (title is not None or content is not None):
        updated_canonical = replace(
            canonical,
            title=ensure_title(title) if title is not None else canonical.title,
            content=(
                compose_content(ensure_content(content))
                if content is not None
                else canonical.content
            ),
        )

    with transaction(session, operation="update announcement"):
        if updated_canonical is not None and updated_canonical is not canonical:
            updated_canonical = notification_repository.update_content(updated_canonical)
        updated_announcement = announcement_repository.update_metadata(updated_announcement)

    logger.info("Announcement %s updated", announcement_id)
    return build_announcement_view(session, (updated_announcement, updated_canonical))


__all__ = ["update_announcement"]
