"""Use case for deleting announcements together with everything they produced."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.domain.exceptions import NotFoundError
from app.infrastructure.database import transaction
from app.infrastructure.repositories import (
    AnnouncementRepository,
    NotificationBatchRepository,
    NotificationRepository,
)

logger = logging.getLogger(__name__)


def delete_announcement(session: Session, announcement_id: int) -> None:
    """Remove the announcement, its batches and every notification it produced.

    All rows go in a single transaction. Notifications that do not belong to
    the announcement are left untouched.
    """

    announcement_repository = AnnouncementRepository(session)
    notification_repository = NotificationRepository(session)
    batch_repository = NotificationBatchRepository(session)

    record = announcement_repository.get(announcement_id)
    if record is None:
        raise NotFoundError("Announcement not found")
    announcement, canonical = record

    with transaction(session, operation="delete announcement"):
        removed_batches = batch_repository.delete_for_announcement(announcement_id)
        removed_copies = 0
        if canonical is not None:
            removed_copies = notification_repository.delete_for_announcement(announcement_id)
        announcement_repository.delete(announcement_id)
        if canonical is not None:
            notification_repository.delete(canonical.id)
        else:
            logger.warning(
                "Announcement %s had no canonical notification; deleted directly",
                announcement_id,
            )

    logger.info(
        "Announcement %s deleted with %s batches and %s delivered notifications",
        announcement.id,
        removed_batches,
        removed_copies,
    )


__all__ = ["delete_announcement"]
