"""Read-state updates and the caller's own notification feed."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import Notification
from app.domain.exceptions import NotFoundError
from app.infrastructure.database import transaction
from app.infrastructure.repositories import AnnouncementRepository, NotificationRepository

logger = logging.getLogger(__name__)


def mark_read(session: Session, *, user_id: int, notification_id: int) -> None:
    """Flag ``notification_id`` as read for its recipient. Repeating it is a no-op."""

    with transaction(session, operation="mark notification as read"):
        updated = NotificationRepository(session).mark_as_read(
            notification_id, user_id=user_id
        )
        if not updated:
            raise NotFoundError("Notification not found")
    logger.debug("Notification %s read by user %s", notification_id, user_id)


def mark_notice_read(session: Session, *, user_id: int, notice_id: int) -> None:
    """Mark the caller's delivered copy of the notice ``notice_id`` as read."""

    record = AnnouncementRepository(session).get_by_notification_id(notice_id)
    if record is None:
        raise NotFoundError("Notice not found")
    announcement, _ = record
    copy = NotificationRepository(session).get_for_recipient_and_announcement(
        recipient_id=user_id, announcement_id=announcement.id
    )
    if copy is None:
        raise NotFoundError("Notice was not delivered to this user")
    mark_read(session, user_id=user_id, notification_id=copy.id)


def list_notifications_for_user(
    session: Session, user_id: int, *, limit: int | None = 50
) -> Sequence[Notification]:
    return NotificationRepository(session).list_for_user(user_id, limit=limit)


__all__ = ["list_notifications_for_user", "mark_notice_read", "mark_read"]
