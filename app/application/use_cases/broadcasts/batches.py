"""Batch tracker: the only writer of ``notification_batch`` rows."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.domain.entities import BatchStatus, NotificationBatch, resolve_batch_status
from app.domain.exceptions import NotFoundError
from app.infrastructure.database import transaction
from app.infrastructure.repositories import AnnouncementRepository, NotificationBatchRepository
from app.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


def start_batch(
    session: Session,
    *,
    announcement_id: int,
    total_recipients: int,
    initiated_by: int | None = None,
    retry_of_id: int | None = None,
) -> NotificationBatch:
    """Insert and commit a PENDING batch before any recipient is written."""

    with transaction(session, operation="start notification batch"):
        batch = NotificationBatchRepository(session).create(
            NotificationBatch(
                id=None,
                announcement_id=announcement_id,
                total_recipients=total_recipients,
                sent_count=0,
                status=BatchStatus.PENDING,
                started_at=now_in_app_timezone(),
                initiated_by=initiated_by,
                retry_of_id=retry_of_id,
            )
        )
    logger.info(
        "Batch %s started for announcement %s with %s recipients",
        batch.id,
        announcement_id,
        total_recipients,
    )
    return batch


def record_outcome(
    session: Session,
    *,
    batch_id: int,
    sent_count: int,
    total_recipients: int,
    failed_count: int | None = None,
    cancelled: bool = False,
) -> NotificationBatch:
    """Write the terminal status of ``batch_id``.

    ``failed_count`` defaults to every recipient that was not reached.
    """

    repository = NotificationBatchRepository(session)
    if repository.get(batch_id) is None:
        raise NotFoundError("Notification batch not found")

    status = resolve_batch_status(
        sent_count=sent_count, total_recipients=total_recipients, cancelled=cancelled
    )
    if failed_count is None:
        failed_count = total_recipients - sent_count

    with transaction(session, operation="record batch outcome"):
        batch = repository.finalize(
            batch_id, status=status, sent_count=sent_count, failed_count=failed_count
        )

    log = logger.info if status is BatchStatus.COMPLETED else logger.warning
    log(
        "Batch %s finished as %s: %s/%s sent, %s failed",
        batch_id,
        status.value,
        sent_count,
        total_recipients,
        failed_count,
    )
    return batch


def is_announcement_sent(session: Session, announcement_id: int) -> bool:
    return NotificationBatchRepository(session).has_completed(announcement_id)


def get_batch(session: Session, batch_id: int) -> NotificationBatch:
    batch = NotificationBatchRepository(session).get(batch_id)
    if batch is None:
        raise NotFoundError("Notification batch not found")
    return batch


def list_batches(session: Session, announcement_id: int) -> list[NotificationBatch]:
    if AnnouncementRepository(session).get(announcement_id) is None:
        raise NotFoundError("Announcement not found")
    return NotificationBatchRepository(session).list_for_announcement(announcement_id)


__all__ = [
    "get_batch",
    "is_announcement_sent",
    "list_batches",
    "record_outcome",
    "start_batch",
]
