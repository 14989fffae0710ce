"""Bookkeeping entities for a single dispatch attempt."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class BatchStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


TERMINAL_BATCH_STATUSES = frozenset(
    {BatchStatus.COMPLETED, BatchStatus.FAILED, BatchStatus.CANCELLED}
)


class DeliveryStatus(str, Enum):
    SENT = "SENT"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


RETRYABLE_DELIVERY_STATUSES = frozenset({DeliveryStatus.FAILED, DeliveryStatus.SKIPPED})


def resolve_batch_status(
    *, sent_count: int, total_recipients: int, cancelled: bool = False
) -> BatchStatus:
    """Return the terminal status for a finished dispatch.

    A full delivery is ``COMPLETED`` even if cancellation was requested after the
    last chunk; otherwise an observed cancellation takes precedence over ``FAILED``.
    """

    if sent_count < 0 or sent_count > total_recipients:
        msg = f"sent_count {sent_count} is outside 0..{total_recipients}"
        raise ValueError(msg)
    if sent_count == total_recipients:
        return BatchStatus.COMPLETED
    if cancelled:
        return BatchStatus.CANCELLED
    return BatchStatus.FAILED


@dataclass
class NotificationBatch:
    id: int | None
    announcement_id: int
    total_recipients: int
    sent_count: int
    status: BatchStatus
    started_at: datetime | None
    completed_at: datetime | None = None
    failed_count: int = 0
    initiated_by: int | None = None
    retry_of_id: int | None = None

    def is_completed(self) -> bool:
        return self.status is BatchStatus.COMPLETED

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_BATCH_STATUSES


@dataclass
class NotificationDelivery:
    """Outcome of one recipient write inside a batch."""

    id: int | None
    batch_id: int
    recipient_id: int
    recipient_type: str | None
    status: DeliveryStatus
    notification_id: int | None = None
    error: str | None = None
    created_at: datetime | None = None


__all__ = [
    "BatchStatus",
    "DeliveryStatus",
    "NotificationBatch",
    "NotificationDelivery",
    "RETRYABLE_DELIVERY_STATUSES",
    "TERMINAL_BATCH_STATUSES",
    "resolve_batch_status",
]
