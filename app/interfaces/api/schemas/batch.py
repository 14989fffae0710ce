"""Schemas describing dispatch batches."""

from __future__ import annotations

from datetime import datetime

from .envelope import ApiModel


class BatchRead(ApiModel):
    id: int
    announcement_id: int
    status: str
    total_recipients: int
    sent_count: int
    failed_count: int
    initiated_by: int | None
    retry_of_id: int | None
    started_at: datetime | None
    completed_at: datetime | None


class DispatchRead(ApiModel):
    """Counts returned when a dispatch is accepted or finished."""

    batch_id: int
    status: str
    sent_count: int
    total_recipients: int


__all__ = ["BatchRead", "DispatchRead"]
