"""Tests for batch status resolution and the derived announcement status."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from app.domain.entities import (
    Announcement,
    AnnouncementStatus,
    AnnouncementView,
    BatchStatus,
    NotificationBatch,
    resolve_batch_status,
)


@pytest.mark.parametrize(
    ("sent", "total", "cancelled", "expected"),
    [
        (9, 9, False, BatchStatus.COMPLETED),
        (0, 0, False, BatchStatus.COMPLETED),
        (8, 9, False, BatchStatus.FAILED),
        (0, 9, False, BatchStatus.FAILED),
        (3, 9, True, BatchStatus.CANCELLED),
        (9, 9, True, BatchStatus.COMPLETED),
    ],
)
def test_resolve_batch_status(sent, total, cancelled, expected):
    assert (
        resolve_batch_status(sent_count=sent, total_recipients=total, cancelled=cancelled)
        is expected
    )


@pytest.mark.parametrize(("sent", "total"), [(-1, 3), (4, 3)])
def test_resolve_batch_status_rejects_counts_out_of_range(sent, total):
    with pytest.raises(ValueError):
        resolve_batch_status(sent_count=sent, total_recipients=total)


def _batch(batch_id, status, *, sent, total, retry_of_id=None, minutes=0):
    started = datetime(2025, 1, 15, 9, 0) + timedelta(minutes=minutes)
    return NotificationBatch(
        id=batch_id,
        announcement_id=1,
        total_recipients=total,
        sent_count=sent,
        status=status,
        started_at=started,
        completed_at=started + timedelta(seconds=30) if status is not BatchStatus.PENDING else None,
        retry_of_id=retry_of_id,
    )


def _view(*batches):
    return AnnouncementView(
        announcement=Announcement(id=1, notification_id=1, created_by=1),
        notification=None,
        batches=list(batches),
    )


def test_view_without_completed_batch_is_draft():
    view = _view(
        _batch(1, BatchStatus.FAILED, sent=7, total=9),
        _batch(2, BatchStatus.PENDING, sent=0, total=2, minutes=5),
    )

    assert view.status is AnnouncementStatus.DRAFT
    assert view.sent_count == 0
    assert view.total_recipients == 0
    assert view.sent_at is None


def test_view_counts_come_from_completed_batch():
    completed = _batch(1, BatchStatus.COMPLETED, sent=9, total=9)

    view = _view(completed)

    assert view.status is AnnouncementStatus.SENT
    assert (view.sent_count, view.total_recipients) == (9, 9)
    assert view.sent_at == completed.completed_at


def test_view_adds_up_a_completed_retry_chain():
    view = _view(
        _batch(1, BatchStatus.FAILED, sent=7, total=9),
        _batch(2, BatchStatus.COMPLETED, sent=2, total=2, retry_of_id=1, minutes=5),
    )

    assert view.status is AnnouncementStatus.SENT
    assert (view.sent_count, view.total_recipients) == (9, 9)
