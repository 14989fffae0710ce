"""Tests for the broadcast fan-out, batch bookkeeping and read state."""

from __future__ import annotations

import threading
import time

import pytest

from app.application.use_cases.announcements import create_draft, get_announcement, get_read_count
from app.application.use_cases.broadcasts import (
    BroadcastOrchestrator,
    CancellationRegistry,
    NotificationWriter,
    get_batch,
    is_announcement_sent,
    record_outcome,
)
from app.application.use_cases.notices import mark_read
from app.domain.entities import (
    AnnouncementStatus,
    BatchStatus,
    DeliveryStatus,
    NotificationType,
    RichTextContent,
)
from app.domain.exceptions import (
    BatchAlreadyFinalizedError,
    NotFoundError,
    RecipientWriteError,
    ValidationError,
)
from app.infrastructure.database import SessionLocal
from app.infrastructure.models import NotificationModel, UserModel
from app.infrastructure.repositories import NotificationBatchRepository, NotificationRepository


class RecordingWriter(NotificationWriter):
    """Writer that can be told to fail for some recipients."""

    def __init__(self, failing_ids=()):
        super().__init__(SessionLocal)
        self.failing_ids = set(failing_ids)
        self.attempted: list[int] = []
        self._lock = threading.Lock()

    def write(self, recipient, message, *, deadline):
        with self._lock:
            self.attempted.append(recipient.id)
        if recipient.id in self.failing_ids:
            raise RecipientWriteError(recipient.id, "forced failure")
        return super().write(recipient, message, deadline=deadline)


def _draft(session, admin_id, **overrides):
    values = {
        "title": "Maintenance 1/15",
        "content": "The service will be down from 2am.",
        "priority": "HIGH",
        "target_user_types": ["HOSPITAL"],
        "author_id": admin_id,
    }
    values.update(overrides)
    return create_draft(session, **values)


def _copies(session, announcement_id):
    session.expire_all()
    return (
        session.query(NotificationModel)
        .filter(NotificationModel.announcement_id == announcement_id)
        .order_by(NotificationModel.recipient_id)
        .all()
    )


def test_dispatch_example_scenario(session, admin_id, members):
    view = _draft(session, admin_id)

    result = BroadcastOrchestrator().dispatch(session, announcement_id=view.id)

    assert result.total_recipients == 9
    assert result.sent_count == 9
    assert result.status is BatchStatus.COMPLETED
    assert is_announcement_sent(session, view.id) is True

    sent_view = get_announcement(session, view.id)
    assert sent_view.status is AnnouncementStatus.SENT
    assert (sent_view.sent_count, sent_view.total_recipients) == (9, 9)
    assert sent_view.read_count == 0
    assert get_read_count(session, sent_view.announcement) == 0

    copies = _copies(session, view.id)
    assert [copy.recipient_id for copy in copies] == sorted(members)
    assert all(copy.type == NotificationType.ANNOUNCEMENT.value for copy in copies)
    assert all(copy.sender_id == admin_id for copy in copies)

    mark_read(session, user_id=members[0], notification_id=copies[0].id)

    assert get_announcement(session, view.id).read_count == 1


def test_batch_is_pending_before_fan_out(session, admin_id, members):
    view = _draft(session, admin_id)
    orchestrator = BroadcastOrchestrator()

    plan = orchestrator.prepare(session, announcement_id=view.id)

    pending = get_batch(session, plan.batch_id)
    assert pending.status is BatchStatus.PENDING
    assert pending.sent_count == 0
    assert pending.total_recipients == 9
    assert _copies(session, view.id) == []
    assert is_announcement_sent(session, view.id) is False

    result = orchestrator.run(plan)

    assert result.status is BatchStatus.COMPLETED
    session.expire_all()
    finished = get_batch(session, plan.batch_id)
    assert finished.completed_at is not None


def test_dispatch_isolates_recipient_failures(session, admin_id, members):
    view = _draft(session, admin_id)
    writer = RecordingWriter(failing_ids=members[2:4])

    result = BroadcastOrchestrator(writer=writer).dispatch(session, announcement_id=view.id)

    assert sorted(writer.attempted) == sorted(members)
    assert result.sent_count == 7
    assert result.total_recipients == 9
    assert result.status is BatchStatus.FAILED
    assert is_announcement_sent(session, view.id) is False
    assert get_announcement(session, view.id).status is AnnouncementStatus.DRAFT

    deliveries = NotificationBatchRepository(session).list_deliveries(result.batch_id)
    failed = sorted(d.recipient_id for d in deliveries if d.status is DeliveryStatus.FAILED)
    assert failed == sorted(members[2:4])
    assert get_batch(session, result.batch_id).failed_count == 2
    assert len(_copies(session, view.id)) == 7


def test_unknown_user_type_fails_only_that_recipient(session, admin_id, members):
    with SessionLocal() as db:
        db.get(UserModel, members[4]).user_type = "ADMIN"
        db.commit()
    view = _draft(session, admin_id)

    result = BroadcastOrchestrator().dispatch(session, announcement_id=view.id)

    assert result.status is BatchStatus.FAILED
    assert (result.sent_count, result.total_recipients) == (8, 9)

    deliveries = NotificationBatchRepository(session).list_deliveries(result.batch_id)
    failed = [d for d in deliveries if d.status is DeliveryStatus.FAILED]
    assert [d.recipient_id for d in failed] == [members[4]]
    assert failed[0].recipient_type == "ADMIN"
    assert "unknown user type" in failed[0].error
    assert members[4] not in {copy.recipient_id for copy in _copies(session, view.id)}


def test_recipient_snapshot_is_fixed_at_dispatch_start(session, admin_id, members, user_factory):
    view = _draft(session, admin_id)
    late_user: list[int] = []

    class RegisteringWriter(RecordingWriter):
        def write(self, recipient, message, *, deadline):
            with self._lock:
                if not late_user:
                    late_user.append(user_factory(email="late@example.com"))
            return super().write(recipient, message, deadline=deadline)

    result = BroadcastOrchestrator(writer=RegisteringWriter()).dispatch(
        session, announcement_id=view.id
    )

    assert result.total_recipients == 9
    assert result.sent_count == 9
    assert late_user[0] not in {copy.recipient_id for copy in _copies(session, view.id)}


def test_inactive_and_deleted_users_are_not_recipients(session, admin_id, user_factory):
    active = user_factory(email="active@example.com")
    user_factory(email="inactive@example.com", is_active=False)
    user_factory(email="deleted@example.com", deleted=True)
    view = _draft(session, admin_id)

    result = BroadcastOrchestrator().dispatch(session, announcement_id=view.id)

    assert result.total_recipients == 1
    assert [copy.recipient_id for copy in _copies(session, view.id)] == [active]


def test_dispatch_without_recipients_completes_empty(session, admin_id):
    view = _draft(session, admin_id)

    result = BroadcastOrchestrator().dispatch(session, announcement_id=view.id)

    assert (result.sent_count, result.total_recipients) == (0, 0)
    assert result.status is BatchStatus.COMPLETED


def test_dispatch_unknown_announcement(session):
    with pytest.raises(NotFoundError):
        BroadcastOrchestrator().dispatch(session, announcement_id=12345)


def test_delivered_copies_carry_images_as_rich_content(session, admin_id, members):
    view = _draft(session, admin_id, images=["https://cdn.example.com/a.png"])

    BroadcastOrchestrator().dispatch(session, announcement_id=view.id)

    copy = NotificationRepository(session).get(_copies(session, view.id)[0].id)
    assert isinstance(copy.content, RichTextContent)
    assert copy.content.images == ("https://cdn.example.com/a.png",)
    assert copy.text == "The service will be down from 2am."


def test_expired_write_is_rolled_back_and_counted_as_failure(session, admin_id, members):
    class SlowWriter(NotificationWriter):
        def write(self, recipient, message, *, deadline):
            return super().write(recipient, message, deadline=time.monotonic() - 1)

    view = _draft(session, admin_id)

    result = BroadcastOrchestrator(writer=SlowWriter(SessionLocal)).dispatch(
        session, announcement_id=view.id
    )

    assert result.sent_count == 0
    assert result.status is BatchStatus.FAILED
    assert _copies(session, view.id) == []


def test_retry_targets_only_failed_recipients(session, admin_id, members):
    view = _draft(session, admin_id)
    first = BroadcastOrchestrator(writer=RecordingWriter(failing_ids=members[:2])).dispatch(
        session, announcement_id=view.id
    )
    assert first.status is BatchStatus.FAILED

    writer = RecordingWriter()
    retry = BroadcastOrchestrator(writer=writer).retry_failed(session, announcement_id=view.id)

    assert sorted(writer.attempted) == sorted(members[:2])
    assert (retry.sent_count, retry.total_recipients) == (2, 2)
    assert retry.status is BatchStatus.COMPLETED
    assert get_batch(session, retry.batch_id).retry_of_id == first.batch_id

    copies = _copies(session, view.id)
    assert sorted(copy.recipient_id for copy in copies) == sorted(members)

    sent_view = get_announcement(session, view.id)
    assert sent_view.status is AnnouncementStatus.SENT
    assert (sent_view.sent_count, sent_view.total_recipients) == (9, 9)

    with pytest.raises(ValidationError):
        BroadcastOrchestrator().retry_failed(session, announcement_id=view.id)


def test_retry_requires_a_previous_dispatch(session, admin_id, members):
    view = _draft(session, admin_id)

    with pytest.raises(ValidationError):
        BroadcastOrchestrator().retry_failed(session, announcement_id=view.id)


def test_cancelled_dispatch_stops_between_chunks(session, admin_id, members):
    registry = CancellationRegistry()

    class CancellingWriter(RecordingWriter):
        def write(self, recipient, message, *, deadline):
            registry.cancel(message.batch_id)
            return super().write(recipient, message, deadline=deadline)

    view = _draft(session, admin_id)
    writer = CancellingWriter()
    orchestrator = BroadcastOrchestrator(
        writer=writer, max_workers=1, chunk_size=3, registry=registry
    )

    result = orchestrator.dispatch(session, announcement_id=view.id)

    assert result.status is BatchStatus.CANCELLED
    assert (result.sent_count, result.total_recipients) == (3, 9)
    assert len(writer.attempted) == 3
    assert len(_copies(session, view.id)) == 3
    assert registry.is_running(result.batch_id) is False

    deliveries = NotificationBatchRepository(session).list_deliveries(result.batch_id)
    assert sum(1 for d in deliveries if d.status is DeliveryStatus.SKIPPED) == 6

    retry = BroadcastOrchestrator().retry_failed(session, announcement_id=view.id)

    assert (retry.sent_count, retry.total_recipients) == (6, 6)
    assert sorted(copy.recipient_id for copy in _copies(session, view.id)) == sorted(members)


def test_cancel_requires_a_running_dispatch():
    with pytest.raises(NotFoundError):
        BroadcastOrchestrator(registry=CancellationRegistry()).cancel(42)


def test_batch_outcome_is_written_once(session, admin_id, members):
    view = _draft(session, admin_id)
    result = BroadcastOrchestrator().dispatch(session, announcement_id=view.id)

    with pytest.raises(BatchAlreadyFinalizedError):
        record_outcome(session, batch_id=result.batch_id, sent_count=0, total_recipients=9)

    assert get_batch(session, result.batch_id).status is BatchStatus.COMPLETED


def test_mark_read_is_idempotent(session, admin_id, members):
    view = _draft(session, admin_id)
    BroadcastOrchestrator().dispatch(session, announcement_id=view.id)
    copy = _copies(session, view.id)[0]

    mark_read(session, user_id=copy.recipient_id, notification_id=copy.id)
    first_read_at = NotificationRepository(session).get(copy.id).read_at
    mark_read(session, user_id=copy.recipient_id, notification_id=copy.id)

    session.expire_all()
    stored = NotificationRepository(session).get(copy.id)
    assert stored.is_read is True
    assert stored.read_at == first_read_at
    assert get_read_count(session, get_announcement(session, view.id).announcement) == 1


def test_mark_read_rejects_other_users(session, admin_id, members):
    view = _draft(session, admin_id)
    BroadcastOrchestrator().dispatch(session, announcement_id=view.id)
    copy = _copies(session, view.id)[0]
    other_user = next(member for member in members if member != copy.recipient_id)

    with pytest.raises(NotFoundError):
        mark_read(session, user_id=other_user, notification_id=copy.id)
    with pytest.raises(NotFoundError):
        mark_read(session, user_id=other_user, notification_id=999999)


def test_tokens_of_finished_batches_are_released(session, admin_id, members):
    registry = CancellationRegistry()
    orchestrator = BroadcastOrchestrator(registry=registry)
    view = _draft(session, admin_id)
    stale = orchestrator.prepare(session, announcement_id=view.id)
    record_outcome(
        session,
        batch_id=stale.batch_id,
        sent_count=0,
        total_recipients=stale.total_recipients,
    )
    assert registry.is_running(stale.batch_id) is True

    fresh = orchestrator.prepare(session, announcement_id=view.id)

    assert registry.is_running(stale.batch_id) is False
    assert registry.is_running(fresh.batch_id) is True
