"""Broadcast orchestration: snapshot recipients, fan out, record the outcome."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.config import get_settings
from app.domain.entities import (
    RETRYABLE_DELIVERY_STATUSES,
    Announcement,
    BatchStatus,
    DeliveryStatus,
    Notification,
    NotificationBatch,
    NotificationDelivery,
    Recipient,
    compose_content,
)
from app.domain.exceptions import NotFoundError, TransactionFailure, ValidationError
from app.infrastructure.database import SessionLocal, transaction
from app.infrastructure.repositories import (
    AnnouncementRepository,
    NotificationBatchRepository,
)

from .batches import record_outcome, start_batch
from .cancellation import CancellationRegistry, cancellation_registry
from .recipients import resolve_recipients
from .writer import NotificationWriter, OutgoingMessage, SessionFactory

logger = logging.getLogger(__name__)

_ERROR_MAX_LENGTH = 500


@dataclass(frozen=True)
class DispatchPlan:
    """Everything the fan-out needs once the PENDING batch is committed."""

    batch_id: int
    message: OutgoingMessage
    recipients: tuple[Recipient, ...]

    @property
    def announcement_id(self) -> int:
        return self.message.announcement_id

    @property
    def total_recipients(self) -> int:
        return len(self.recipients)


@dataclass(frozen=True)
class DispatchResult:
    batch_id: int
    sent_count: int
    total_recipients: int
    status: BatchStatus


class _SentCounter:
    """Counter shared by the worker threads of one batch."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def increment(self) -> None:
        with self._lock:
            self._value += 1

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


def _chunked(recipients: Sequence[Recipient], size: int) -> list[Sequence[Recipient]]:
    return [recipients[start : start + size] for start in range(0, len(recipients), size)]


class BroadcastOrchestrator:
    """Deliver an announcement to every recipient of a snapshot.

    Writes run on a bounded thread pool, each in its own session. A failing
    recipient is logged and recorded without affecting the others, and the
    batch row is written once when the fan-out starts and once when it ends.
    """

    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        *,
        writer: NotificationWriter | None = None,
        max_workers: int | None = None,
        chunk_size: int | None = None,
        write_timeout: float | None = None,
        registry: CancellationRegistry | None = None,
    ) -> None:
        settings = get_settings()
        self._session_factory = session_factory or SessionLocal
        self._writer = writer or NotificationWriter(self._session_factory)
        self._max_workers = max_workers or settings.dispatch_max_workers
        self._chunk_size = chunk_size or settings.dispatch_chunk_size
        self._write_timeout = write_timeout or settings.dispatch_write_timeout_seconds
        self._registry = registry or cancellation_registry

    def prepare(
        self,
        session: Session,
        *,
        announcement_id: int,
        initiated_by: int | None = None,
    ) -> DispatchPlan:
        """Snapshot the recipients and commit a PENDING batch for them."""

        announcement, canonical = self._load(session, announcement_id)
        self._release_finished_tokens(session)
        recipients = resolve_recipients(session, announcement)
        batch = start_batch(
            session,
            announcement_id=announcement_id,
            total_recipients=len(recipients),
            initiated_by=initiated_by,
        )
        return self._plan(batch, announcement, canonical, recipients)

    def prepare_retry(
        self,
        session: Session,
        *,
        announcement_id: int,
        initiated_by: int | None = None,
    ) -> DispatchPlan:
        """Plan a batch for the recipients the latest dispatch did not reach."""

        announcement, canonical = self._load(session, announcement_id)
        self._release_finished_tokens(session)
        batch_repository = NotificationBatchRepository(session)

        batches = batch_repository.list_for_announcement(announcement_id)
        if not batches:
            raise ValidationError("Announcement has not been sent yet")
        latest = batches[-1]
        if not latest.is_terminal():
            raise ValidationError("A dispatch is still running for this announcement")
        if latest.is_completed():
            raise ValidationError("Nothing to retry: the latest dispatch completed")

        delivered = batch_repository.delivered_recipient_ids(announcement_id)
        pending_ids = {
            delivery.recipient_id
            for delivery in batch_repository.list_deliveries(latest.id)
            if delivery.status in RETRYABLE_DELIVERY_STATUSES
            and delivery.recipient_id not in delivered
        }
        recipients = [
            recipient
            for recipient in resolve_recipients(session, announcement)
            if recipient.id in pending_ids
        ]
        if not recipients:
            raise ValidationError("Nothing to retry")

        batch = start_batch(
            session,
            announcement_id=announcement_id,
            total_recipients=len(recipients),
            initiated_by=initiated_by,
            retry_of_id=latest.id,
        )
        logger.info(
            "Batch %s retries %s recipients of batch %s",
            batch.id,
            len(recipients),
            latest.id,
        )
        return self._plan(batch, announcement, canonical, recipients)

    def run(self, plan: DispatchPlan) -> DispatchResult:
        """Fan out ``plan`` and record the batch outcome."""

        token = self._registry.register(plan.batch_id)
        counter = _SentCounter()
        failed = 0
        skipped: list[Recipient] = []

        logger.info(
            "Dispatching batch %s to %s recipients",
            plan.batch_id,
            plan.total_recipients,
        )
        try:
            chunks = _chunked(plan.recipients, self._chunk_size)
            with ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix="broadcast"
            ) as executor:
                for index, chunk in enumerate(chunks):
                    if token.is_set():
                        skipped = [recipient for rest in chunks[index:] for recipient in rest]
                        break
                    failed += self._deliver_chunk(executor, chunk, plan.message, counter)
        finally:
            self._registry.release(plan.batch_id)

        if skipped:
            logger.warning(
                "Batch %s cancelled with %s recipients left",
                plan.batch_id,
                len(skipped),
            )
            self._record_deliveries(
                plan.batch_id, skipped, status=DeliveryStatus.SKIPPED, error="cancelled"
            )

        session = self._session_factory()
        try:
            batch = record_outcome(
                session,
                batch_id=plan.batch_id,
                sent_count=counter.value,
                total_recipients=plan.total_recipients,
                failed_count=failed,
                cancelled=bool(skipped),
            )
        finally:
            session.close()

        return DispatchResult(
            batch_id=plan.batch_id,
            sent_count=batch.sent_count,
            total_recipients=batch.total_recipients,
            status=batch.status,
        )

    def dispatch(
        self,
        session: Session,
        *,
        announcement_id: int,
        initiated_by: int | None = None,
    ) -> DispatchResult:
        plan = self.prepare(session, announcement_id=announcement_id, initiated_by=initiated_by)
        return self.run(plan)

    def retry_failed(
        self,
        session: Session,
        *,
        announcement_id: int,
        initiated_by: int | None = None,
    ) -> DispatchResult:
        plan = self.prepare_retry(
            session, announcement_id=announcement_id, initiated_by=initiated_by
        )
        return self.run(plan)

    def cancel(self, batch_id: int) -> None:
        if not self._registry.cancel(batch_id):
            raise NotFoundError("No dispatch in progress for this batch")
        logger.info("Cancellation requested for batch %s", batch_id)

    def _release_finished_tokens(self, session: Session) -> None:
        """Drop tokens of batches that are already terminal or were deleted."""

        registered = self._registry.batch_ids()
        if not registered:
            return
        open_ids = NotificationBatchRepository(session).list_open_ids(registered)
        for batch_id in set(registered) - open_ids:
            self._registry.release(batch_id)

    def _load(
        self, session: Session, announcement_id: int
    ) -> tuple[Announcement, Notification]:
        record = AnnouncementRepository(session).get(announcement_id)
        if record is None:
            raise NotFoundError("Announcement not found")
        announcement, canonical = record
        if canonical is None:
            raise NotFoundError("Announcement notification not found")
        return announcement, canonical

    def _plan(
        self,
        batch: NotificationBatch,
        announcement: Announcement,
        canonical: Notification,
        recipients: Sequence[Recipient],
    ) -> DispatchPlan:
        self._registry.register(batch.id)
        message = OutgoingMessage(
            batch_id=batch.id,
            announcement_id=announcement.id,
            sender_id=announcement.created_by,
            title=canonical.title,
            content=compose_content(canonical.text, announcement.images),
        )
        return DispatchPlan(batch_id=batch.id, message=message, recipients=tuple(recipients))

    def _deliver_chunk(
        self,
        executor: ThreadPoolExecutor,
        chunk: Sequence[Recipient],
        message: OutgoingMessage,
        counter: _SentCounter,
    ) -> int:
        futures = {
            executor.submit(self._deliver, recipient, message, counter): recipient
            for recipient in chunk
        }
        failed = 0
        for future in as_completed(futures):
            recipient = futures[future]
            try:
                future.result()
            except Exception as exc:  # each recipient fails on its own
                failed += 1
                logger.warning(
                    "Batch %s could not notify user %s: %s",
                    message.batch_id,
                    recipient.id,
                    exc,
                )
                self._record_deliveries(
                    message.batch_id,
                    [recipient],
                    status=DeliveryStatus.FAILED,
                    error=str(exc),
                )
        return failed

    def _deliver(
        self, recipient: Recipient, message: OutgoingMessage, counter: _SentCounter
    ) -> None:
        deadline = time.monotonic() + self._write_timeout
        self._writer.write(recipient, message, deadline=deadline)
        counter.increment()

    def _record_deliveries(
        self,
        batch_id: int,
        recipients: Sequence[Recipient],
        *,
        status: DeliveryStatus,
        error: str,
    ) -> None:
        session = self._session_factory()
        try:
            with transaction(session, operation="record delivery outcome"):
                NotificationBatchRepository(session).add_deliveries(
                    [
                        NotificationDelivery(
                            id=None,
                            batch_id=batch_id,
                            recipient_id=recipient.id,
                            recipient_type=recipient.user_type,
                            status=status,
                            error=error[:_ERROR_MAX_LENGTH],
                        )
                        for recipient in recipients
                    ]
                )
        except TransactionFailure:
            logger.exception(
                "Batch %s: could not record %s outcome for %s recipients",
                batch_id,
                status.value,
                len(recipients),
            )
        finally:
            session.close()


def prepare_dispatch(
    session: Session, announcement_id: int, *, initiated_by: int | None = None
) -> DispatchPlan:
    return BroadcastOrchestrator().prepare(
        session, announcement_id=announcement_id, initiated_by=initiated_by
    )


def prepare_retry(
    session: Session, announcement_id: int, *, initiated_by: int | None = None
) -> DispatchPlan:
    return BroadcastOrchestrator().prepare_retry(
        session, announcement_id=announcement_id, initiated_by=initiated_by
    )


def run_dispatch(plan: DispatchPlan) -> DispatchResult:
    return BroadcastOrchestrator().run(plan)


def dispatch(
    session: Session, announcement_id: int, *, initiated_by: int | None = None
) -> DispatchResult:
    """Deliver the announcement synchronously and return the batch counts."""

    return BroadcastOrchestrator().dispatch(
        session, announcement_id=announcement_id, initiated_by=initiated_by
    )


def retry_failed(
    session: Session, announcement_id: int, *, initiated_by: int | None = None
) -> DispatchResult:
    return BroadcastOrchestrator().retry_failed(
        session, announcement_id=announcement_id, initiated_by=initiated_by
    )


def cancel_dispatch(batch_id: int) -> None:
    BroadcastOrchestrator().cancel(batch_id)


def cancel_announcement_dispatch(session: Session, announcement_id: int) -> NotificationBatch:
    """Cancel the running batch of ``announcement_id`` and return it."""

    batches = NotificationBatchRepository(session).list_for_announcement(announcement_id)
    running = [batch for batch in batches if not batch.is_terminal()]
    if not running:
        if AnnouncementRepository(session).get(announcement_id) is None:
            raise NotFoundError("Announcement not found")
        raise NotFoundError("No dispatch in progress for this announcement")
    batch = running[-1]
    cancel_dispatch(batch.id)
    return batch


__all__ = [
    "BroadcastOrchestrator",
    "DispatchPlan",
    "DispatchResult",
    "cancel_announcement_dispatch",
    "cancel_dispatch",
    "dispatch",
    "prepare_dispatch",
    "prepare_retry",
    "retry_failed",
    "run_dispatch",
]
