"""Persistence layer for dispatch batches and per-recipient delivery outcomes."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.domain.entities import (
    TERMINAL_BATCH_STATUSES,
    BatchStatus,
    DeliveryStatus,
    NotificationBatch,
    NotificationDelivery,
)
from app.domain.exceptions import BatchAlreadyFinalizedError
from app.infrastructure.models import NotificationBatchModel, NotificationDeliveryModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_naive_datetime,
)


class NotificationBatchRepository:
    """Read and write :class:`NotificationBatch` rows. Writes only flush."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, batch_id: int) -> NotificationBatch | None:
        model = self.session.get(NotificationBatchModel, batch_id)
        return self._to_entity(model) if model else None

    def list_for_announcement(self, announcement_id: int) -> list[NotificationBatch]:
        query = (
            self.session.query(NotificationBatchModel)
            .filter(NotificationBatchModel.announcement_id == announcement_id)
            .order_by(NotificationBatchModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def list_for_announcements(
        self, announcement_ids: Sequence[int]
    ) -> dict[int, list[NotificationBatch]]:
        grouped: dict[int, list[NotificationBatch]] = defaultdict(list)
        if not announcement_ids:
            return grouped
        query = (
            self.session.query(NotificationBatchModel)
            .filter(NotificationBatchModel.announcement_id.in_(set(announcement_ids)))
            .order_by(NotificationBatchModel.id.asc())
        )
        for model in query.all():
            grouped[model.announcement_id].append(self._to_entity(model))
        return grouped

    def has_completed(self, announcement_id: int) -> bool:
        return (
            self.session.query(NotificationBatchModel.id)
            .filter(NotificationBatchModel.announcement_id == announcement_id)
            .filter(NotificationBatchModel.status == BatchStatus.COMPLETED.value)
            .first()
            is not None
        )

    def list_completed_announcement_ids(self) -> list[int]:
        """Announcement ids with a COMPLETED batch, most recently completed first."""

        latest = func.max(NotificationBatchModel.completed_at)
        rows = (
            self.session.query(NotificationBatchModel.announcement_id, latest)
            .filter(NotificationBatchModel.status == BatchStatus.COMPLETED.value)
            .group_by(NotificationBatchModel.announcement_id)
            .order_by(latest.desc())
            .all()
        )
        return [announcement_id for announcement_id, _ in rows]

    def list_open_ids(self, batch_ids: Sequence[int]) -> set[int]:
        """Return the ids among ``batch_ids`` that exist and are not terminal yet."""

        if not batch_ids:
            return set()
        rows = (
            self.session.query(NotificationBatchModel.id)
            .filter(NotificationBatchModel.id.in_(set(batch_ids)))
            .filter(
                NotificationBatchModel.status.notin_(
                    [status.value for status in TERMINAL_BATCH_STATUSES]
                )
            )
            .all()
        )
        return {batch_id for (batch_id,) in rows}

    def create(self, batch: NotificationBatch) -> NotificationBatch:
        model = NotificationBatchModel(
            announcement_id=batch.announcement_id,
            total_recipients=batch.total_recipients,
            sent_count=batch.sent_count,
            failed_count=batch.failed_count,
            status=batch.status.value,
            initiated_by=batch.initiated_by,
            retry_of_id=batch.retry_of_id,
            started_at=ensure_app_naive_datetime(batch.started_at)
            or now_in_app_naive_datetime(),
        )
        self.session.add(model)
        self.session.flush()
        self.session.refresh(model)
        return self._to_entity(model)

    def finalize(
        self,
        batch_id: int,
        *,
        status: BatchStatus,
        sent_count: int,
        failed_count: int,
    ) -> NotificationBatch:
        """Perform the single terminal write of a batch."""

        if status not in TERMINAL_BATCH_STATUSES:
            raise ValueError(f"{status.value} is not a terminal batch status")
        model = self.session.get(NotificationBatchModel, batch_id)
        if model is None:
            msg = f"Notification batch with id {batch_id} not found"
            raise ValueError(msg)
        if BatchStatus(model.status) in TERMINAL_BATCH_STATUSES:
            raise BatchAlreadyFinalizedError(
                f"Batch {batch_id} already finished as {model.status}"
            )
        model.status = status.value
        model.sent_count = sent_count
        model.failed_count = failed_count
        model.completed_at = now_in_app_naive_datetime()
        self.session.flush()
        self.session.refresh(model)
        return self._to_entity(model)

    def add_delivery(self, delivery: NotificationDelivery) -> NotificationDelivery:
        model = NotificationDeliveryModel(
            batch_id=delivery.batch_id,
            recipient_id=delivery.recipient_id,
            recipient_type=delivery.recipient_type,
            notification_id=delivery.notification_id,
            status=delivery.status.value,
            error=delivery.error,
        )
        self.session.add(model)
        self.session.flush()
        return self._delivery_to_entity(model)

    def add_deliveries(self, deliveries: Sequence[NotificationDelivery]) -> int:
        self.session.add_all(
            [
                NotificationDeliveryModel(
                    batch_id=delivery.batch_id,
                    recipient_id=delivery.recipient_id,
                    recipient_type=delivery.recipient_type,
                    notification_id=delivery.notification_id,
                    status=delivery.status.value,
                    error=delivery.error,
                )
                for delivery in deliveries
            ]
        )
        self.session.flush()
        return len(deliveries)

    def list_deliveries(self, batch_id: int) -> list[NotificationDelivery]:
        query = (
            self.session.query(NotificationDeliveryModel)
            .filter(NotificationDeliveryModel.batch_id == batch_id)
            .order_by(NotificationDeliveryModel.id.asc())
        )
        return [self._delivery_to_entity(model) for model in query.all()]

    def delivered_recipient_ids(self, announcement_id: int) -> set[int]:
        """Recipients that received the announcement in any batch."""

        rows = (
            self.session.query(NotificationDeliveryModel.recipient_id)
            .join(
                NotificationBatchModel,
                NotificationDeliveryModel.batch_id == NotificationBatchModel.id,
            )
            .filter(NotificationBatchModel.announcement_id == announcement_id)
            .filter(NotificationDeliveryModel.status == DeliveryStatus.SENT.value)
            .distinct()
            .all()
        )
        return {recipient_id for (recipient_id,) in rows}

    def delete_for_announcement(self, announcement_id: int) -> int:
        """Remove every batch of the announcement together with its deliveries."""

        batch_ids = [
            batch_id
            for (batch_id,) in self.session.query(NotificationBatchModel.id)
            .filter(NotificationBatchModel.announcement_id == announcement_id)
            .all()
        ]
        if not batch_ids:
            return 0
        self.session.query(NotificationDeliveryModel).filter(
            NotificationDeliveryModel.batch_id.in_(batch_ids)
        ).delete(synchronize_session=False)
        # Retries point at earlier batches of the same announcement.
        self.session.query(NotificationBatchModel).filter(
            NotificationBatchModel.id.in_(batch_ids)
        ).update({NotificationBatchModel.retry_of_id: None}, synchronize_session=False)
        return (
            self.session.query(NotificationBatchModel)
            .filter(NotificationBatchModel.id.in_(batch_ids))
            .delete(synchronize_session=False)
        )

    @staticmethod
    def _to_entity(model: NotificationBatchModel) -> NotificationBatch:
        return NotificationBatch(
            id=model.id,
            announcement_id=model.announcement_id,
            total_recipients=model.total_recipients,
            sent_count=model.sent_count,
            failed_count=model.failed_count,
            status=BatchStatus(model.status),
            started_at=ensure_app_timezone(model.started_at),
            completed_at=ensure_app_timezone(model.completed_at),
            initiated_by=model.initiated_by,
            retry_of_id=model.retry_of_id,
        )

    @staticmethod
    def _delivery_to_entity(model: NotificationDeliveryModel) -> NotificationDelivery:
        return NotificationDelivery(
            id=model.id,
            batch_id=model.batch_id,
            recipient_id=model.recipient_id,
            recipient_type=model.recipient_type,
            status=DeliveryStatus(model.status),
            notification_id=model.notification_id,
            error=model.error,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["NotificationBatchRepository"]
