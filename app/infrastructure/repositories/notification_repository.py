"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import Notification, NotificationType
from app.domain.entities.content import content_from_storage
from app.infrastructure.models import NotificationModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_naive_datetime,
)


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects.

    Writes only flush; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: int) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def list_for_user(
        self,
        user_id: int,
        *,
        limit: int | None = 50,
    ) -> Sequence[Notification]:
        query = self.session.query(NotificationModel)
        query = query.filter(NotificationModel.recipient_id == user_id)
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def get_for_recipient_and_announcement(
        self, *, recipient_id: int, announcement_id: int
    ) -> Notification | None:
        model = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.recipient_id == recipient_id)
            .filter(NotificationModel.announcement_id == announcement_id)
            .order_by(NotificationModel.id.desc())
            .first()
        )
        return self._to_entity(model) if model else None

    def get_read_map(
        self, *, recipient_id: int, announcement_ids: Sequence[int]
    ) -> dict[int, bool]:
        """Return ``{announcement_id: is_read}`` for the recipient's delivered copies."""

        if not announcement_ids:
            return {}
        rows = (
            self.session.query(NotificationModel.announcement_id, NotificationModel.is_read)
            .filter(NotificationModel.recipient_id == recipient_id)
            .filter(NotificationModel.announcement_id.in_(set(announcement_ids)))
            .all()
        )
        read_map: dict[int, bool] = {}
        for announcement_id, is_read in rows:
            read_map[announcement_id] = read_map.get(announcement_id, False) or bool(is_read)
        return read_map

    def count_read_for_announcement(self, announcement_id: int) -> int:
        return (
            self.session.query(NotificationModel.id)
            .filter(NotificationModel.announcement_id == announcement_id)
            .filter(NotificationModel.type == NotificationType.ANNOUNCEMENT.value)
            .filter(NotificationModel.is_read.is_(True))
            .count()
        )

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        now = now_in_app_naive_datetime()
        model.created_at = ensure_app_naive_datetime(notification.created_at) or now
        model.updated_at = now
        self.session.add(model)
        self.session.flush()
        self.session.refresh(model)
        return self._to_entity(model)

    def update_content(self, notification: Notification) -> Notification:
        if notification.id is None:
            raise ValueError("Notification id is required for updates")
        model = self.session.get(NotificationModel, notification.id)
        if model is None:
            msg = f"Notification with id {notification.id} not found"
            raise ValueError(msg)
        model.title = notification.title
        model.content = notification.content.text
        model.content_format = notification.content.format
        model.content_images = list(notification.content.images)
        model.updated_at = now_in_app_naive_datetime()
        self.session.flush()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_as_read(self, notification_id: int, *, user_id: int) -> bool:
        """Flag the recipient's notification as read.

        Returns ``False`` when no notification with that id belongs to
        ``user_id``. Already read rows keep their original ``read_at``.
        """

        model = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id == notification_id)
            .filter(NotificationModel.recipient_id == user_id)
            .first()
        )
        if model is None:
            return False
        if not model.is_read:
            model.is_read = True
            model.read_at = now_in_app_naive_datetime()
            self.session.flush()
        return True

    def delete_for_announcement(self, announcement_id: int) -> int:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.announcement_id == announcement_id)
            .delete(synchronize_session=False)
        )

    def delete(self, notification_id: int) -> int:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id == notification_id)
            .delete(synchronize_session=False)
        )

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationModel, notification: Notification
    ) -> None:
        model.type = notification.type.value
        model.recipient_id = notification.recipient_id
        model.recipient_type = notification.recipient_type
        model.sender_id = notification.sender_id
        model.announcement_id = notification.announcement_id
        model.title = notification.title
        model.content = notification.content.text
        model.content_format = notification.content.format
        model.content_images = list(notification.content.images)
        model.is_read = notification.is_read
        model.read_at = ensure_app_naive_datetime(notification.read_at)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            type=NotificationType(model.type),
            recipient_id=model.recipient_id,
            recipient_type=model.recipient_type,
            sender_id=model.sender_id,
            title=model.title,
            content=content_from_storage(
                model.content_format, model.content, model.content_images
            ),
            announcement_id=model.announcement_id,
            is_read=bool(model.is_read),
            read_at=ensure_app_timezone(model.read_at),
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["NotificationRepository"]
