"""Persistence layer for announcements."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import Announcement, AnnouncementPriority, Notification
from app.infrastructure.models import AnnouncementModel, NotificationModel
from app.utils import ensure_app_naive_datetime, ensure_app_timezone

from .notification_repository import NotificationRepository

AnnouncementRecord = tuple[Announcement, Notification | None]


class AnnouncementRepository:
    """Store announcements together with their canonical notification."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, announcement_id: int) -> AnnouncementRecord | None:
        model = self.session.get(AnnouncementModel, announcement_id)
        return self._to_record(model) if model else None

    def get_by_notification_id(self, notification_id: int) -> AnnouncementRecord | None:
        model = (
            self.session.query(AnnouncementModel)
            .filter(AnnouncementModel.notification_id == notification_id)
            .first()
        )
        return self._to_record(model) if model else None

    def list(self) -> Sequence[AnnouncementRecord]:
        """Return every announcement, newest canonical notification first."""

        query = (
            self.session.query(AnnouncementModel)
            .join(NotificationModel, AnnouncementModel.notification_id == NotificationModel.id)
            .order_by(NotificationModel.created_at.desc(), AnnouncementModel.id.desc())
        )
        return [self._to_record(model) for model in query.all()]

    def list_by_ids(self, announcement_ids: Sequence[int]) -> dict[int, AnnouncementRecord]:
        if not announcement_ids:
            return {}
        models = (
            self.session.query(AnnouncementModel)
            .filter(AnnouncementModel.id.in_(set(announcement_ids)))
            .all()
        )
        return {model.id: self._to_record(model) for model in models}

    def create(self, announcement: Announcement) -> Announcement:
        model = AnnouncementModel()
        model.notification_id = announcement.notification_id
        model.created_by = announcement.created_by
        self._apply_metadata(model, announcement)
        self.session.add(model)
        self.session.flush()
        self.session.refresh(model)
        return self._to_entity(model)

    def update_metadata(self, announcement: Announcement) -> Announcement:
        model = self.session.get(AnnouncementModel, announcement.id)
        if model is None:
            msg = f"Announcement with id {announcement.id} not found"
            raise ValueError(msg)
        self._apply_metadata(model, announcement)
        self.session.flush()
        self.session.refresh(model)
        return self._to_entity(model)

    def delete(self, announcement_id: int) -> int:
        return (
            self.session.query(AnnouncementModel)
            .filter(AnnouncementModel.id == announcement_id)
            .delete(synchronize_session=False)
        )

    @staticmethod
    def _apply_metadata(model: AnnouncementModel, announcement: Announcement) -> None:
        model.target_user_types = list(announcement.target_user_types)
        model.priority = announcement.priority.value
        model.images = list(announcement.images)
        model.content_type = announcement.content_type
        model.expires_at = ensure_app_naive_datetime(announcement.expires_at)

    @classmethod
    def _to_record(cls, model: AnnouncementModel) -> AnnouncementRecord:
        notification = (
            NotificationRepository._to_entity(model.notification)
            if model.notification is not None
            else None
        )
        return cls._to_entity(model), notification

    @staticmethod
    def _to_entity(model: AnnouncementModel) -> Announcement:
        return Announcement(
            id=model.id,
            notification_id=model.notification_id,
            created_by=model.created_by,
            priority=AnnouncementPriority(model.priority),
            target_user_types=list(model.target_user_types or []),
            images=list(model.images or []),
            content_type=model.content_type,
            expires_at=ensure_app_timezone(model.expires_at),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["AnnouncementRecord", "AnnouncementRepository"]
