"""Use cases for reading announcements."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.domain.entities import AnnouncementView
from app.domain.exceptions import NotFoundError
from app.infrastructure.repositories import AnnouncementRepository

from .views import build_announcement_view, build_announcement_views


def get_announcement(session: Session, announcement_id: int) -> AnnouncementView:
    record = AnnouncementRepository(session).get(announcement_id)
    if record is None:
        raise NotFoundError("Announcement not found")
    return build_announcement_view(session, record)


def list_announcements(session: Session) -> list[AnnouncementView]:
    """Return every announcement for the admin listing, newest first."""

    return build_announcement_views(session, AnnouncementRepository(session).list())


__all__ = ["get_announcement", "list_announcements"]
