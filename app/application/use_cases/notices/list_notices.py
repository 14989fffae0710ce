"""Public notice board built from announcements that were delivered."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.domain.entities import (
    DEFAULT_AUTHOR_NAME,
    Announcement,
    Notice,
    Notification,
    clean_image_urls,
)
from app.domain.exceptions import NotFoundError
from app.infrastructure.repositories import (
    AnnouncementRepository,
    NotificationBatchRepository,
    NotificationRepository,
    UserRepository,
)


def _to_notice(
    announcement: Announcement,
    canonical: Notification,
    *,
    author_name: str,
    author_nickname: str | None,
    is_read: bool,
) -> Notice:
    return Notice(
        id=canonical.id,
        announcement_id=announcement.id,
        title=canonical.title,
        content=canonical.text,
        images=clean_image_urls([*announcement.images, *canonical.images]),
        priority=announcement.priority,
        target_user_types=list(announcement.target_user_types),
        expires_at=announcement.expires_at,
        author_name=author_name,
        author_nickname=author_nickname,
        is_read=is_read,
        created_at=canonical.created_at,
        updated_at=canonical.updated_at,
    )


def _newest_first_key(notice: Notice) -> float:
    return -(notice.created_at.timestamp() if notice.created_at else 0.0)


def list_notices(session: Session, *, user_id: int | None = None) -> list[Notice]:
    """Return every sent announcement once, unread first, then newest first.

    Anonymous callers see every notice as unread.
    """

    announcement_ids = NotificationBatchRepository(session).list_completed_announcement_ids()
    records = AnnouncementRepository(session).list_by_ids(announcement_ids)

    read_map: dict[int, bool] = {}
    if user_id is not None:
        read_map = NotificationRepository(session).get_read_map(
            recipient_id=user_id, announcement_ids=announcement_ids
        )
    author_ids = [announcement.created_by for announcement, _ in records.values()]
    user_repository = UserRepository(session)
    authors = user_repository.get_display_names(author_ids)
    nicknames = user_repository.get_nicknames(author_ids)

    notices: list[Notice] = []
    for announcement_id in announcement_ids:
        record = records.get(announcement_id)
        if record is None or record[1] is None:
            continue
        announcement, canonical = record
        notices.append(
            _to_notice(
                announcement,
                canonical,
                author_name=authors.get(announcement.created_by, DEFAULT_AUTHOR_NAME),
                author_nickname=nicknames.get(announcement.created_by),
                is_read=read_map.get(announcement_id, False),
            )
        )

    notices.sort(key=lambda notice: (notice.is_read, _newest_first_key(notice)))
    return notices


def get_notice(session: Session, notice_id: int, *, user_id: int | None = None) -> Notice:
    """Return the notice whose canonical notification is ``notice_id``.

    Drafts and announcements without a completed batch are reported as missing.
    Images are ordered like the board listing: the announcement's own images
    first, then those carried by the notification content.
    """

    record = AnnouncementRepository(session).get_by_notification_id(notice_id)
    if record is None or record[1] is None:
        raise NotFoundError("Notice not found")
    announcement, canonical = record
    if not NotificationBatchRepository(session).has_completed(announcement.id):
        raise NotFoundError("Notice has not been sent yet")

    is_read = False
    if user_id is not None:
        is_read = (
            NotificationRepository(session)
            .get_read_map(recipient_id=user_id, announcement_ids=[announcement.id])
            .get(announcement.id, False)
        )
    user_repository = UserRepository(session)
    author_ids = [announcement.created_by]
    return _to_notice(
        announcement,
        canonical,
        author_name=user_repository.get_display_names(author_ids).get(
            announcement.created_by, DEFAULT_AUTHOR_NAME
        ),
        author_nickname=user_repository.get_nicknames(author_ids).get(announcement.created_by),
        is_read=is_read,
    )


__all__ = ["get_notice", "list_notices"]
