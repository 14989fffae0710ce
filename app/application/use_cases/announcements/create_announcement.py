"""Use case for creating announcement drafts."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import (
    DEFAULT_CONTENT_TYPE,
    Announcement,
    AnnouncementPriority,
    AnnouncementView,
    Notification,
    NotificationType,
    compose_content,
)
from app.domain.exceptions import NotFoundError
from app.infrastructure.database import transaction
from app.infrastructure.repositories import (
    AnnouncementRepository,
    NotificationRepository,
    UserRepository,
)
from app.utils import now_in_app_timezone

from .validators import (
    ensure_content,
    ensure_title,
    normalize_images,
    normalize_target_user_types,
    parse_priority,
)
from .views import build_announcement_view

logger = logging.getLogger(__name__)


def create_draft(
    session: Session,
    *,
    title: str,
    content: str,
    author_id: int,
    images: Sequence[str | None] | None = None,
    priority: str | AnnouncementPriority | None = None,
    target_user_types: Sequence[str] | None = None,
) -> AnnouncementView:
    """Persist the canonical notification and its announcement together.

    The canonical notification is addressed to the author and carries the
    authoritative title and body. Either both rows are stored or neither is.
    """

    normalized_title = ensure_title(title)
    normalized_content = ensure_content(content)
    resolved_priority = parse_priority(priority)
    audience = normalize_target_user_types(target_user_types)
    image_urls = normalize_images(images)

    author = UserRepository(session).get(author_id)
    if author is None:
        raise NotFoundError("Author not found")

    notification_repository = NotificationRepository(session)
    announcement_repository = AnnouncementRepository(session)

    with transaction(session, operation="create announcement"):
        canonical = notification_repository.create(
            Notification(
                id=None,
                type=NotificationType.ANNOUNCEMENT,
                recipient_id=author.id,
                recipient_type=author.user_type.value,
                sender_id=author.id,
                title=normalized_title,
                content=compose_content(normalized_content),
                created_at=now_in_app_timezone(),
            )
        )
        announcement = announcement_repository.create(
            Announcement(
                id=None,
                notification_id=canonical.id,
                created_by=author.id,
                priority=resolved_priority,
                target_user_types=audience,
                images=image_urls,
                content_type=DEFAULT_CONTENT_TYPE,
            )
        )

    logger.info(
        "Announcement %s drafted by user %s (notification %s)",
        announcement.id,
        author.id,
        canonical.id,
    )
    return build_announcement_view(session, (announcement, canonical))


__all__ = ["create_draft"]
