"""Recipient resolution for announcement broadcasts."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.domain.entities import Announcement, Recipient
from app.infrastructure.repositories import UserRepository


def resolve_recipients(session: Session, announcement: Announcement) -> list[Recipient]:
    """Snapshot every active user except the author, ordered by id.

    ``target_user_types`` is not applied: every user type receives the
    announcement regardless of the stored audience.
    """

    return UserRepository(session).list_active_recipients(
        exclude_user_id=announcement.created_by
    )


__all__ = ["resolve_recipients"]
