"""Per-recipient notification writes used by the broadcast fan-out."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import (
    DeliveryStatus,
    Notification,
    NotificationContent,
    NotificationDelivery,
    NotificationType,
    Recipient,
)
from app.domain.exceptions import RecipientWriteError
from app.infrastructure.repositories import (
    NotificationBatchRepository,
    NotificationRepository,
)
from app.utils import now_in_app_timezone

SessionFactory = Callable[[], Session]


@dataclass(frozen=True)
class OutgoingMessage:
    """Content shared by every copy produced by one batch."""

    batch_id: int
    announcement_id: int
    sender_id: int | None
    title: str
    content: NotificationContent


class NotificationWriter:
    """Write one recipient's notification and delivery row in its own session.

    Each call commits or rolls back on its own, so one recipient's failure
    never touches the rows written for another.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def write(self, recipient: Recipient, message: OutgoingMessage, *, deadline: float) -> int:
        """Persist the copy for ``recipient`` and return its notification id.

        ``deadline`` is a :func:`time.monotonic` value; a write still
        uncommitted past it is rolled back and reported as a failure.
        """

        try:
            recipient_type = recipient.resolve_user_type().value
        except ValueError as exc:
            raise RecipientWriteError(
                recipient.id, f"unknown user type {recipient.user_type!r}"
            ) from exc

        session = self._session_factory()
        try:
            notification = NotificationRepository(session).create(
                Notification(
                    id=None,
                    type=NotificationType.ANNOUNCEMENT,
                    recipient_id=recipient.id,
                    recipient_type=recipient_type,
                    sender_id=message.sender_id,
                    title=message.title,
                    content=message.content,
                    announcement_id=message.announcement_id,
                    created_at=now_in_app_timezone(),
                )
            )
            NotificationBatchRepository(session).add_delivery(
                NotificationDelivery(
                    id=None,
                    batch_id=message.batch_id,
                    recipient_id=recipient.id,
                    recipient_type=recipient_type,
                    status=DeliveryStatus.SENT,
                    notification_id=notification.id,
                )
            )
            if time.monotonic() > deadline:
                raise RecipientWriteError(recipient.id, "write timed out")
            session.commit()
            return notification.id
        except RecipientWriteError:
            session.rollback()
            raise
        except SQLAlchemyError as exc:
            session.rollback()
            raise RecipientWriteError(recipient.id, str(exc)) from exc
        finally:
            session.close()


__all__ = ["NotificationWriter", "OutgoingMessage", "SessionFactory"]
