"""Endpoints exposing the caller's own notifications."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.application.use_cases.notices import list_notifications_for_user, mark_read
from app.domain.entities import Notification, User
from app.infrastructure.database import get_db
from app.interfaces.api.dependencies import get_current_active_user
from app.interfaces.api.routes_helpers import translate_domain_errors
from app.interfaces.api.schemas import ApiResponse, MessageResponse, NotificationRead

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or 0,
        type=notification.type.value,
        title=notification.title,
        content=notification.text,
        images=list(notification.images),
        announcement_id=notification.announcement_id,
        sender_id=notification.sender_id,
        is_read=notification.is_read,
        read_at=notification.read_at,
        created_at=notification.created_at,
    )


@router.get("", response_model=ApiResponse[list[NotificationRead]])
def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ApiResponse[list[NotificationRead]]:
    """Return the most recent notifications for the authenticated user."""

    notifications = list_notifications_for_user(db, current_user.id, limit=limit)
    return ApiResponse(data=[_notification_to_schema(item) for item in notifications])


@router.patch("/{notification_id}/read", response_model=MessageResponse)
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    with translate_domain_errors():
        mark_read(db, user_id=current_user.id, notification_id=notification_id)
    return MessageResponse(message="Notification marked as read")
