"""Public notice board endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.application.use_cases.notices import (
    get_notice as get_notice_uc,
    list_notices as list_notices_uc,
    mark_notice_read as mark_notice_read_uc,
)
from app.domain.entities import Notice, User
from app.infrastructure.database import get_db
from app.interfaces.api.dependencies import get_current_active_user, get_optional_user
from app.interfaces.api.routes_helpers import translate_domain_errors
from app.interfaces.api.schemas import ApiResponse, MessageResponse, NoticeRead

router = APIRouter(prefix="/notices", tags=["notices"])


def _notice_to_read_model(notice: Notice) -> NoticeRead:
    return NoticeRead(
        id=notice.id,
        announcement_id=notice.announcement_id,
        title=notice.title,
        content=notice.content,
        images=list(notice.images),
        priority=notice.priority.value,
        target_user_types=list(notice.target_user_types),
        expires_at=notice.expires_at,
        author_name=notice.author_name,
        author_nickname=notice.author_nickname,
        is_read=notice.is_read,
        created_at=notice.created_at,
        updated_at=notice.updated_at,
    )


@router.get("", response_model=ApiResponse[list[NoticeRead]])
def list_notices(
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
) -> ApiResponse[list[NoticeRead]]:
    """List sent announcements; read flags are only filled in for signed-in users."""

    notices = list_notices_uc(db, user_id=current_user.id if current_user else None)
    return ApiResponse(data=[_notice_to_read_model(notice) for notice in notices])


@router.get("/{notice_id}", response_model=ApiResponse[NoticeRead])
def get_notice(
    notice_id: int,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
) -> ApiResponse[NoticeRead]:
    with translate_domain_errors():
        notice = get_notice_uc(
            db, notice_id, user_id=current_user.id if current_user else None
        )
    return ApiResponse(data=_notice_to_read_model(notice))


@router.patch("/{notice_id}/read", response_model=MessageResponse)
def mark_notice_read(
    notice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    with translate_domain_errors():
        mark_notice_read_uc(db, user_id=current_user.id, notice_id=notice_id)
    return MessageResponse(message="Notice marked as read")
