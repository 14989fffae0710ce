"""Administrative endpoints to author, send and remove announcements."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.application.use_cases.announcements import (
    create_draft,
    delete_announcement as delete_announcement_uc,
    get_announcement as get_announcement_uc,
    list_announcements as list_announcements_uc,
    update_announcement as update_announcement_uc,
)
from app.application.use_cases.broadcasts import (
    DispatchPlan,
    DispatchResult,
    cancel_announcement_dispatch,
    dispatch,
    list_batches,
    prepare_dispatch,
    prepare_retry,
    retry_failed,
    run_dispatch,
)
from app.domain.entities import AnnouncementView, BatchStatus, NotificationBatch, User
from app.infrastructure.database import get_db
from app.interfaces.api.dependencies import require_admin
from app.interfaces.api.routes_helpers import translate_domain_errors
from app.interfaces.api.schemas import (
    AnnouncementActionRequest,
    AnnouncementCreate,
    AnnouncementRead,
    AnnouncementUpdate,
    ApiResponse,
    BatchRead,
    DispatchRead,
    MessageResponse,
)

router = APIRouter(prefix="/announcements", tags=["announcements"])
logger = logging.getLogger(__name__)


def _announcement_to_read_model(view: AnnouncementView) -> AnnouncementRead:
    announcement = view.announcement
    return AnnouncementRead(
        id=announcement.id,
        notification_id=announcement.notification_id,
        title=view.title,
        content=view.content,
        images=list(announcement.images),
        priority=announcement.priority.value,
        target_user_types=list(announcement.target_user_types),
        content_type=announcement.content_type,
        status=view.status.value,
        sent_count=view.sent_count,
        total_recipients=view.total_recipients,
        read_count=view.read_count,
        author_name=view.author_name,
        created_at=announcement.created_at,
        sent_at=view.sent_at,
        expires_at=announcement.expires_at,
    )


def batch_to_read_model(batch: NotificationBatch) -> BatchRead:
    return BatchRead(
        id=batch.id,
        announcement_id=batch.announcement_id,
        status=batch.status.value,
        total_recipients=batch.total_recipients,
        sent_count=batch.sent_count,
        failed_count=batch.failed_count,
        initiated_by=batch.initiated_by,
        retry_of_id=batch.retry_of_id,
        started_at=batch.started_at,
        completed_at=batch.completed_at,
    )


def _result_to_read_model(result: DispatchResult) -> DispatchRead:
    return DispatchRead(
        batch_id=result.batch_id,
        status=result.status.value,
        sent_count=result.sent_count,
        total_recipients=result.total_recipients,
    )


def _plan_to_read_model(plan: DispatchPlan) -> DispatchRead:
    return DispatchRead(
        batch_id=plan.batch_id,
        status=BatchStatus.PENDING.value,
        sent_count=0,
        total_recipients=plan.total_recipients,
    )


@router.post(
    "",
    response_model=ApiResponse[AnnouncementRead],
    status_code=status.HTTP_201_CREATED,
)
def create_announcement(
    payload: AnnouncementCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> ApiResponse[AnnouncementRead]:
    """Create a draft announcement authored by the caller."""

    with translate_domain_errors():
        view = create_draft(
            db,
            title=payload.title,
            content=payload.content,
            images=payload.images,
            priority=payload.priority,
            target_user_types=payload.target_user_types,
            author_id=current_user.id,
        )
    return ApiResponse(data=_announcement_to_read_model(view))


@router.get("", response_model=ApiResponse[list[AnnouncementRead]])
def list_announcements(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> ApiResponse[list[AnnouncementRead]]:
    views = list_announcements_uc(db)
    return ApiResponse(data=[_announcement_to_read_model(view) for view in views])


@router.get("/{announcement_id}", response_model=ApiResponse[AnnouncementRead])
def get_announcement(
    announcement_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> ApiResponse[AnnouncementRead]:
    with translate_domain_errors():
        view = get_announcement_uc(db, announcement_id)
    return ApiResponse(data=_announcement_to_read_model(view))


@router.put("/{announcement_id}", response_model=ApiResponse[AnnouncementRead])
def update_announcement(
    announcement_id: int,
    payload: AnnouncementUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> ApiResponse[AnnouncementRead]:
    """Edit the announcement; notifications already delivered keep their content."""

    with translate_domain_errors():
        view = update_announcement_uc(
            db,
            announcement_id,
            title=payload.title,
            content=payload.content,
            images=payload.images,
            priority=payload.priority,
            target_user_types=payload.target_user_types,
        )
    return ApiResponse(data=_announcement_to_read_model(view))


@router.post(
    "/{announcement_id}",
    response_model=ApiResponse[DispatchRead] | MessageResponse,
)
def run_announcement_action(
    announcement_id: int,
    payload: AnnouncementActionRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    wait: bool = Query(False, description="Deliver before responding"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> ApiResponse[DispatchRead] | MessageResponse:
    """Publish, send, retry or cancel the delivery of an announcement.

    Without ``wait`` a send or retry answers ``202`` as soon as its batch is
    PENDING and delivers in the background.
    """

    if payload.action == "publish":
        with translate_domain_errors():
            get_announcement_uc(db, announcement_id)
        return MessageResponse(message="Announcement published")

    if payload.action == "cancel":
        with translate_domain_errors():
            batch = cancel_announcement_dispatch(db, announcement_id)
        response.status_code = status.HTTP_202_ACCEPTED
        return MessageResponse(message=f"Cancellation requested for batch {batch.id}")

    if wait:
        operation = dispatch if payload.action == "send" else retry_failed
        with translate_domain_errors():
            result = operation(db, announcement_id, initiated_by=current_user.id)
        return ApiResponse(data=_result_to_read_model(result))

    prepare = prepare_dispatch if payload.action == "send" else prepare_retry
    with translate_domain_errors():
        plan = prepare(db, announcement_id, initiated_by=current_user.id)
    background_tasks.add_task(_run_dispatch_in_background, plan)
    response.status_code = status.HTTP_202_ACCEPTED
    return ApiResponse(data=_plan_to_read_model(plan))


@router.delete("/{announcement_id}", response_model=MessageResponse)
def delete_announcement(
    announcement_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> MessageResponse:
    """Delete the announcement and every notification it produced."""

    with translate_domain_errors():
        delete_announcement_uc(db, announcement_id)
    return MessageResponse(message="Announcement deleted")


@router.get(
    "/{announcement_id}/batches",
    response_model=ApiResponse[list[BatchRead]],
)
def list_announcement_batches(
    announcement_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> ApiResponse[list[BatchRead]]:
    with translate_domain_errors():
        batches = list_batches(db, announcement_id)
    return ApiResponse(data=[batch_to_read_model(batch) for batch in batches])


def _run_dispatch_in_background(plan: DispatchPlan) -> None:
    """Deliver ``plan`` with sessions independent from the request."""

    try:
        run_dispatch(plan)
    except Exception as exc:  # pragma: no cover - background processing guard
        logger.exception("Dispatch of batch %s failed: %s", plan.batch_id, exc)
