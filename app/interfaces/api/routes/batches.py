"""Polling endpoint for dispatch batches."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.application.use_cases.broadcasts import get_batch as get_batch_uc
from app.domain.entities import User
from app.infrastructure.database import get_db
from app.interfaces.api.dependencies import require_admin
from app.interfaces.api.routes_helpers import translate_domain_errors
from app.interfaces.api.schemas import ApiResponse, BatchRead

from .announcements import batch_to_read_model

router = APIRouter(prefix="/batches", tags=["batches"])


@router.get("/{batch_id}", response_model=ApiResponse[BatchRead])
def get_batch(
    batch_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> ApiResponse[BatchRead]:
    """Return the current state of a dispatch batch."""

    with translate_domain_errors():
        batch = get_batch_uc(db, batch_id)
    return ApiResponse(data=batch_to_read_model(batch))
