"""Helper utilities shared across API route handlers."""

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, status

from app.domain.exceptions import (
    BatchAlreadyFinalizedError,
    NotFoundError,
    TransactionFailure,
    ValidationError,
)


@contextmanager
def translate_domain_errors() -> Iterator[None]:
    """Re-raise domain exceptions as the matching :class:`HTTPException`."""

    try:
        yield
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except BatchAlreadyFinalizedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except TransactionFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc
