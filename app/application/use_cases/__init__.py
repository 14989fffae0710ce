"""Aggregate application use cases."""

from .announcements import (
    create_draft,
    delete_announcement,
    get_announcement,
    list_announcements,
    update_announcement,
)
from .broadcasts import cancel_dispatch, dispatch, retry_failed
from .notices import get_notice, list_notices, mark_read
from .users import authenticate_user, create_user

__all__ = [
    "authenticate_user",
    "cancel_dispatch",
    "create_draft",
    "create_user",
    "delete_announcement",
    "dispatch",
    "get_announcement",
    "get_notice",
    "list_announcements",
    "list_notices",
    "mark_read",
    "retry_failed",
    "update_announcement",
]
