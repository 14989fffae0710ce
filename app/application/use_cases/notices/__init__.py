"""Public notices and per-user read state."""

from .list_notices import get_notice, list_notices
from .read_state import list_notifications_for_user, mark_notice_read, mark_read

__all__ = [
    "get_notice",
    "list_notices",
    "list_notifications_for_user",
    "mark_notice_read",
    "mark_read",
]
