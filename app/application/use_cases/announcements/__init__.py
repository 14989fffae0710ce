"""Announcement authoring use cases."""

from .create_announcement import create_draft
from .delete_announcement import delete_announcement
from .get_announcement import get_announcement, list_announcements
from .update_announcement import update_announcement
from .views import build_announcement_view, build_announcement_views, get_read_count

__all__ = [
    "build_announcement_view",
    "build_announcement_views",
    "create_draft",
    "delete_announcement",
    "get_announcement",
    "get_read_count",
    "list_announcements",
    "update_announcement",
]
