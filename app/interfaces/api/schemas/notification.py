"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from .envelope import ApiModel


class NotificationRead(ApiModel):
    """Representation of a notification delivered to the client."""

    id: int
    type: str
    title: str
    content: str
    images: list[str]
    announcement_id: int | None
    sender_id: int | None
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime | None = None


__all__ = ["NotificationRead"]
