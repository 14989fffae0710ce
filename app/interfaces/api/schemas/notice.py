"""Schemas for the public notice board."""

from __future__ import annotations

from datetime import datetime

from .envelope import ApiModel


class NoticeRead(ApiModel):
    id: int
    announcement_id: int
    title: str
    content: str
    images: list[str]
    priority: str
    target_user_types: list[str]
    expires_at: datetime | None
    author_name: str
    author_nickname: str | None = None
    is_read: bool
    created_at: datetime | None
    updated_at: datetime | None


__all__ = ["NoticeRead"]
