"""Schemas for the admin announcement endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from .envelope import ApiModel

AnnouncementAction = Literal["publish", "send", "retry", "cancel"]


class AnnouncementCreate(ApiModel):
    title: str = Field(..., max_length=200)
    content: str
    images: list[str] | None = None
    priority: str | None = Field(default=None, description="HIGH, NORMAL or LOW")
    target_user_types: list[str] | None = None


class AnnouncementUpdate(ApiModel):
    title: str | None = Field(default=None, max_length=200)
    content: str | None = None
    images: list[str] | None = None
    priority: str | None = None
    target_user_types: list[str] | None = None


class AnnouncementActionRequest(ApiModel):
    action: AnnouncementAction


class AnnouncementRead(ApiModel):
    id: int
    notification_id: int | None
    title: str
    content: str
    images: list[str]
    priority: str
    target_user_types: list[str]
    content_type: str
    status: str
    sent_count: int
    total_recipients: int
    read_count: int
    author_name: str | None
    created_at: datetime | None
    sent_at: datetime | None
    expires_at: datetime | None


__all__ = [
    "AnnouncementAction",
    "AnnouncementActionRequest",
    "AnnouncementCreate",
    "AnnouncementRead",
    "AnnouncementUpdate",
]
