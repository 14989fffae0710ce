"""Validation helpers for announcement use cases."""

from __future__ import annotations

from collections.abc import Iterable

from app.domain.entities import (
    DEFAULT_TARGET_USER_TYPES,
    AnnouncementPriority,
    UserType,
    clean_image_urls,
)
from app.domain.exceptions import ValidationError

TITLE_MAX_LENGTH = 200


def ensure_title(title: str | None) -> str:
    """Return the stripped title or raise :class:`ValidationError`."""

    normalized = (title or "").strip()
    if not normalized:
        raise ValidationError("Title is required")
    if len(normalized) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
    return normalized


def ensure_content(content: str | None) -> str:
    if content is None or not content.strip():
        raise ValidationError("Content is required")
    return content


def parse_priority(priority: str | AnnouncementPriority | None) -> AnnouncementPriority:
    if priority is None:
        return AnnouncementPriority.NORMAL
    if isinstance(priority, AnnouncementPriority):
        return priority
    try:
        return AnnouncementPriority(str(priority).strip().upper())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in AnnouncementPriority)
        raise ValidationError(f"Priority must be one of: {allowed}") from exc


def normalize_target_user_types(values: Iterable[str] | None) -> list[str]:
    """Validate audience labels, defaulting to every user type."""

    if values is None:
        return list(DEFAULT_TARGET_USER_TYPES)
    normalized: list[str] = []
    for value in values:
        label = str(value).strip().upper()
        try:
            UserType(label)
        except ValueError as exc:
            raise ValidationError(f"Unknown user type: {value}") from exc
        if label not in normalized:
            normalized.append(label)
    if not normalized:
        return list(DEFAULT_TARGET_USER_TYPES)
    return normalized


def normalize_images(images: Iterable[str | None] | None) -> list[str]:
    return clean_image_urls(images)


__all__ = [
    "TITLE_MAX_LENGTH",
    "ensure_content",
    "ensure_title",
    "normalize_images",
    "normalize_target_user_types",
    "parse_priority",
]
