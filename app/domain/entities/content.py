"""Notification content modelled as a small tagged union.

A notification body is either plain text or rich text carrying an ordered list
of image URLs. Persisted rows keep the tag in ``content_format`` so readers never
have to guess whether a string is an encoded envelope.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Union

CONTENT_FORMAT_PLAIN = "plain"
CONTENT_FORMAT_RICH = "rich"


@dataclass(frozen=True)
class PlainTextContent:
    text: str

    @property
    def format(self) -> str:
        return CONTENT_FORMAT_PLAIN

    @property
    def images(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class RichTextContent:
    text: str
    images: tuple[str, ...] = field(default_factory=tuple)

    @property
    def format(self) -> str:
        return CONTENT_FORMAT_RICH


NotificationContent = Union[PlainTextContent, RichTextContent]


def clean_image_urls(images: Iterable[str | None] | None) -> list[str]:
    """Drop empty entries and duplicates while keeping the original order."""

    cleaned: list[str] = []
    for image in images or ():
        if image is None:
            continue
        url = str(image).strip()
        if url and url not in cleaned:
            cleaned.append(url)
    return cleaned


def compose_content(text: str, images: Iterable[str | None] | None = None) -> NotificationContent:
    """Return rich content when images accompany ``text``, plain text otherwise."""

    urls = clean_image_urls(images)
    if urls:
        return RichTextContent(text=text, images=tuple(urls))
    return PlainTextContent(text=text)


def content_from_storage(
    content_format: str | None, text: str, images: Iterable[str] | None
) -> NotificationContent:
    if content_format == CONTENT_FORMAT_RICH:
        return RichTextContent(text=text, images=tuple(clean_image_urls(images)))
    return PlainTextContent(text=text)


__all__ = [
    "CONTENT_FORMAT_PLAIN",
    "CONTENT_FORMAT_RICH",
    "NotificationContent",
    "PlainTextContent",
    "RichTextContent",
    "clean_image_urls",
    "compose_content",
    "content_from_storage",
]
