"""Timezone helpers shared by repositories and use cases."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import get_settings

_FALLBACK_TIMEZONE: Final[str] = "Asia/Seoul"
_UTC_OFFSET: Final[re.Pattern[str]] = re.compile(
    r"^UTC(?P<sign>[+-])(?P<hours>\d{1,2})(?::(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the timezone configured through ``APP_TIMEZONE``.

    Accepts IANA names (``Asia/Seoul``) and fixed offsets (``UTC+09:00``).
    Anything else resolves to Asia/Seoul.
    """

    name = (get_settings().app_timezone or "").strip() or _FALLBACK_TIMEZONE
    offset = _UTC_OFFSET.match(name)
    if offset:
        delta = timedelta(
            hours=int(offset.group("hours")),
            minutes=int(offset.group("minutes") or 0),
        )
        return timezone(-delta if offset.group("sign") == "-" else delta)
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        return ZoneInfo(_FALLBACK_TIMEZONE)


def now_in_app_timezone() -> datetime:
    """Return the current aware time in the application timezone."""

    return datetime.now(tz=get_app_timezone())


def now_in_app_naive_datetime() -> datetime:
    """Return the current application time without ``tzinfo`` (storage form)."""

    return now_in_app_timezone().replace(tzinfo=None)


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Attach or convert ``value`` to the application timezone.

    Naive values are read back from the database, where they were stored already
    localized, so they are tagged rather than converted.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=get_app_timezone())
    return value.astimezone(get_app_timezone())


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    """Return ``value`` localized to the application timezone, without ``tzinfo``."""

    localized = ensure_app_timezone(value)
    return localized.replace(tzinfo=None) if localized is not None else None
