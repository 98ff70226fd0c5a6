"""Shared helpers for rendering journal dates in the configured timezone."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..logging_config import logger

UTC = timezone.utc


def resolve_timezone(name: Optional[str], default: str = "UTC") -> ZoneInfo:
    """Resolve *name* to a ZoneInfo, falling back to default on error."""

    candidate = (name or "").strip() or default
    try:
        return ZoneInfo(candidate)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(
            "unknown timezone; defaulting to %s",
            default,
            extra={"timezone": candidate},
        )
    return ZoneInfo(default)


def utc_now() -> datetime:
    return datetime.now(UTC)


def to_local(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    """Convert *dt* into the named timezone, treating naive values as UTC."""

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(resolve_timezone(tz_name))


def local_date(dt: datetime, tz_name: Optional[str] = None) -> date:
    return to_local(dt, tz_name).date()


def today(tz_name: Optional[str] = None) -> date:
    return datetime.now(resolve_timezone(tz_name)).date()


__all__ = [
    "UTC",
    "local_date",
    "resolve_timezone",
    "to_local",
    "today",
    "utc_now",
]
