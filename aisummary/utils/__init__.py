from .timezones import (
    UTC,
    local_date,
    resolve_timezone,
    to_local,
    today,
    utc_now,
)

__all__ = [
    "UTC",
    "local_date",
    "resolve_timezone",
    "to_local",
    "today",
    "utc_now",
]
