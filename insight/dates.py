"""Lenient timestamp parsing for artifact date fields."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

_FALLBACK_FORMATS = (
    "%Y%m%dT%H%M%SZ",
    "%Y/%m/%d",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
)


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_datetime(value: object) -> datetime | None:
    """Parse an ISO8601 / RFC 2822 / common human date into an aware UTC datetime.

    Returns None for anything unparseable; never raises.
    """
    if isinstance(value, datetime):
        try:
            return _as_utc(value)
        except OverflowError:
            return None
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return _as_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except (ValueError, OverflowError):
        pass

    for fmt in _FALLBACK_FORMATS:
        try:
            return _as_utc(datetime.strptime(text, fmt))
        except (ValueError, OverflowError):
            continue

    try:
        return _as_utc(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError, OverflowError):
        return None


def to_iso(dt: datetime) -> str:
    """UTC ISO8601 with millisecond precision and a ``Z`` suffix."""
    return _as_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")
