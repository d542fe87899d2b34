"""UTC timestamp helpers.

Timestamps are stored as ISO 8601 strings with a ``Z`` suffix and handled in
code as timezone-aware UTC datetimes.
"""

from datetime import datetime, timezone
from typing import Optional

_STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    """Current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Return dt as an aware UTC datetime. Naive values are treated as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime for storage (``2025-11-04T12:00:00.000000Z``).

    Example:
        >>> format_timestamp(datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc))
        '2025-11-04T12:00:00.000000Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return None
    return dt_utc.strftime(_STORAGE_FORMAT)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 string into an aware UTC datetime.

    Accepts a trailing ``Z``, an explicit offset, or no zone at all (UTC is
    assumed). Returns None for empty or unparseable input.
    """
    if not value or not value.strip():
        return None

    normalized = value.strip()
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(normalized))
    except ValueError:
        return None


def format_duration_hms(seconds: Optional[float]) -> str:
    """Render a duration in seconds as ``HH:MM:SS``.

    Fractional seconds are truncated; hours are not wrapped at 24. None or
    non-positive input renders as ``00:00:00``.

    Example:
        >>> format_duration_hms(3725.9)
        '01:02:05'
    """
    if not seconds or seconds <= 0:
        return "00:00:00"

    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
