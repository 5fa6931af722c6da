"""
PURPOSE: Time utilities for signal timestamps.
Parses the ISO-8601 strings webhook senders emit and builds sort keys for
timestamp-descending ordering.
"""

from datetime import datetime, timezone
from typing import Any, Optional

# Sort key for timestamps that cannot be parsed; orders them after all others
_UNPARSEABLE = datetime.min.replace(tzinfo=timezone.utc)


def get_utc_now() -> datetime:
    """
    PURPOSE: Return the current UTC time as a timezone-aware datetime object.

    Returns:
        datetime: Current UTC time with timezone info.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes; leave aware ones untouched."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    PURPOSE: Parse an ISO-8601 date-time as sent by alerting sources.

    Accepts a trailing "Z" for UTC, date-only strings and datetime objects.
    Naive values are taken as UTC. JSON numbers are epoch milliseconds, the
    form TradingView's {{time}} placeholders produce when sent unquoted.

    Args:
        value: Raw timestamp value from a payload or a stored record.

    Returns:
        Optional[datetime]: Timezone-aware datetime, or None when unparseable.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, ValueError, OSError):
            return None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def timestamp_sort_key(value: Any) -> datetime:
    """
    PURPOSE: Sort key for ordering records by signal time.

    Args:
        value: Stored timestamp (ISO string, epoch milliseconds or datetime).

    Returns:
        datetime: Parsed timestamp, or datetime.min (UTC) when unparseable.
    """
    parsed = parse_timestamp(value)
    return parsed if parsed is not None else _UNPARSEABLE
