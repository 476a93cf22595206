from datetime import datetime, timezone
from math import floor
from typing import Optional


def format_utc_datetime(dt: Optional[datetime]) -> Optional[str]:
    """
    Format a datetime object to an ISO 8601 string with 'Z' suffix.

    Naive datetimes (as read back from SQLite) are assumed to be UTC.

    Args:
        dt: A datetime object or None

    Returns:
        An ISO 8601 formatted string with 'Z' suffix, or None if the input is None.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    iso_string = dt.isoformat()

    if iso_string.endswith('+00:00'):
        return iso_string.replace('+00:00', 'Z')

    return iso_string


def epoch_millis(dt: datetime) -> int:
    """Milliseconds since the Unix epoch; naive input is taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def round_minutes(seconds: float) -> int:
    """Seconds to whole minutes, rounding halves up."""
    return int(floor(seconds / 60 + 0.5))
