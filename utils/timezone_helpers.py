"""
Timezone utilities for evaluating check-in instants against store-local
working hours and calendar months.
"""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo


def from_utc_to_local(utc_dt: datetime, tz: str) -> datetime:
    """
    Convert UTC datetime to local datetime in the specified timezone.

    Args:
        utc_dt: UTC datetime (should be timezone-aware)
        tz: IANA timezone string (e.g., 'Asia/Taipei', 'America/New_York')

    Returns:
        datetime: Local datetime in the specified timezone
    """
    if utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=timezone.utc)

    target_tz = ZoneInfo(tz)
    return utc_dt.astimezone(target_tz)


def local_time_on_same_day(local_dt: datetime, hhmm: str) -> datetime:
    """
    Build the datetime for an HH:MM wall-clock time on the same local day.

    Args:
        local_dt: timezone-aware local datetime giving the day
        hhmm: time of day, e.g. '09:00'

    Returns:
        datetime: local datetime at hhmm:00 on local_dt's date
    """
    hour, minute = (int(part) for part in hhmm.split(":"))
    return local_dt.replace(hour=hour, minute=minute, second=0, microsecond=0)


def year_month(dt: datetime, tz: str) -> str:
    """
    Calendar month of an instant, in the given timezone.

    Returns:
        str: 'YYYY-MM'
    """
    return from_utc_to_local(dt, tz).strftime("%Y-%m")


def previous_year_month(dt: datetime, tz: str) -> str:
    """Calendar month before the one containing dt, as 'YYYY-MM'."""
    local = from_utc_to_local(dt, tz)
    first_of_month = local.replace(day=1)
    return (first_of_month - timedelta(days=1)).strftime("%Y-%m")


def start_of_next_month(dt: datetime, tz: str) -> datetime:
    """
    Local midnight on the first day of the following month.

    Returns:
        datetime: start of next month in UTC
    """
    local = from_utc_to_local(dt, tz)
    if local.month == 12:
        year, month = local.year + 1, 1
    else:
        year, month = local.year, local.month + 1
    local_start = datetime(year, month, 1, tzinfo=ZoneInfo(tz))
    return local_start.astimezone(timezone.utc)


def validate_timezone(tz: str) -> bool:
    """
    Validate if the timezone string is a valid IANA timezone.

    Args:
        tz: IANA timezone string to validate

    Returns:
        bool: True if valid, False otherwise
    """
    try:
        ZoneInfo(tz)
        return True
    except Exception:
        return False
