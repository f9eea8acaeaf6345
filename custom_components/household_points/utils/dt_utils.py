# File: utils/dt_utils.py
"""Date and time utilities for Household Points.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Ledger dates are local calendar strings ("YYYY-MM-DD"). Streaks and daily
totals compare those strings, never UTC timestamps, so a completion at 23:30
local time always lands on the member's own day.

Functions:
    - dt_today_local: Get today's date in local timezone
    - dt_today_iso: Get today's date as ISO string
    - dt_now_local: Get current datetime in local timezone
    - dt_now_iso: Get current datetime as ISO string
    - dt_parse_date: Parse date strings
    - dt_shift_days: Step an ISO date forward or back by whole days
    - dt_week_start: Monday of the week containing a date
    - dt_month_start: First day of the month containing a date
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil.relativedelta import MO, relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# Default timezone - replaced during integration setup
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Today's date in the specified timezone.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_today_iso(tz: ZoneInfo | None = None) -> str:
    """Return today's date in local timezone as ISO string (YYYY-MM-DD).

    Example:
        "2025-04-07"
    """
    return dt_today_local(tz).isoformat()


def dt_now_local(tz: ZoneInfo | None = None) -> datetime:
    """Return the current datetime in local timezone (timezone-aware)."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info)


def dt_now_iso(tz: ZoneInfo | None = None) -> str:
    """Return the current local datetime as an ISO 8601 string.

    Example:
        "2025-04-07T14:30:00-05:00"
    """
    return dt_now_local(tz).isoformat()


# ==============================================================================
# Date Parsing & Arithmetic
# ==============================================================================


def dt_parse_date(date_str: str | date | None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts formats:
    - "2025-04-07" (ISO format)
    - "2025-04-07T08:15:00" (ISO datetime; the date part is kept)
    - "04/07/2025" (US format)
    - "2025/04/07"

    Args:
        date_str: Date string (or date) to parse, or None

    Returns:
        datetime.date or None if parsing fails.
    """
    if isinstance(date_str, datetime):
        return date_str.date()
    if isinstance(date_str, date):
        return date_str
    if not date_str or not isinstance(date_str, str):
        return None

    # Try ISO format first (most common)
    try:
        return date.fromisoformat(date_str[:10])
    except ValueError:
        pass

    for fmt in ("%m/%d/%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    _LOGGER.debug("DEBUG: Unparseable date string '%s'", date_str)
    return None


def dt_shift_days(day: str | date, days: int) -> str:
    """Return the ISO date `days` away from `day` (negative steps back).

    Raises:
        ValueError: If `day` is not a parseable date.
    """
    parsed = dt_parse_date(day)
    if parsed is None:
        raise ValueError(f"Invalid date: {day!r}")
    return (parsed + timedelta(days=days)).isoformat()


def dt_week_start(day: str | date) -> date:
    """Return the Monday starting the week that contains `day`."""
    parsed = dt_parse_date(day)
    if parsed is None:
        raise ValueError(f"Invalid date: {day!r}")
    return parsed + relativedelta(weekday=MO(-1))


def dt_month_start(day: str | date) -> date:
    """Return the first day of the month that contains `day`."""
    parsed = dt_parse_date(day)
    if parsed is None:
        raise ValueError(f"Invalid date: {day!r}")
    return parsed + relativedelta(day=1)


def dt_month_end(day: str | date) -> date:
    """Return the last day of the month that contains `day`."""
    parsed = dt_parse_date(day)
    if parsed is None:
        raise ValueError(f"Invalid date: {day!r}")
    # day=31 clamps to the month's real length
    return parsed + relativedelta(day=31)
