"""Date utilities for finplan.

Pure functions for month keys and formatting.
"""

import calendar
from datetime import date, datetime, timedelta

from finplan.domain.models import Month


def month_key(day: date) -> Month:
    """Truncate a date to its YYYY-MM month key."""
    return Month(day.strftime("%Y-%m"))


def parse_month(value: str) -> Month:
    """Validate and normalize a month string.

    Raises:
        ValueError: If the value is not a valid YYYY-MM month.
    """
    return Month(datetime.strptime(value, "%Y-%m").strftime("%Y-%m"))


def previous_month(month: Month) -> Month:
    """Get the month key immediately before the given one."""
    dt = datetime.strptime(month, "%Y-%m")
    return month_key(dt.date().replace(day=1) - timedelta(days=1))


def days_in_month(month: Month) -> int:
    """Number of days in the given month."""
    dt = datetime.strptime(month, "%Y-%m")
    return calendar.monthrange(dt.year, dt.month)[1]


def format_month(month: Month) -> str:
    """Human-readable month label (e.g., "January 2025")."""
    return datetime.strptime(month, "%Y-%m").strftime("%B %Y")
