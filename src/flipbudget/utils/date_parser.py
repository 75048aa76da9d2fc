"""Date parsing utilities for project milestones and payment dates."""

import re
from datetime import date, datetime, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

# "in 3 months", "2 weeks ago"
_OFFSET_PATTERN = re.compile(r"^(?:in (\d+) (day|week|month|year)s?|(\d+) (day|week|month|year)s? ago)$")

_PERIOD_SHIFT = {"last": -1, "this": 0, "next": 1}


def _unit_delta(unit: str, count: int) -> relativedelta:
    return relativedelta(**{f"{unit}s": count})


def _period_start(period: str, shift: int, today: date) -> Optional[date]:
    """First day of the week (Monday), month or year ``shift`` periods away."""
    if period == "week":
        return today - timedelta(days=today.weekday()) + timedelta(weeks=shift)
    if period == "month":
        return today.replace(day=1) + relativedelta(months=shift)
    if period == "year":
        return today.replace(month=1, day=1) + relativedelta(years=shift)
    return None


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports:
    - Absolute dates: "2024-01-15", "January 15, 2024", "15/01/2024"
    - "today", "yesterday", "tomorrow"
    - Period starts: "last month", "this week", "next year"
    - Offsets for milestone planning: "in 3 months", "2 weeks ago"

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    if text == "today":
        return today
    if text == "yesterday":
        return today - timedelta(days=1)
    if text == "tomorrow":
        return today + timedelta(days=1)

    words = text.split()
    if len(words) == 2 and words[0] in _PERIOD_SHIFT:
        start = _period_start(words[1], _PERIOD_SHIFT[words[0]], today)
        if start is not None:
            return start

    match = _OFFSET_PATTERN.match(text)
    if match:
        if match.group(1):
            return today + _unit_delta(match.group(2), int(match.group(1)))
        return today - _unit_delta(match.group(4), int(match.group(3)))

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def format_iso_date(value: Optional[date]) -> Optional[str]:
    """Format a date as YYYY-MM-DD, passing None through."""
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()
