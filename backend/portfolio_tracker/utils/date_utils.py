# backend/portfolio_tracker/utils/date_utils.py
"""
Date helpers shared by the valuation builder and the price sync.

All dates in this project are plain calendar dates serialized as
YYYY-MM-DD, with no time of day or timezone.

Usage:
    from portfolio_tracker.utils.date_utils import iter_calendar_days, parse_iso_date
"""

import re
from collections.abc import Iterator
from datetime import date, datetime, timedelta

ISO_DATE_FORMAT = "%Y-%m-%d"
ISO_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def iter_calendar_days(start_date: date, end_date: date) -> Iterator[date]:
    """
    Yield every calendar day from start_date to end_date, both inclusive.

    Weekends and holidays are included. Yields nothing if start_date > end_date.

    Example:
        >>> list(iter_calendar_days(date(2021, 1, 4), date(2021, 1, 6)))
        [date(2021, 1, 4), date(2021, 1, 5), date(2021, 1, 6)]
    """
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def parse_iso_date(value: str) -> date:
    """
    Parse a strict YYYY-MM-DD string.

    Raises:
        ValueError: If value is not a valid calendar date in that format
    """
    value = value.strip()
    # strptime alone accepts unpadded fields such as "2021-1-4"
    if not ISO_DATE_PATTERN.fullmatch(value):
        raise ValueError(f"Expected YYYY-MM-DD, got {value!r}")
    return datetime.strptime(value, ISO_DATE_FORMAT).date()


def days_between(earlier: date, later: date) -> int:
    """Number of calendar days from earlier to later (negative if reversed)."""
    return (later - earlier).days
