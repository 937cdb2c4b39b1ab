"""
Calendar resolution for booking requests.

Weekdays are always expressed as 1 (Monday) .. 7 (Sunday) inside the engine.
"""

import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional

from ..utils.exceptions import InvalidDate

logger = logging.getLogger(__name__)

MONDAY = 1
SUNDAY = 7

WEEKDAY_NAMES = {
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
    7: "Sunday",
}


def iso_weekday(day: date) -> int:
    """Weekday index of ``day`` in the 1 (Monday) .. 7 (Sunday) convention."""
    return day.isoweekday()


def weekday_from_sunday_zero(value: int) -> int:
    """
    Convert a stored weekday into the 1..7 convention.

    Stored values may use the native Sunday=0 numbering (0..6). Sunday
    becomes 7; Monday..Saturday keep their numbers. A value of 7 is already
    normalized and is returned unchanged.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Weekday must be an integer, got {value!r}")
    if not 0 <= value <= 7:
        raise ValueError(f"Weekday out of range: {value}")
    return SUNDAY if value == 0 else value


def parse_date(literal: str) -> date:
    """Parse an ISO ``YYYY-MM-DD`` literal, raising InvalidDate on failure."""
    if isinstance(literal, date):
        return literal
    if not isinstance(literal, str):
        raise InvalidDate(literal)
    try:
        return date.fromisoformat(literal.strip())
    except ValueError:
        raise InvalidDate(literal) from None


def resolve_dates(
    request_date: Optional[str] = None,
    request_dates: Optional[Iterable[str]] = None,
    today: Optional[date] = None
) -> List[date]:
    """
    Normalize the requested dates of a booking request.

    A non-empty ``request_dates`` wins over ``request_date``. With neither,
    the request is for tomorrow relative to ``today``. Every literal is
    parsed before anything is returned, so one bad literal fails the whole
    request.

    Returns:
        Ascending list of distinct dates
    """
    literals = list(request_dates or [])
    if not literals and request_date:
        literals = [request_date]

    if not literals:
        base = today or date.today()
        tomorrow = base + timedelta(days=1)
        logger.debug(f"No dates requested, defaulting to {tomorrow.isoformat()}")
        return [tomorrow]

    parsed = [parse_date(literal) for literal in literals]
    return sorted(set(parsed))


def format_dates(dates: Iterable[date]) -> List[str]:
    return [d.isoformat() for d in dates]
