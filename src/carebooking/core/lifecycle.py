"""
Booking lifecycle.

Aggregate booking status moves only through explicit calls:

    DRAFT -> PENDING -> PARTIAL | CONFIRMED
    any non-terminal state -> CANCELLED

Booking days go PENDING -> ACCEPTED | DECLINED on a center's response and
stay there. The aggregate status is never derived from day statuses
automatically; ``suggest_booking_status`` only reports what it would be.
"""

from typing import Dict, FrozenSet, Iterable

from ..config import BOOKING_STATUSES, CENTER_RESPONSE_STATUSES
from ..models.base import BookingDayStatus, BookingStatus
from ..utils.exceptions import InvalidStatus, InvalidStatusTransition

BOOKING_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.DRAFT: frozenset({BookingStatus.PENDING, BookingStatus.CANCELLED}),
    BookingStatus.PENDING: frozenset({
        BookingStatus.PARTIAL,
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.PARTIAL: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

TERMINAL_BOOKING_STATUSES = frozenset(
    status for status, targets in BOOKING_TRANSITIONS.items() if not targets
)


def parse_booking_status(value: str) -> BookingStatus:
    if value not in BOOKING_STATUSES:
        raise InvalidStatus(value, BOOKING_STATUSES)
    return BookingStatus(value)


def parse_day_response(value: str) -> BookingDayStatus:
    """Only ACCEPTED or DECLINED may be sent by a center."""
    if value not in CENTER_RESPONSE_STATUSES:
        raise InvalidStatus(value, CENTER_RESPONSE_STATUSES)
    return BookingDayStatus(value)


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return current == target or target in BOOKING_TRANSITIONS[current]


def check_booking_transition(current: BookingStatus, target: BookingStatus) -> None:
    """Raise InvalidStatusTransition unless ``current -> target`` is allowed."""
    if not can_transition(current, target):
        raise InvalidStatusTransition("booking", current.value, target.value)


def check_day_response(
    current: BookingDayStatus,
    response: BookingDayStatus,
    booking_status: BookingStatus
) -> None:
    if booking_status == BookingStatus.CANCELLED:
        raise InvalidStatusTransition("booking day of a cancelled booking", current.value, response.value)
    if current != BookingDayStatus.PENDING:
        raise InvalidStatusTransition("booking day", current.value, response.value)


def suggest_booking_status(
    current: BookingStatus,
    day_statuses: Iterable[BookingDayStatus]
) -> BookingStatus:
    """
    Status the day responses imply, for callers that want to roll it up.

    Pending days leave the booking where it is. Otherwise all accepted means
    CONFIRMED, all declined means CANCELLED and a mix means PARTIAL.
    """
    statuses = list(day_statuses)
    if current == BookingStatus.CANCELLED or not statuses:
        return current
    if BookingDayStatus.PENDING in statuses:
        return current
    if all(status == BookingDayStatus.ACCEPTED for status in statuses):
        return BookingStatus.CONFIRMED
    if all(status == BookingDayStatus.DECLINED for status in statuses):
        return BookingStatus.CANCELLED
    return BookingStatus.PARTIAL
