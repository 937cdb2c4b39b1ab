"""
Availability oracle: which centers are open on which dates.

A center is available on date d when weekday(d) is in its operating pattern
and no schedule exception closes it on d. The oracle is a pure function of
its inputs; it holds no state between calls.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol, Sequence
from uuid import UUID

from ..models.base import Center
from .calendar import iso_weekday

logger = logging.getLogger(__name__)


class CapacityPolicy(Protocol):
    """
    Extension point for capacity enforcement.

    Called for every (center, date) the weekly pattern and exceptions leave
    open. Returning False removes that date from the center's availability.
    """

    def admits(self, center: Center, day: date, capacity_override: Optional[int]) -> bool:
        ...


class AdvisoryCapacityPolicy:
    """
    Default policy: capacity is advisory and never gates availability.

    Neither ``Center.daily_capacity`` nor an exception's ``capacity_override``
    is checked against booked-day counts. Whether that is intended or a gap
    is still open; plug in an enforcing policy rather than editing the oracle.
    """

    def admits(self, center: Center, day: date, capacity_override: Optional[int]) -> bool:
        if capacity_override is not None:
            logger.debug(
                f"Capacity override {capacity_override} for center {center.id} "
                f"on {day.isoformat()} is recorded but not enforced"
            )
        return True


def is_center_available(center: Center, day: date) -> bool:
    """Weekly pattern combined with a closing exception for that exact date."""
    if iso_weekday(day) not in center.operating_days:
        return False
    exception = center.exception_for(day)
    if exception is not None and exception.is_closed:
        return False
    return True


class AvailabilityMatrix:
    """available[center_id][date] -> bool for a fixed set of centers and dates."""

    def __init__(
        self,
        dates: Sequence[date],
        available: Dict[UUID, Dict[date, bool]],
        capacity_overrides: Optional[Dict[UUID, Dict[date, int]]] = None
    ):
        self.dates = list(dates)
        self._available = available
        self.capacity_overrides = capacity_overrides or {}

    @property
    def center_ids(self) -> List[UUID]:
        return list(self._available)

    def is_available(self, center_id: UUID, day: date) -> bool:
        return self._available.get(center_id, {}).get(day, False)

    def covered_dates(self, center_id: UUID, dates: Optional[Iterable[date]] = None) -> List[date]:
        """Dates from ``dates`` (default: all) on which the center is open, ascending."""
        candidates = self.dates if dates is None else dates
        return sorted(d for d in candidates if self.is_available(center_id, d))

    def covers_all(self, center_id: UUID, dates: Optional[Iterable[date]] = None) -> bool:
        candidates = self.dates if dates is None else list(dates)
        return all(self.is_available(center_id, d) for d in candidates)

    def as_dict(self) -> Dict[UUID, Dict[date, bool]]:
        return {center_id: dict(row) for center_id, row in self._available.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AvailabilityMatrix):
            return NotImplemented
        return self.dates == other.dates and self.as_dict() == other.as_dict()

    def __repr__(self) -> str:
        return f"AvailabilityMatrix(centers={len(self._available)}, dates={len(self.dates)})"


def compute_availability(
    centers: Iterable[Center],
    dates: Sequence[date],
    capacity_policy: Optional[CapacityPolicy] = None
) -> AvailabilityMatrix:
    """
    Build the availability matrix for every (center, date) pair.

    Args:
        centers: Candidate centers with operating days and exceptions loaded
        dates: Requested dates
        capacity_policy: Capacity extension point, advisory by default

    Returns:
        AvailabilityMatrix over the given centers and dates
    """
    policy = capacity_policy or AdvisoryCapacityPolicy()
    available: Dict[UUID, Dict[date, bool]] = {}
    overrides: Dict[UUID, Dict[date, int]] = {}

    for center in centers:
        row = {}
        for day in dates:
            exception = center.exception_for(day)
            override = exception.capacity_override if exception else None
            if override is not None:
                overrides.setdefault(center.id, {})[day] = override

            open_day = is_center_available(center, day)
            if open_day:
                open_day = policy.admits(center, day, override)
            row[day] = open_day
        available[center.id] = row

    return AvailabilityMatrix(dates, available, overrides)
