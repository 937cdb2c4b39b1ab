"""Assignment of requested dates to care centers."""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from ..models.base import Center
from ..models.results import AssignmentResult, AssignmentStrategy
from .availability import AvailabilityMatrix

logger = logging.getLogger(__name__)


def stable_center_order(centers: Iterable[Center]) -> List[Center]:
    """Deterministic candidate order: by name, then id for duplicate names."""
    return sorted(centers, key=lambda center: (center.name, str(center.id)))


class AssignmentOptimizer:
    """
    Maps every requested date to one center, using as few centers as it can.

    Priority order:
      1. the preferred center, when it is open on every requested date
      2. the first center in stable order open on every requested date
      3. greedy set cover over the dates still unassigned

    This is a greedy approximation to minimum set cover, not optimal in all
    cases. That is an accepted design trade-off for predictable, explainable
    assignment rather than exhaustive search. Replacing it with an exact
    solver changes which centers are chosen for ambiguous inputs.
    """

    def assign(
        self,
        matrix: AvailabilityMatrix,
        centers: Sequence[Center],
        dates: Sequence[date],
        preferred_center_id: Optional[UUID] = None
    ) -> AssignmentResult:
        """
        Compute the date -> center mapping.

        Args:
            matrix: Availability of every candidate on every requested date
            centers: Candidate centers
            dates: Requested dates
            preferred_center_id: Center resolved from a user-supplied name

        Returns:
            AssignmentResult; ``unassignable_dates`` is non-empty on failure
        """
        requested = sorted(set(dates))
        ordered = stable_center_order(centers)

        if not requested:
            return AssignmentResult(strategy=AssignmentStrategy.SINGLE_CENTER)

        if preferred_center_id is not None:
            if matrix.covers_all(preferred_center_id, requested):
                logger.debug(f"Preferred center {preferred_center_id} covers all {len(requested)} dates")
                return self._single(preferred_center_id, requested, AssignmentStrategy.PREFERRED)
            logger.debug(f"Preferred center {preferred_center_id} does not cover every date")

        for center in ordered:
            if matrix.covers_all(center.id, requested):
                logger.debug(f"Center {center.name} covers all {len(requested)} dates")
                return self._single(center.id, requested, AssignmentStrategy.SINGLE_CENTER)

        return self._greedy_cover(matrix, ordered, requested)

    def _single(
        self,
        center_id: UUID,
        dates: List[date],
        strategy: AssignmentStrategy
    ) -> AssignmentResult:
        return AssignmentResult(
            assignments={day: center_id for day in dates},
            strategy=strategy
        )

    def _greedy_cover(
        self,
        matrix: AvailabilityMatrix,
        ordered: List[Center],
        dates: List[date]
    ) -> AssignmentResult:
        remaining = set(dates)
        assignments: Dict[date, UUID] = {}

        while remaining:
            best_center = None
            best_dates: List[date] = []
            for center in ordered:
                covered = matrix.covered_dates(center.id, remaining)
                # Strictly greater keeps the earliest center on ties
                if len(covered) > len(best_dates):
                    best_center, best_dates = center, covered

            if best_center is None:
                break

            logger.debug(
                f"Greedy step: {best_center.name} covers {len(best_dates)} "
                f"of {len(remaining)} remaining dates"
            )
            for day in best_dates:
                assignments[day] = best_center.id
            remaining.difference_update(best_dates)

        unassignable = sorted(remaining)
        if unassignable:
            logger.info(f"{len(unassignable)} date(s) cannot be served by any candidate center")

        return AssignmentResult(
            assignments=dict(sorted(assignments.items())),
            unassignable_dates=unassignable,
            strategy=AssignmentStrategy.GREEDY
        )
