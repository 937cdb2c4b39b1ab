"""
Care Booking Engine

Resolves which childcare centers can serve each requested date and assigns
dates to centers automatically, then commits the resulting booking atomically.

Features:
- Calendar resolution with a fixed Monday=1 .. Sunday=7 weekday convention
- Availability from weekly operating patterns and date-specific exceptions
- Greedy multi-center assignment preferring the fewest distinct centers
- All-or-nothing booking commit on PostgreSQL (asyncpg)
- Booking and booking-day lifecycle with a suggested status rollup

Example:
    Direct usage of the assignment core:

    ```python
    from carebooking.core import AssignmentOptimizer, compute_availability

    matrix = compute_availability(centers, dates)
    result = AssignmentOptimizer().assign(matrix, centers, dates)
    ```
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
