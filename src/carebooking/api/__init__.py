"""
API module for the booking service

Route handlers, middleware and dependency injection for the HTTP boundary.
"""

from .dependencies import (
    get_booking_service,
    get_capacity_policy,
    get_database_manager,
    get_optimizer,
    get_repository,
)

__all__ = [
    "get_booking_service",
    "get_capacity_policy",
    "get_database_manager",
    "get_optimizer",
    "get_repository"
]
