"""
FastAPI dependency injection for the booking API
"""
from fastapi import Depends, Request

from ..core.availability import AdvisoryCapacityPolicy, CapacityPolicy
from ..core.optimizer import AssignmentOptimizer
from ..database.connection import DatabaseManager
from ..database.repository import BookingRepository
from ..services.booking_service import BookingService


def get_database_manager(request: Request) -> DatabaseManager:
    """Database manager created by the application lifespan"""
    db_manager = getattr(request.app.state, "db_manager", None)
    if db_manager is None:
        raise RuntimeError("Database manager not configured on application state")
    return db_manager


def get_repository(
    db_manager: DatabaseManager = Depends(get_database_manager)
) -> BookingRepository:
    return BookingRepository(db_manager.pool)


def get_capacity_policy() -> CapacityPolicy:
    """Capacity is advisory; replace this dependency to enforce it"""
    return AdvisoryCapacityPolicy()


def get_optimizer() -> AssignmentOptimizer:
    return AssignmentOptimizer()


def get_booking_service(
    repository: BookingRepository = Depends(get_repository),
    optimizer: AssignmentOptimizer = Depends(get_optimizer),
    capacity_policy: CapacityPolicy = Depends(get_capacity_policy),
) -> BookingService:
    """Request-scoped booking service"""
    return BookingService(
        repository,
        optimizer=optimizer,
        capacity_policy=capacity_policy,
    )

