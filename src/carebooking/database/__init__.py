"""Database connection and repositories."""

from .connection import DatabaseManager
from .repository import BookingRepository, build_centers

__all__ = [
    "DatabaseManager",
    "BookingRepository",
    "build_centers"
]
