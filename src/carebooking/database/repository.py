"""Database queries for guardians, centers and bookings."""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional
from uuid import UUID

import asyncpg

from ..core.calendar import weekday_from_sunday_zero
from ..core.lifecycle import check_booking_transition, check_day_response
from ..models.base import (
    Booking,
    BookingDay,
    BookingDayStatus,
    BookingStatus,
    Center,
    Dependent,
    Guardian,
    ScheduleException,
)
from ..utils.exceptions import BookingDayNotFound, BookingNotFound, TransactionFailure

logger = logging.getLogger(__name__)

# Errors that mean the datastore rejected or lost the transaction
DATASTORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

BOOKING_HEADER_QUERY = """
    SELECT b.id, b.user_id, b.dependent_id, b.status, b.created_at, b.updated_at,
           u.name AS user_name, u.email AS user_email,
           d.name AS dependent_name, d.birth_date AS dependent_birth_date
    FROM bookings b
    JOIN users u ON b.user_id = u.id
    JOIN dependents d ON b.dependent_id = d.id
"""

BOOKING_DAYS_QUERY = """
    SELECT bd.id, bd.booking_id, bd.date, bd.center_id, bd.status,
           bd.center_responded_at, c.name AS center_name
    FROM booking_days bd
    LEFT JOIN centers c ON bd.center_id = c.id
    WHERE bd.booking_id = ANY($1::uuid[])
    ORDER BY bd.booking_id, bd.date
"""


class BookingRepository:
    """Repository for the booking engine's relational store."""

    def __init__(self, connection_pool: asyncpg.Pool):
        self.pool = connection_pool

    # Guardians and dependents

    async def get_guardian(self, guardian_id: UUID) -> Guardian | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow("""
                SELECT id, name, email, zip_code, created_at
                FROM users
                WHERE id = $1
            """, guardian_id)

            if row:
                return Guardian(**dict(row))
            return None

    async def get_dependents(self, guardian_id: UUID) -> list[Dependent]:
        """All dependents of a guardian, earliest-created first."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch("""
                SELECT id, user_id, name, birth_date, created_at
                FROM dependents
                WHERE user_id = $1
                ORDER BY created_at, id
            """, guardian_id)

            return [self._dependent_from_row(row) for row in rows]

    async def get_dependent(self, dependent_id: UUID) -> Dependent | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow("""
                SELECT id, user_id, name, birth_date, created_at
                FROM dependents
                WHERE id = $1
            """, dependent_id)

            if row:
                return self._dependent_from_row(row)
            return None

    # Centers

    async def get_centers_in_area(
        self,
        zip_code: str,
        dates: Iterable[date] = ()
    ) -> list[Center]:
        """
        Centers in a postal area with operating days and the schedule
        exceptions for ``dates``, read from one consistent snapshot.
        """
        dates = list(dates)
        async with self.pool.acquire() as conn:
            async with conn.transaction(isolation='repeatable_read', readonly=True):
                center_rows = await conn.fetch("""
                    SELECT id, name, daily_capacity, zip_code, created_at
                    FROM centers
                    WHERE zip_code = $1
                    ORDER BY name, id
                """, zip_code)
                return await self._load_schedules(conn, center_rows, dates)

    async def list_centers(self, zip_code: str | None = None) -> list[Center]:
        """Centers with their operating days, ordered by name."""
        async with self.pool.acquire() as conn:
            async with conn.transaction(isolation='repeatable_read', readonly=True):
                if zip_code:
                    center_rows = await conn.fetch("""
                        SELECT id, name, daily_capacity, zip_code, created_at
                        FROM centers
                        WHERE zip_code = $1
                        ORDER BY name, id
                    """, zip_code)
                else:
                    center_rows = await conn.fetch("""
                        SELECT id, name, daily_capacity, zip_code, created_at
                        FROM centers
                        ORDER BY name, id
                    """)
                return await self._load_schedules(conn, center_rows, [])

    async def get_centers(self, center_ids: Iterable[UUID]) -> list[Center]:
        center_ids = list(set(center_ids))
        if not center_ids:
            return []

        async with self.pool.acquire() as conn:
            async with conn.transaction(isolation='repeatable_read', readonly=True):
                center_rows = await conn.fetch("""
                    SELECT id, name, daily_capacity, zip_code, created_at
                    FROM centers
                    WHERE id = ANY($1::uuid[])
                    ORDER BY name, id
                """, center_ids)
                return await self._load_schedules(conn, center_rows, [])

    async def _load_schedules(
        self,
        conn: asyncpg.Connection,
        center_rows: List[Mapping[str, Any]],
        dates: List[date]
    ) -> list[Center]:
        if not center_rows:
            return []

        center_ids = [row['id'] for row in center_rows]
        day_rows = await conn.fetch("""
            SELECT center_id, weekday
            FROM center_operating_days
            WHERE center_id = ANY($1::uuid[])
        """, center_ids)

        exception_rows = []
        if dates:
            exception_rows = await conn.fetch("""
                SELECT center_id, date, is_closed, capacity_override
                FROM center_schedule_exceptions
                WHERE center_id = ANY($1::uuid[]) AND date = ANY($2::date[])
            """, center_ids, dates)

        return build_centers(center_rows, day_rows, exception_rows)

    # Bookings

    async def create_booking(
        self,
        guardian_id: UUID,
        dependent_id: UUID,
        assignments: Mapping[date, Optional[UUID]]
    ) -> Booking:
        """
        Persist a DRAFT booking and one PENDING day per assigned date.

        Everything happens in one transaction: either the booking and all of
        its days become visible, or nothing does. Failures are reported as
        TransactionFailure and never retried here.
        """
        try:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    booking_row = await conn.fetchrow("""
                        INSERT INTO bookings (user_id, dependent_id, status)
                        VALUES ($1, $2, $3)
                        RETURNING id, user_id, dependent_id, status, created_at, updated_at
                    """, guardian_id, dependent_id, BookingStatus.DRAFT.value)

                    day_rows = []
                    for day, center_id in sorted(assignments.items()):
                        day_row = await conn.fetchrow("""
                            INSERT INTO booking_days (booking_id, date, center_id, status)
                            VALUES ($1, $2, $3, $4)
                            RETURNING id, booking_id, date, center_id, status, center_responded_at
                        """, booking_row['id'], day, center_id, BookingDayStatus.PENDING.value)
                        day_rows.append(day_row)
        except DATASTORE_ERRORS as e:
            logger.error(f"Booking transaction rolled back: {e}")
            raise TransactionFailure(
                "Booking could not be saved; no part of it was persisted",
                operation="create_booking",
                cause=e
            ) from e

        booking = self._booking_from_row(booking_row)
        booking.booking_days = [self._day_from_row(row) for row in day_rows]
        logger.info(f"Booking {booking.id} created with {len(day_rows)} day(s)")
        return booking

    async def get_booking(self, booking_id: UUID) -> Booking | None:
        async with self.pool.acquire() as conn:
            return await self._fetch_booking(conn, booking_id)

    async def _fetch_booking(self, conn: asyncpg.Connection, booking_id: UUID) -> Booking | None:
        """Header with names plus days ordered by date."""
        row = await conn.fetchrow(BOOKING_HEADER_QUERY + " WHERE b.id = $1", booking_id)
        if not row:
            return None
        day_rows = await conn.fetch(BOOKING_DAYS_QUERY, [booking_id])

        booking = self._booking_from_row(row)
        booking.booking_days = [self._day_from_row(day) for day in day_rows]
        return booking

    async def list_bookings(
        self,
        status: BookingStatus | None = None,
        guardian_id: UUID | None = None,
        center_id: UUID | None = None
    ) -> list[Booking]:
        """Bookings matching the filters, newest first."""
        clauses = []
        params: list[Any] = []

        if status:
            params.append(status.value)
            clauses.append(f"b.status = ${len(params)}")
        if guardian_id:
            params.append(guardian_id)
            clauses.append(f"b.user_id = ${len(params)}")
        if center_id:
            params.append(center_id)
            clauses.append(
                f"EXISTS (SELECT 1 FROM booking_days bd "
                f"WHERE bd.booking_id = b.id AND bd.center_id = ${len(params)})"
            )

        query = BOOKING_HEADER_QUERY
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY b.created_at DESC"

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, *params)
            if not rows:
                return []
            day_rows = await conn.fetch(BOOKING_DAYS_QUERY, [row['id'] for row in rows])

        days_by_booking: Dict[UUID, List[BookingDay]] = {}
        for day_row in day_rows:
            days_by_booking.setdefault(day_row['booking_id'], []).append(self._day_from_row(day_row))

        bookings = []
        for row in rows:
            booking = self._booking_from_row(row)
            booking.booking_days = days_by_booking.get(booking.id, [])
            bookings.append(booking)
        return bookings

    async def update_booking_status(self, booking_id: UUID, status: BookingStatus) -> Booking:
        """
        Apply an explicit lifecycle transition under a row lock.

        Returns the full booking, days included, as seen inside the same
        transaction.
        """
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                current = await conn.fetchval(
                    "SELECT status FROM bookings WHERE id = $1 FOR UPDATE",
                    booking_id
                )
                if current is None:
                    raise BookingNotFound(booking_id)

                check_booking_transition(BookingStatus(current), status)
                await conn.execute("""
                    UPDATE bookings SET status = $1, updated_at = now()
                    WHERE id = $2
                """, status.value, booking_id)
                booking = await self._fetch_booking(conn, booking_id)

        logger.info(f"Booking {booking_id} moved from {current} to {status.value}")
        return booking

    async def respond_to_booking_day(
        self,
        booking_day_id: UUID,
        response: BookingDayStatus
    ) -> BookingDay:
        """Record a center's ACCEPTED/DECLINED response for one day."""
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                current = await conn.fetchrow("""
                    SELECT bd.status AS day_status, b.status AS booking_status
                    FROM booking_days bd
                    JOIN bookings b ON bd.booking_id = b.id
                    WHERE bd.id = $1
                    FOR UPDATE OF bd
                """, booking_day_id)
                if current is None:
                    raise BookingDayNotFound(booking_day_id)

                check_day_response(
                    BookingDayStatus(current['day_status']),
                    response,
                    BookingStatus(current['booking_status'])
                )
                row = await conn.fetchrow("""
                    UPDATE booking_days SET status = $1, center_responded_at = now()
                    WHERE id = $2
                    RETURNING id, booking_id, date, center_id, status, center_responded_at
                """, response.value, booking_day_id)

        logger.info(f"Booking day {booking_day_id} answered {response.value}")
        return self._day_from_row(row)

    # Row mapping

    def _dependent_from_row(self, row: Mapping[str, Any]) -> Dependent:
        return Dependent(
            id=row['id'],
            guardian_id=row['user_id'],
            name=row['name'],
            birth_date=row['birth_date'],
            created_at=row['created_at']
        )

    def _booking_from_row(self, row: Mapping[str, Any]) -> Booking:
        data = dict(row)
        return Booking(
            id=data['id'],
            guardian_id=data['user_id'],
            dependent_id=data['dependent_id'],
            status=BookingStatus(data['status']),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at'),
            guardian_name=data.get('user_name'),
            guardian_email=data.get('user_email'),
            dependent_name=data.get('dependent_name'),
            dependent_birth_date=data.get('dependent_birth_date')
        )

    def _day_from_row(self, row: Mapping[str, Any]) -> BookingDay:
        data = dict(row)
        return BookingDay(
            id=data['id'],
            booking_id=data['booking_id'],
            date=data['date'],
            center_id=data.get('center_id'),
            status=BookingDayStatus(data['status']),
            center_responded_at=data.get('center_responded_at'),
            center_name=data.get('center_name')
        )


def build_centers(
    center_rows: Iterable[Mapping[str, Any]],
    day_rows: Iterable[Mapping[str, Any]],
    exception_rows: Iterable[Mapping[str, Any]]
) -> list[Center]:
    """Assemble Center models, normalizing stored weekdays to 1..7."""
    operating_days: Dict[UUID, set] = {}
    for row in day_rows:
        operating_days.setdefault(row['center_id'], set()).add(
            weekday_from_sunday_zero(row['weekday'])
        )

    exceptions: Dict[UUID, Dict[date, ScheduleException]] = {}
    for row in exception_rows:
        exceptions.setdefault(row['center_id'], {})[row['date']] = ScheduleException(
            is_closed=row['is_closed'],
            capacity_override=row['capacity_override']
        )

    return [
        Center(
            id=row['id'],
            name=row['name'],
            daily_capacity=row['daily_capacity'],
            zip_code=row['zip_code'],
            created_at=row.get('created_at'),
            operating_days=operating_days.get(row['id'], set()),
            exceptions=exceptions.get(row['id'], {})
        )
        for row in center_rows
    ]
