"""Availability ledger — per-villa, per-day calendar status.

A day without a row is ``available``. Rows appear when a host blocks a day or
a booking is confirmed. Every write is a single ``INSERT ... ON CONFLICT DO
UPDATE ... WHERE`` statement: the guard in the ``WHERE`` clause is evaluated
against the stored row under the row lock, so a host can never overwrite a
guest's ``booked`` night and two confirmations can never both claim the same
night. When the guard refuses, the statement returns no row and the write is
reported back as a no-op.
"""

import logging
import uuid
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import date, timedelta

from sqlalchemy import and_, exists, or_, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from villamarket.database import dialect_name
from villamarket.errors import AuthorizationError, ConflictError, ErrorReason, ValidationError
from villamarket.models.availability import AvailabilityDay, DayStatus
from villamarket.models.booking import Booking
from villamarket.services.villa_service import get_villa

logger = logging.getLogger(__name__)

# Statuses that make a night unavailable to new requests.
OCCUPIED_STATUSES = (DayStatus.BOOKED, DayStatus.BLOCKED)


@dataclass
class CalendarUpdateResult:
    """Outcome of a host calendar edit."""

    applied: list[AvailabilityDay] = field(default_factory=list)
    skipped: list[date] = field(default_factory=list)  # days refused because they are booked


def iter_nights(check_in: date, check_out: date) -> Iterator[date]:
    """Yield every night of the half-open range ``[check_in, check_out)``."""
    day = check_in
    while day < check_out:
        yield day
        day += timedelta(days=1)


def _upsert(db: AsyncSession):
    """Dialect-specific INSERT that supports ``on_conflict_do_update``."""
    if dialect_name(db) == "sqlite":
        return sqlite.insert(AvailabilityDay)
    return postgresql.insert(AvailabilityDay)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_range(
    db: AsyncSession,
    villa_id: uuid.UUID,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[AvailabilityDay]:
    """Return the stored ledger rows for a villa in ``[date_from, date_to]``, ordered by date.

    Only materialised rows are returned; missing days are ``available``.
    """
    query = select(AvailabilityDay).where(AvailabilityDay.villa_id == villa_id)
    if date_from is not None:
        query = query.where(AvailabilityDay.date >= date_from)
    if date_to is not None:
        query = query.where(AvailabilityDay.date <= date_to)
    query = query.order_by(AvailabilityDay.date.asc()).execution_options(populate_existing=True)
    result = await db.execute(query)
    return list(result.scalars().all())


async def check_availability(
    db: AsyncSession,
    villa_id: uuid.UUID,
    date_from: date,
    date_to: date,
) -> dict[date, str]:
    """Return ``{day: status}`` for every day of the inclusive window, defaulting to available."""
    if date_to < date_from:
        raise ValidationError(ErrorReason.INVALID_DATE_RANGE, "date_to must not be before date_from")

    calendar = {day: DayStatus.AVAILABLE.value for day in iter_nights(date_from, date_to + timedelta(days=1))}
    for row in await get_range(db, villa_id, date_from, date_to):
        calendar[row.date] = row.status
    return calendar


async def has_conflict(
    db: AsyncSession,
    villa_id: uuid.UUID,
    date_from: date,
    date_to: date,
) -> bool:
    """True if any night of ``[date_from, date_to)`` is booked or blocked."""
    query = select(
        exists().where(
            AvailabilityDay.villa_id == villa_id,
            AvailabilityDay.date >= date_from,
            AvailabilityDay.date < date_to,
            AvailabilityDay.status.in_(OCCUPIED_STATUSES),
        )
    )
    return bool(await db.scalar(query))


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def set_status(
    db: AsyncSession,
    villa_id: uuid.UUID,
    day: date,
    status: DayStatus | str,
    *,
    booking_id: uuid.UUID | None = None,
) -> AvailabilityDay | None:
    """Upsert the status of one night; return the stored row, or ``None`` if refused.

    Without ``booking_id`` this is a host edit: only ``available`` and
    ``blocked`` may be written and a ``booked`` night is left untouched.

    With ``booking_id`` the booking state machine is acting for that booking:
    ``booked`` claims a night that is free (or already held by the same
    booking), any other status releases a night only if that booking holds it.
    """
    try:
        status = DayStatus(status)
    except ValueError:
        raise ValidationError(ErrorReason.INVALID_STATUS, f"Unknown availability status {status!r}") from None

    if booking_id is None:
        if status == DayStatus.BOOKED:
            raise ValidationError(ErrorReason.INVALID_STATUS, "Days are only booked by confirming a booking")
        guard = AvailabilityDay.status != DayStatus.BOOKED
        holder = None
    elif status == DayStatus.BOOKED:
        guard = or_(
            AvailabilityDay.status == DayStatus.AVAILABLE,
            and_(AvailabilityDay.status == DayStatus.BOOKED, AvailabilityDay.booking_id == booking_id),
        )
        holder = booking_id
    else:
        guard = AvailabilityDay.booking_id == booking_id
        holder = None

    stmt = _upsert(db).values(villa_id=villa_id, date=day, status=status.value, booking_id=holder)
    stmt = stmt.on_conflict_do_update(
        index_elements=[AvailabilityDay.villa_id, AvailabilityDay.date],
        set_={"status": stmt.excluded.status, "booking_id": stmt.excluded.booking_id},
        where=guard,
    ).returning(AvailabilityDay)

    result = await db.scalars(stmt, execution_options={"populate_existing": True})
    return result.first()


async def claim_nights(db: AsyncSession, booking: Booking) -> None:
    """Mark every night of a booking as ``booked`` for it, or claim nothing.

    Raises ``ConflictError`` if any night is blocked or held by another
    booking; nights already claimed by this call are released first.
    """
    for day in iter_nights(booking.check_in, booking.check_out):
        row = await set_status(db, booking.villa_id, day, DayStatus.BOOKED, booking_id=booking.id)
        if row is None:
            released = await release_nights(db, booking)
            logger.warning(
                "Booking %s cannot claim %s on villa %s (released %d claimed nights)",
                booking.id,
                day,
                booking.villa_id,
                released,
            )
            raise ConflictError(
                ErrorReason.DATES_NOT_AVAILABLE,
                f"{day.isoformat()} is no longer available",
            )


async def release_nights(db: AsyncSession, booking: Booking) -> int:
    """Return a booking's own ``booked`` nights to ``available``; other rows are left alone.

    Returns the number of nights released.
    """
    result = await db.execute(
        update(AvailabilityDay)
        .where(
            AvailabilityDay.villa_id == booking.villa_id,
            AvailabilityDay.date >= booking.check_in,
            AvailabilityDay.date < booking.check_out,
            AvailabilityDay.status == DayStatus.BOOKED,
            AvailabilityDay.booking_id == booking.id,
        )
        .values(status=DayStatus.AVAILABLE.value, booking_id=None)
        .returning(AvailabilityDay.date)
        .execution_options(synchronize_session=False)
    )
    return len(result.scalars().all())


async def update_calendar(
    db: AsyncSession,
    villa_id: uuid.UUID,
    actor_id: uuid.UUID,
    entries: Iterable[tuple[date, str]],
) -> CalendarUpdateResult:
    """Apply a host's block/unblock edits; booked nights are skipped, not errors."""
    villa = await get_villa(db, villa_id)
    if villa.host_id != actor_id:
        raise AuthorizationError(ErrorReason.ACCESS_DENIED, "Only the host can edit this calendar")

    outcome = CalendarUpdateResult()
    for day, status in entries:
        row = await set_status(db, villa_id, day, status)
        if row is None:
            outcome.skipped.append(day)
        else:
            outcome.applied.append(row)

    logger.info(
        "Calendar update on villa %s: %d applied, %d skipped (booked)",
        villa_id,
        len(outcome.applied),
        len(outcome.skipped),
    )
    return outcome
