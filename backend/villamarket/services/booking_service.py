"""Booking state machine.

::

    pending ──► confirmed ──► completed
       │            │
       └──► cancelled ◄┘

Pending requests do not reserve the calendar; several may compete for the
same nights. Confirmation claims the nights in the availability ledger with
guarded upserts, so only the first confirmation for an overlapping range can
succeed; confirmations on one villa also queue on a row lock of the villa,
so they never deadlock on each other. The remaining overlapping pending requests are then declined
automatically (``settings.auto_reject_overlapping_pending``). Cancelling a
confirmed booking releases exactly the nights that booking holds.

``confirmed → completed`` is time driven: :func:`complete_finished_bookings`
is run on a schedule (``scripts/run_maintenance.py``), and a host may also
complete a stay explicitly once its check-out date has passed.
"""

import logging
import uuid
from datetime import date

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from villamarket.config import settings
from villamarket.errors import (
    AuthorizationError,
    ConflictError,
    ErrorReason,
    NotFoundError,
    ValidationError,
)
from villamarket.models.booking import Booking, BookingStatus
from villamarket.models.villa import Villa, VillaStatus
from villamarket.services import availability
from villamarket.services.pricing import calculate_price, count_nights

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}

AUTO_DECLINE_REASON = "dates_unavailable"
AUTO_DECLINE_MESSAGE = "The host accepted another request for these dates."


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _lock_booking(db: AsyncSession, booking_id: uuid.UUID) -> Booking:
    """Load a booking with a row lock held until the transaction ends."""
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFoundError(ErrorReason.BOOKING_NOT_FOUND, "Booking not found")
    return booking


async def _lock_villa_calendar(db: AsyncSession, booking_id: uuid.UUID) -> None:
    """Lock the villa row of a booking so confirmations on that villa run one at a time.

    Taken before the booking row: every confirmation locks villa, then its own
    booking, then the overlapping pending bookings it declines.
    """
    villa_id = await db.scalar(select(Booking.villa_id).where(Booking.id == booking_id))
    if villa_id is None:
        raise NotFoundError(ErrorReason.BOOKING_NOT_FOUND, "Booking not found")
    await db.execute(select(Villa.id).where(Villa.id == villa_id).with_for_update())


async def _decline_overlapping_pending(db: AsyncSession, confirmed: Booking) -> list[Booking]:
    """Cancel every other pending request on the same villa that overlaps ``confirmed``."""
    result = await db.execute(
        select(Booking)
        .where(
            Booking.villa_id == confirmed.villa_id,
            Booking.id != confirmed.id,
            Booking.status == BookingStatus.PENDING,
            Booking.check_in < confirmed.check_out,
            Booking.check_out > confirmed.check_in,
        )
        .with_for_update()
    )
    declined = list(result.scalars().all())
    for other in declined:
        other.status = BookingStatus.CANCELLED
        other.cancellation_reason = AUTO_DECLINE_REASON
        other.cancellation_message = AUTO_DECLINE_MESSAGE
        logger.info("Booking %s auto-declined: overlaps confirmed booking %s", other.id, confirmed.id)
    return declined


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def create_booking(
    db: AsyncSession,
    villa_id: uuid.UUID,
    guest_id: uuid.UUID,
    check_in: date,
    check_out: date,
    num_guests: int,
    guest_message: str,
) -> Booking:
    """Persist a ``pending`` booking request after checking the villa's rules.

    Checks run cheapest first: the date range, the villa being listed,
    self-booking, minimum stay and capacity are all settled before the
    availability ledger is queried.
    """
    if check_out <= check_in:
        raise ValidationError(ErrorReason.INVALID_DATE_RANGE, "check_out must be after check_in")
    if num_guests < 1:
        raise ValidationError(ErrorReason.GUEST_LIMIT_EXCEEDED, "At least one guest is required")

    villa = await db.scalar(select(Villa).where(Villa.id == villa_id, Villa.status == VillaStatus.LISTED))
    if villa is None:
        raise NotFoundError(ErrorReason.VILLA_NOT_AVAILABLE, "Villa not found or not available")

    if villa.host_id == guest_id:
        raise ConflictError(ErrorReason.SELF_BOOKING_NOT_ALLOWED, "Cannot book your own property")

    nights = count_nights(check_in, check_out)
    if nights < villa.minimum_nights:
        raise ValidationError(
            ErrorReason.MINIMUM_NIGHTS_NOT_MET,
            f"Minimum {villa.minimum_nights} nights required",
        )
    if num_guests > villa.num_guests:
        raise ValidationError(
            ErrorReason.GUEST_LIMIT_EXCEEDED,
            f"This villa hosts at most {villa.num_guests} guests",
        )

    if await availability.has_conflict(db, villa.id, check_in, check_out):
        raise ConflictError(ErrorReason.DATES_NOT_AVAILABLE, "Selected dates are not available")

    booking = Booking(
        villa_id=villa.id,
        guest_id=guest_id,
        host_id=villa.host_id,
        check_in=check_in,
        check_out=check_out,
        num_guests=num_guests,
        total_price=calculate_price(villa.price_per_night, villa.cleaning_fee, nights),
        status=BookingStatus.PENDING,
        guest_message=guest_message,
    )
    db.add(booking)
    await db.flush()
    await db.refresh(booking)

    logger.info(
        "Booking %s requested: villa %s, %s → %s (%d nights, %s)",
        booking.id,
        villa.id,
        check_in,
        check_out,
        nights,
        booking.total_price,
    )
    return booking


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


async def transition_booking(
    db: AsyncSession,
    booking_id: uuid.UUID,
    actor_id: uuid.UUID,
    new_status: BookingStatus | str,
    *,
    cancellation_reason: str | None = None,
    cancellation_message: str | None = None,
    check_in_instructions: str | None = None,
    today: date | None = None,
) -> Booking:
    """Move a booking to ``new_status`` on behalf of ``actor_id``.

    - ``confirmed``: host only; claims every night in the ledger.
    - ``cancelled``: guest or host, from pending or confirmed; needs a
      cancellation reason; a confirmed booking releases its nights.
    - ``completed``: host only, from confirmed, once check-out has passed.
    """
    try:
        target = BookingStatus(new_status)
    except ValueError:
        raise ValidationError(ErrorReason.INVALID_STATUS, f"Unknown booking status {new_status!r}") from None

    if target == BookingStatus.CONFIRMED:
        await _lock_villa_calendar(db, booking_id)
    booking = await _lock_booking(db, booking_id)
    party = booking.party_of(actor_id)
    if party is None:
        raise AuthorizationError(ErrorReason.ACCESS_DENIED, "Access denied")

    current = BookingStatus(booking.status)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise ConflictError(
            ErrorReason.INVALID_STATUS_TRANSITION,
            f"Cannot move a {current} booking to {target}",
        )

    if check_in_instructions is not None and party != "host":
        raise AuthorizationError(ErrorReason.HOST_ONLY_ACTION, "Only hosts can set check-in instructions")

    declined: list[Booking] = []
    if target == BookingStatus.CONFIRMED:
        if party != "host":
            raise AuthorizationError(ErrorReason.HOST_ONLY_ACTION, "Only hosts can confirm bookings")
        await availability.claim_nights(db, booking)
        if settings.auto_reject_overlapping_pending:
            declined = await _decline_overlapping_pending(db, booking)

    elif target == BookingStatus.CANCELLED:
        if not (cancellation_reason and cancellation_reason.strip()):
            raise ValidationError(ErrorReason.CANCELLATION_REASON_REQUIRED, "A cancellation reason is required")
        if current == BookingStatus.CONFIRMED:
            released = await availability.release_nights(db, booking)
            logger.info("Booking %s released %d nights on villa %s", booking.id, released, booking.villa_id)
        booking.cancellation_reason = cancellation_reason.strip()
        booking.cancellation_message = cancellation_message

    elif target == BookingStatus.COMPLETED:
        if party != "host":
            raise AuthorizationError(ErrorReason.HOST_ONLY_ACTION, "Only hosts can complete bookings")
        today = today or date.today()
        if booking.check_out > today:
            raise ValidationError(ErrorReason.STAY_NOT_FINISHED, "The stay has not ended yet")

    if check_in_instructions is not None:
        booking.check_in_instructions = check_in_instructions
    booking.status = target

    await db.flush()
    await db.refresh(booking)
    for other in declined:
        await db.refresh(other)

    logger.info("Booking %s: %s → %s by %s %s", booking.id, current, target, party, actor_id)
    return booking


async def set_check_in_instructions(
    db: AsyncSession,
    booking_id: uuid.UUID,
    actor_id: uuid.UUID,
    instructions: str | None,
) -> Booking:
    """Host-only edit of check-in instructions on an open booking, no status change."""
    booking = await _lock_booking(db, booking_id)
    party = booking.party_of(actor_id)
    if party is None:
        raise AuthorizationError(ErrorReason.ACCESS_DENIED, "Access denied")
    if party != "host":
        raise AuthorizationError(ErrorReason.HOST_ONLY_ACTION, "Only hosts can set check-in instructions")
    if booking.status not in (BookingStatus.PENDING, BookingStatus.CONFIRMED):
        raise ConflictError(ErrorReason.INVALID_STATUS_TRANSITION, f"Booking is already {booking.status}")

    booking.check_in_instructions = instructions
    await db.flush()
    await db.refresh(booking)
    return booking


async def complete_finished_bookings(db: AsyncSession, today: date | None = None) -> list[Booking]:
    """Scheduled sweep: complete every confirmed booking whose check-out is today or earlier."""
    today = today or date.today()
    result = await db.execute(
        select(Booking)
        .where(Booking.status == BookingStatus.CONFIRMED, Booking.check_out <= today)
        .with_for_update()
    )
    finished = list(result.scalars().all())
    for booking in finished:
        booking.status = BookingStatus.COMPLETED
    await db.flush()

    if finished:
        logger.info("Completed %d bookings with check-out on or before %s", len(finished), today)
    return finished


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_booking_for_party(db: AsyncSession, booking_id: uuid.UUID, user_id: uuid.UUID) -> Booking:
    """Fetch a booking visible to ``user_id`` (its guest or host).

    Non-parties get ``NotFoundError`` so booking ids do not leak.
    """
    booking = await db.get(Booking, booking_id)
    if booking is None or booking.party_of(user_id) is None:
        raise NotFoundError(ErrorReason.BOOKING_NOT_FOUND, "Booking not found")
    return booking


async def list_bookings_for_user(
    db: AsyncSession,
    user_id: uuid.UUID,
    status: str | None = None,
    role: str | None = None,
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[Booking], int]:
    """Bookings where the user is the guest, the host, or either (``role=None``)."""
    if role == "guest":
        filters = [Booking.guest_id == user_id]
    elif role == "host":
        filters = [Booking.host_id == user_id]
    else:
        filters = [or_(Booking.guest_id == user_id, Booking.host_id == user_id)]
    if status is not None:
        filters.append(Booking.status == status)

    total = await db.scalar(select(func.count()).select_from(Booking).where(*filters))
    result = await db.execute(
        select(Booking).where(*filters).order_by(Booking.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total or 0
