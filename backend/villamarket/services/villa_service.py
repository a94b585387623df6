"""Villa listing service — host-owned CRUD, amenities, and review summaries."""

import logging
import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from villamarket.errors import AuthorizationError, ConflictError, ErrorReason, NotFoundError
from villamarket.models.booking import Booking
from villamarket.models.review import Review
from villamarket.models.user import User
from villamarket.models.villa import Amenity, Villa, VillaStatus

logger = logging.getLogger(__name__)


async def get_villa(db: AsyncSession, villa_id: uuid.UUID) -> Villa:
    """Fetch a villa by id or raise ``NotFoundError``."""
    villa = await db.get(Villa, villa_id)
    if villa is None:
        raise NotFoundError(ErrorReason.VILLA_NOT_FOUND, "Villa not found")
    return villa


async def get_visible_villa(db: AsyncSession, villa_id: uuid.UUID, viewer_id: uuid.UUID | None) -> Villa:
    """Fetch a villa for a public read.

    Drafts and unlisted villas exist only for their host; anyone else gets
    ``NotFoundError``.
    """
    villa = await get_villa(db, villa_id)
    if villa.status != VillaStatus.LISTED and villa.host_id != viewer_id:
        raise NotFoundError(ErrorReason.VILLA_NOT_FOUND, "Villa not found")
    return villa


async def get_owned_villa(db: AsyncSession, villa_id: uuid.UUID, host_id: uuid.UUID) -> Villa:
    """Fetch a villa and verify ``host_id`` owns it."""
    villa = await get_villa(db, villa_id)
    if villa.host_id != host_id:
        raise AuthorizationError(ErrorReason.ACCESS_DENIED, "Only the host can manage this villa")
    return villa


async def create_villa(db: AsyncSession, host: User, data: dict[str, Any]) -> Villa:
    """Create a listing in ``draft`` status owned by ``host``."""
    if not host.is_host:
        raise AuthorizationError(ErrorReason.HOST_ONLY_ACTION, "Only host accounts can list villas")
    villa = Villa(host_id=host.id, status=VillaStatus.DRAFT, **data)
    db.add(villa)
    await db.flush()
    await db.refresh(villa)
    logger.info("Villa %s created by host %s", villa.id, host.id)
    return villa


async def update_villa(
    db: AsyncSession,
    villa_id: uuid.UUID,
    host_id: uuid.UUID,
    changes: dict[str, Any],
) -> Villa:
    """Apply a partial update.

    ``changes`` only holds fields the caller actually sent: a missing key is
    left alone, an explicit ``None`` clears a nullable column.
    """
    villa = await get_owned_villa(db, villa_id, host_id)
    for field_name, value in changes.items():
        setattr(villa, field_name, value)

    db.add(villa)
    await db.flush()
    await db.refresh(villa)
    if "status" in changes:
        logger.info("Villa %s status -> %s", villa.id, villa.status)
    return villa


async def delete_villa(db: AsyncSession, villa_id: uuid.UUID, host_id: uuid.UUID) -> None:
    """Delete a villa that has never been booked. Ledger rows and amenity links cascade.

    Villas with booking history keep it; hosts unlist them instead.
    """
    villa = await get_owned_villa(db, villa_id, host_id)

    booking_count = await db.scalar(
        select(func.count()).select_from(Booking).where(Booking.villa_id == villa.id)
    )
    if booking_count:
        raise ConflictError(
            ErrorReason.VILLA_HAS_BOOKINGS,
            f"Villa has {booking_count} bookings; unlist it instead",
        )

    await db.delete(villa)
    await db.flush()
    logger.info("Villa %s deleted by host %s", villa_id, host_id)


async def list_host_villas(
    db: AsyncSession,
    host_id: uuid.UUID,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Villa], int]:
    """Return one page of a host's villas (newest first) and the total count."""
    total = await db.scalar(select(func.count()).select_from(Villa).where(Villa.host_id == host_id))
    result = await db.execute(
        select(Villa).where(Villa.host_id == host_id).order_by(Villa.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def review_summary(db: AsyncSession, villa_id: uuid.UUID) -> tuple[float | None, int]:
    """Average rating and count of the visible reviews left for a villa's host."""
    row = (
        await db.execute(
            select(func.avg(Review.public_rating), func.count(Review.id))
            .join(Booking, Review.booking_id == Booking.id)
            .where(
                Booking.villa_id == villa_id,
                Review.is_visible.is_(True),
                Review.reviewee_id == Booking.host_id,
            )
        )
    ).one()
    average, count = row
    return (round(float(average), 2) if average is not None else None), count


# ---------------------------------------------------------------------------
# Amenities
# ---------------------------------------------------------------------------


async def list_amenities(db: AsyncSession) -> list[Amenity]:
    result = await db.execute(select(Amenity).order_by(Amenity.name.asc()))
    return list(result.scalars().all())


async def get_amenity(db: AsyncSession, amenity_id: uuid.UUID) -> Amenity:
    amenity = await db.get(Amenity, amenity_id)
    if amenity is None:
        raise NotFoundError(ErrorReason.AMENITY_NOT_FOUND, "Amenity not found")
    return amenity


async def add_villa_amenity(
    db: AsyncSession,
    villa_id: uuid.UUID,
    host_id: uuid.UUID,
    amenity_id: uuid.UUID,
) -> Villa:
    """Attach an amenity to a villa; attaching it twice is a no-op."""
    villa = await get_owned_villa(db, villa_id, host_id)
    amenity = await get_amenity(db, amenity_id)
    if amenity not in villa.amenities:
        villa.amenities.append(amenity)
        await db.flush()
    return villa


async def remove_villa_amenity(
    db: AsyncSession,
    villa_id: uuid.UUID,
    host_id: uuid.UUID,
    amenity_id: uuid.UUID,
) -> Villa:
    villa = await get_owned_villa(db, villa_id, host_id)
    villa.amenities = [a for a in villa.amenities if a.id != amenity_id]
    await db.flush()
    return villa
