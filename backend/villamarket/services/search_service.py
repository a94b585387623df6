"""Listing search — filter-and-sort over listed villas.

Predicates are combined with AND. The date window is applied as a NOT EXISTS
over the availability ledger using the same half-open rule as
``availability.has_conflict``; amenities match when the villa offers any of
the requested names. There is no relevance ranking.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy import and_, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from villamarket.models.availability import AvailabilityDay
from villamarket.models.booking import Booking
from villamarket.models.review import Review
from villamarket.models.villa import Amenity, Villa, VillaStatus, villa_amenities
from villamarket.services.availability import OCCUPIED_STATUSES

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "created_at": Villa.created_at,
    "price_per_night": Villa.price_per_night,
    "title": Villa.title,
}


@dataclass
class VillaFilters:
    location: str | None = None
    check_in: date | None = None
    check_out: date | None = None
    num_guests: int | None = None
    price_min: Decimal | None = None
    price_max: Decimal | None = None
    property_types: list[str] = field(default_factory=list)
    amenities: list[str] = field(default_factory=list)
    bedrooms: int | None = None
    bathrooms: int | None = None


@dataclass
class VillaSummary:
    """A search hit with its public rating figures."""

    villa: Villa
    avg_rating: float | None
    review_count: int


def _escape_like(text: str) -> str:
    """Make ``%`` and ``_`` in user input match literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _where_clauses(filters: VillaFilters) -> list:
    clauses = [Villa.status == VillaStatus.LISTED]

    if filters.location:
        pattern = f"%{_escape_like(filters.location)}%"
        clauses.append(
            or_(
                Villa.title.ilike(pattern, escape="\\"),
                Villa.exact_address.ilike(pattern, escape="\\"),
                Villa.directions_landmarks.ilike(pattern, escape="\\"),
            )
        )
    if filters.num_guests is not None:
        clauses.append(Villa.num_guests >= filters.num_guests)
    if filters.price_min is not None:
        clauses.append(Villa.price_per_night >= filters.price_min)
    if filters.price_max is not None:
        clauses.append(Villa.price_per_night <= filters.price_max)
    if filters.property_types:
        clauses.append(Villa.property_type.in_(filters.property_types))
    if filters.bedrooms is not None:
        clauses.append(Villa.num_bedrooms >= filters.bedrooms)
    if filters.bathrooms is not None:
        clauses.append(Villa.num_bathrooms >= filters.bathrooms)

    if filters.check_in is not None and filters.check_out is not None:
        clauses.append(
            ~exists().where(
                AvailabilityDay.villa_id == Villa.id,
                AvailabilityDay.date >= filters.check_in,
                AvailabilityDay.date < filters.check_out,
                AvailabilityDay.status.in_(OCCUPIED_STATUSES),
            )
        )

    if filters.amenities:
        clauses.append(
            exists()
            .select_from(villa_amenities.join(Amenity, villa_amenities.c.amenity_id == Amenity.id))
            .where(villa_amenities.c.villa_id == Villa.id, Amenity.name.in_(filters.amenities))
        )

    return clauses


async def search_villas(
    db: AsyncSession,
    filters: VillaFilters,
    limit: int = 10,
    offset: int = 0,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> tuple[list[VillaSummary], int]:
    """Return one page of matching listed villas and the total match count."""
    clauses = _where_clauses(filters)

    total = await db.scalar(select(func.count()).select_from(Villa).where(*clauses))

    host_review = and_(
        Review.booking_id == Booking.id,
        Booking.villa_id == Villa.id,
        Review.reviewee_id == Booking.host_id,
        Review.is_visible.is_(True),
    )
    avg_rating = (
        select(func.avg(Review.public_rating)).select_from(Review).join(Booking, Review.booking_id == Booking.id)
    ).where(host_review).correlate(Villa).scalar_subquery()
    review_count = (
        select(func.count(Review.id)).select_from(Review).join(Booking, Review.booking_id == Booking.id)
    ).where(host_review).correlate(Villa).scalar_subquery()

    sort_column = SORT_COLUMNS.get(sort_by, Villa.created_at)
    ordering = sort_column.asc() if sort_order == "asc" else sort_column.desc()

    result = await db.execute(
        select(Villa, avg_rating.label("avg_rating"), review_count.label("review_count"))
        .where(*clauses)
        .order_by(ordering, Villa.id)
        .offset(offset)
        .limit(limit)
    )
    items = [
        VillaSummary(
            villa=villa,
            avg_rating=round(float(avg), 2) if avg is not None else None,
            review_count=count or 0,
        )
        for villa, avg, count in result.all()
    ]
    logger.debug("Villa search matched %d (returning %d)", total or 0, len(items))
    return items, total or 0
