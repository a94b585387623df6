"""Villa API routes — public search and detail, host-scoped management."""

import uuid
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from villamarket.api.deps import get_current_user, get_db, get_optional_user, page_limit
from villamarket.errors import ErrorReason, ValidationError
from villamarket.models.user import User
from villamarket.models.villa import Villa
from villamarket.schemas.auth import MessageResponse
from villamarket.schemas.review import PublicReviewListResponse, PublicReviewResponse
from villamarket.schemas.villa import (
    VillaAmenityAdd,
    VillaCreate,
    VillaDetailResponse,
    VillaListResponse,
    VillaResponse,
    VillaSearchResponse,
    VillaSummaryResponse,
    VillaUpdate,
)
from villamarket.services import review_service, villa_service
from villamarket.services.search_service import VillaFilters, search_villas

router = APIRouter(prefix="/api/v1/villas", tags=["villas"])


async def _detail(db: AsyncSession, villa: Villa) -> VillaDetailResponse:
    avg_rating, review_count = await villa_service.review_summary(db, villa.id)
    return VillaDetailResponse.model_validate(villa).model_copy(
        update={
            "host_name": villa.host.name if villa.host else None,
            "avg_rating": avg_rating,
            "review_count": review_count,
        }
    )


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


@router.get("", response_model=VillaSearchResponse, summary="Search listed villas")
async def search(
    location: str | None = Query(None, description="Matches title, address or landmarks"),
    check_in: date | None = Query(None),
    check_out: date | None = Query(None),
    num_guests: int | None = Query(None, ge=1),
    price_min: Decimal | None = Query(None, ge=0),
    price_max: Decimal | None = Query(None, ge=0),
    property_types: list[str] | None = Query(None),
    amenities: list[str] | None = Query(None),
    bedrooms: int | None = Query(None, ge=0),
    bathrooms: int | None = Query(None, ge=0),
    limit: int = Depends(page_limit),
    offset: int = Query(0, ge=0),
    sort_by: str = Query("created_at", pattern="^(created_at|price_per_night|title)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_db),
) -> VillaSearchResponse:
    """Filter listed villas. Date filtering needs both ``check_in`` and ``check_out``."""
    if (check_in is None) != (check_out is None):
        raise ValidationError(ErrorReason.INVALID_DATE_RANGE, "check_in and check_out must be given together")
    if check_in is not None and check_out <= check_in:
        raise ValidationError(ErrorReason.INVALID_DATE_RANGE, "check_out must be after check_in")

    filters = VillaFilters(
        location=location,
        check_in=check_in,
        check_out=check_out,
        num_guests=num_guests,
        price_min=price_min,
        price_max=price_max,
        property_types=property_types or [],
        amenities=amenities or [],
        bedrooms=bedrooms,
        bathrooms=bathrooms,
    )
    hits, total = await search_villas(db, filters, limit=limit, offset=offset, sort_by=sort_by, sort_order=sort_order)

    return VillaSearchResponse(
        items=[
            VillaSummaryResponse.model_validate(hit.villa).model_copy(
                update={"avg_rating": hit.avg_rating, "review_count": hit.review_count}
            )
            for hit in hits
        ],
        total=total,
        limit=limit,
        offset=offset,
    )


# ---------------------------------------------------------------------------
# Host management
# ---------------------------------------------------------------------------


@router.post("", response_model=VillaResponse, status_code=status.HTTP_201_CREATED, summary="Create a villa")
async def create_villa(
    body: VillaCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> VillaResponse:
    """Create a draft listing owned by the authenticated host."""
    villa = await villa_service.create_villa(db, current_user, body.model_dump())
    return VillaResponse.model_validate(villa)


@router.get("/mine", response_model=VillaListResponse, summary="List the caller's villas")
async def list_my_villas(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> VillaListResponse:
    villas, total = await villa_service.list_host_villas(db, current_user.id, skip=skip, limit=limit)
    return VillaListResponse(items=[VillaResponse.model_validate(v) for v in villas], total=total)


@router.get("/{villa_id}", response_model=VillaDetailResponse, summary="Get a villa")
async def get_villa(
    villa_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
) -> VillaDetailResponse:
    """Listed villas are public; drafts and unlisted villas are visible to their host only."""
    villa = await villa_service.get_visible_villa(db, villa_id, current_user.id if current_user else None)
    return await _detail(db, villa)


@router.patch("/{villa_id}", response_model=VillaDetailResponse, summary="Update a villa")
async def update_villa(
    villa_id: uuid.UUID,
    body: VillaUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> VillaDetailResponse:
    """Partially update a villa. Only explicitly set fields are changed."""
    villa = await villa_service.update_villa(db, villa_id, current_user.id, body.changes())
    return await _detail(db, villa)


@router.delete("/{villa_id}", response_model=MessageResponse, summary="Delete a villa")
async def delete_villa(
    villa_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    await villa_service.delete_villa(db, villa_id, current_user.id)
    return MessageResponse(message="Villa deleted successfully")


@router.post("/{villa_id}/amenities", response_model=VillaResponse, summary="Attach an amenity")
async def add_amenity(
    villa_id: uuid.UUID,
    body: VillaAmenityAdd,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> VillaResponse:
    villa = await villa_service.add_villa_amenity(db, villa_id, current_user.id, body.amenity_id)
    return VillaResponse.model_validate(villa)


@router.delete("/{villa_id}/amenities/{amenity_id}", response_model=VillaResponse, summary="Detach an amenity")
async def remove_amenity(
    villa_id: uuid.UUID,
    amenity_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> VillaResponse:
    villa = await villa_service.remove_villa_amenity(db, villa_id, current_user.id, amenity_id)
    return VillaResponse.model_validate(villa)


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


@router.get("/{villa_id}/reviews", response_model=PublicReviewListResponse, summary="Visible reviews of a villa")
async def list_villa_reviews(
    villa_id: uuid.UUID,
    skip: int = Query(0, ge=0),
    limit: int = Depends(page_limit),
    db: AsyncSession = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
) -> PublicReviewListResponse:
    """Guest reviews of stays at this villa that are already visible. Private feedback is never included."""
    await villa_service.get_visible_villa(db, villa_id, current_user.id if current_user else None)
    reviews, total = await review_service.list_visible_villa_reviews(db, villa_id, skip=skip, limit=limit)
    return PublicReviewListResponse(
        items=[PublicReviewResponse.model_validate(r) for r in reviews],
        total=total,
    )
