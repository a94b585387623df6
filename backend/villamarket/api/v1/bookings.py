"""Booking API routes — request, list, detail, and status transitions."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from villamarket.api.deps import get_current_user, get_db, page_limit
from villamarket.models.booking import Booking
from villamarket.models.user import User
from villamarket.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    BookingUpdate,
)
from villamarket.services import booking_service

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


def _detail(booking: Booking) -> BookingDetailResponse:
    villa = booking.villa
    return BookingDetailResponse.model_validate(booking).model_copy(
        update={
            "villa_title": villa.title if villa else None,
            "exact_address": villa.exact_address if villa else None,
            "house_rules": villa.house_rules if villa else None,
            "host_name": booking.host.name if booking.host else None,
            "guest_name": booking.guest.name if booking.guest else None,
        }
    )


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED, summary="Request a booking")
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingResponse:
    """Create a ``pending`` request. The host confirms it to reserve the dates."""
    booking = await booking_service.create_booking(
        db,
        villa_id=body.villa_id,
        guest_id=current_user.id,
        check_in=body.check_in,
        check_out=body.check_out,
        num_guests=body.num_guests,
        guest_message=body.guest_message,
    )
    return BookingResponse.model_validate(booking)


@router.get("", response_model=BookingListResponse, summary="List the caller's bookings")
async def list_bookings(
    status_filter: str | None = Query(None, alias="status", pattern="^(pending|confirmed|cancelled|completed)$"),
    role: str | None = Query(None, pattern="^(guest|host)$"),
    offset: int = Query(0, ge=0),
    limit: int = Depends(page_limit),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingListResponse:
    """Bookings where the caller is the guest or the host, newest first."""
    bookings, total = await booking_service.list_bookings_for_user(
        db,
        current_user.id,
        status=status_filter,
        role=role,
        skip=offset,
        limit=limit,
    )
    return BookingListResponse(
        items=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
    )


@router.get("/{booking_id}", response_model=BookingDetailResponse, summary="Get a booking")
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingDetailResponse:
    booking = await booking_service.get_booking_for_party(db, booking_id, current_user.id)
    return _detail(booking)


@router.patch("/{booking_id}", response_model=BookingDetailResponse, summary="Update a booking")
async def update_booking(
    booking_id: uuid.UUID,
    body: BookingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingDetailResponse:
    """Confirm, cancel or complete a booking, or edit its check-in instructions.

    Without a ``status`` only the host's check-in instructions change.
    """
    if body.status is None:
        booking = await booking_service.set_check_in_instructions(
            db, booking_id, current_user.id, body.check_in_instructions
        )
    else:
        booking = await booking_service.transition_booking(
            db,
            booking_id,
            current_user.id,
            body.status,
            cancellation_reason=body.cancellation_reason,
            cancellation_message=body.cancellation_message,
            check_in_instructions=body.check_in_instructions,
        )
    return _detail(booking)
