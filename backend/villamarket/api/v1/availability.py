"""Availability calendar API routes."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from villamarket.api.deps import get_current_user, get_db, get_optional_user
from villamarket.errors import ErrorReason, ValidationError
from villamarket.models.user import User
from villamarket.schemas.availability import (
    AvailabilityDayResponse,
    CalendarResponse,
    CalendarUpdate,
    CalendarUpdateResponse,
)
from villamarket.services import availability, villa_service

router = APIRouter(prefix="/api/v1/villas", tags=["availability"])

# Longest window a single calendar read may cover
MAX_CALENDAR_DAYS = 366


@router.get("/{villa_id}/availability", response_model=CalendarResponse, summary="Read a villa's calendar")
async def get_calendar(
    villa_id: uuid.UUID,
    date_from: date = Query(...),
    date_to: date = Query(..., description="Inclusive"),
    db: AsyncSession = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
) -> CalendarResponse:
    """Status of every day from ``date_from`` to ``date_to`` inclusive.

    Calendars of drafts and unlisted villas are only shown to their host.
    """
    if (date_to - date_from).days >= MAX_CALENDAR_DAYS:
        raise ValidationError(ErrorReason.INVALID_DATE_RANGE, f"Calendar window is limited to {MAX_CALENDAR_DAYS} days")

    await villa_service.get_visible_villa(db, villa_id, current_user.id if current_user else None)
    days = await availability.check_availability(db, villa_id, date_from, date_to)
    return CalendarResponse(villa_id=villa_id, date_from=date_from, date_to=date_to, days=days)


@router.patch(
    "/{villa_id}/availability",
    response_model=CalendarUpdateResponse,
    summary="Block or open days on a villa's calendar",
)
async def update_calendar(
    villa_id: uuid.UUID,
    body: CalendarUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CalendarUpdateResponse:
    """Host-only. Booked days are reported as skipped and left unchanged."""
    outcome = await availability.update_calendar(
        db,
        villa_id,
        current_user.id,
        [(entry.date, entry.status) for entry in body.dates],
    )
    return CalendarUpdateResponse(
        applied=[AvailabilityDayResponse.model_validate(row) for row in outcome.applied],
        skipped=outcome.skipped,
    )
