"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """A guest's booking request. Price and host are derived from the villa."""

    villa_id: uuid.UUID
    check_in: date
    check_out: date
    num_guests: int = Field(..., ge=1)
    guest_message: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_dates(self) -> "BookingCreate":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class BookingUpdate(BaseModel):
    """Status transition and/or host check-in instructions."""

    status: str | None = Field(None, pattern="^(confirmed|cancelled|completed)$")
    cancellation_reason: str | None = Field(None, max_length=255)
    cancellation_message: str | None = None
    check_in_instructions: str | None = None

    @model_validator(mode="after")
    def check_not_empty(self) -> "BookingUpdate":
        if self.status is None and "check_in_instructions" not in self.model_fields_set:
            raise ValueError("Provide a status or check_in_instructions")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Standard booking response."""

    id: uuid.UUID
    villa_id: uuid.UUID
    guest_id: uuid.UUID
    host_id: uuid.UUID
    check_in: date
    check_out: date
    num_guests: int
    total_price: Decimal
    status: str
    guest_message: str
    cancellation_reason: str | None = None
    cancellation_message: str | None = None
    check_in_instructions: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingDetailResponse(BookingResponse):
    """Booking with the names both parties need, without extra round-trips."""

    villa_title: str | None = None
    exact_address: str | None = None
    house_rules: str | None = None
    host_name: str | None = None
    guest_name: str | None = None


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int
