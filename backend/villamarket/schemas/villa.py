"""Pydantic v2 request/response schemas for villa and amenity endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from villamarket.models.villa import PAYMENT_METHODS, PROPERTY_TYPES, VillaStatus


def _one_of(choices) -> str:
    return "^(" + "|".join(choices) + ")$"


_PROPERTY_TYPE = _one_of(PROPERTY_TYPES)
_PAYMENT_METHOD = _one_of(PAYMENT_METHODS)
_VILLA_STATUS = _one_of(status.value for status in VillaStatus)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class VillaCreate(BaseModel):
    """Schema for creating a listing. New listings start as drafts."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    property_type: str = Field(..., pattern=_PROPERTY_TYPE)
    num_guests: int = Field(..., ge=1)
    num_bedrooms: int = Field(0, ge=0)
    num_beds: int = Field(0, ge=0)
    num_bathrooms: int = Field(0, ge=0)
    price_per_night: Decimal = Field(..., gt=0)
    cleaning_fee: Decimal | None = Field(None, ge=0)
    minimum_nights: int = Field(1, ge=1)
    house_rules: str | None = None
    preferred_payment_method: str = Field("credit_card", pattern=_PAYMENT_METHOD)
    exact_address: str | None = Field(None, max_length=500)
    directions_landmarks: str | None = None
    latitude: Decimal | None = Field(None, ge=-90, le=90)
    longitude: Decimal | None = Field(None, ge=-180, le=180)


class VillaUpdate(BaseModel):
    """Partial update. Only fields present in the request body are applied.

    Required columns reject an explicit ``null``; nullable ones are cleared by it.
    """

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    property_type: str | None = Field(None, pattern=_PROPERTY_TYPE)
    num_guests: int | None = Field(None, ge=1)
    num_bedrooms: int | None = Field(None, ge=0)
    num_beds: int | None = Field(None, ge=0)
    num_bathrooms: int | None = Field(None, ge=0)
    price_per_night: Decimal | None = Field(None, gt=0)
    cleaning_fee: Decimal | None = Field(None, ge=0)
    minimum_nights: int | None = Field(None, ge=1)
    house_rules: str | None = None
    preferred_payment_method: str | None = Field(None, pattern=_PAYMENT_METHOD)
    exact_address: str | None = Field(None, max_length=500)
    directions_landmarks: str | None = None
    latitude: Decimal | None = Field(None, ge=-90, le=90)
    longitude: Decimal | None = Field(None, ge=-180, le=180)
    status: str | None = Field(None, pattern=_VILLA_STATUS)

    NON_NULLABLE: ClassVar[frozenset[str]] = frozenset(
        {
            "title",
            "property_type",
            "num_guests",
            "num_bedrooms",
            "num_beds",
            "num_bathrooms",
            "price_per_night",
            "minimum_nights",
            "preferred_payment_method",
            "status",
        }
    )

    def changes(self) -> dict:
        """Fields explicitly sent by the client, with nulls on required columns dropped."""
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if not (v is None and k in self.NON_NULLABLE)}


class VillaAmenityAdd(BaseModel):
    amenity_id: uuid.UUID


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AmenityResponse(BaseModel):
    id: uuid.UUID
    name: str
    icon_name: str | None = None

    model_config = ConfigDict(from_attributes=True)


class VillaResponse(BaseModel):
    """Villa as returned to its host and in detail views."""

    id: uuid.UUID
    host_id: uuid.UUID
    title: str
    description: str | None = None
    property_type: str
    num_guests: int
    num_bedrooms: int
    num_beds: int
    num_bathrooms: int
    price_per_night: Decimal
    cleaning_fee: Decimal | None = None
    minimum_nights: int
    house_rules: str | None = None
    preferred_payment_method: str
    exact_address: str | None = None
    directions_landmarks: str | None = None
    latitude: Decimal | None = None
    longitude: Decimal | None = None
    status: str
    amenities: list[AmenityResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VillaDetailResponse(VillaResponse):
    """Villa detail with host name and public review figures."""

    host_name: str | None = None
    avg_rating: float | None = None
    review_count: int = 0


class VillaSummaryResponse(BaseModel):
    """Compact search result."""

    id: uuid.UUID
    host_id: uuid.UUID
    title: str
    property_type: str
    num_guests: int
    num_bedrooms: int
    num_bathrooms: int
    price_per_night: Decimal
    cleaning_fee: Decimal | None = None
    minimum_nights: int
    exact_address: str | None = None
    amenities: list[AmenityResponse] = []
    avg_rating: float | None = None
    review_count: int = 0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VillaListResponse(BaseModel):
    items: list[VillaResponse]
    total: int


class VillaSearchResponse(BaseModel):
    """Paginated search results."""

    items: list[VillaSummaryResponse]
    total: int
    limit: int
    offset: int
