"""Amenity catalogue."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from villamarket.api.deps import get_db
from villamarket.schemas.villa import AmenityResponse
from villamarket.services import villa_service

router = APIRouter(prefix="/api/v1/amenities", tags=["amenities"])


@router.get("", response_model=list[AmenityResponse], summary="List all amenities")
async def list_amenities(db: AsyncSession = Depends(get_db)) -> list[AmenityResponse]:
    return [AmenityResponse.model_validate(a) for a in await villa_service.list_amenities(db)]
