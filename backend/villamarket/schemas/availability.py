"""Pydantic v2 schemas for the availability calendar endpoints."""

import datetime
import uuid

from pydantic import BaseModel, ConfigDict, Field


class CalendarEntry(BaseModel):
    """One host edit. Hosts can open or block a night, never book it."""

    date: datetime.date
    status: str = Field(..., pattern="^(available|blocked)$")


class CalendarUpdate(BaseModel):
    dates: list[CalendarEntry] = Field(..., min_length=1, max_length=366)


class AvailabilityDayResponse(BaseModel):
    date: datetime.date
    status: str

    model_config = ConfigDict(from_attributes=True)


class CalendarResponse(BaseModel):
    """Status of every day in the requested window, missing rows shown as available."""

    villa_id: uuid.UUID
    date_from: datetime.date
    date_to: datetime.date
    days: dict[datetime.date, str]


class CalendarUpdateResponse(BaseModel):
    applied: list[AvailabilityDayResponse]
    skipped: list[datetime.date]
