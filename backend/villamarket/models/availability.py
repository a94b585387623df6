"""Availability ledger model — one row per villa per calendar day."""

import datetime
import uuid
from enum import StrEnum

from sqlalchemy import Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from villamarket.database import Base


class DayStatus(StrEnum):
    AVAILABLE = "available"
    BOOKED = "booked"
    BLOCKED = "blocked"


class AvailabilityDay(Base):
    """Status of a single villa night.

    Rows are created lazily: a day with no row is ``available``. The composite
    primary key guarantees at most one row per (villa, date). ``booking_id``
    records which booking holds a ``booked`` day so that cancelling one booking
    only ever releases its own nights.
    """

    __tablename__ = "availability"

    villa_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("villas.id", ondelete="CASCADE"),
        primary_key=True,
    )
    date: Mapped[datetime.date] = mapped_column(Date, primary_key=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=DayStatus.AVAILABLE)
    booking_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("bookings.id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (Index("ix_availability_villa_status_date", "villa_id", "status", "date"),)

    def __repr__(self) -> str:
        return f"<AvailabilityDay(villa_id={self.villa_id}, date={self.date}, status={self.status})>"
