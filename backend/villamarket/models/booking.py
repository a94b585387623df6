"""Booking model — a guest's stay request for a villa."""

import uuid
from datetime import date
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from villamarket.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class BookingStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation linking a guest to a villa for a half-open date range."""

    __tablename__ = "bookings"

    villa_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("villas.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    guest_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    num_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=BookingStatus.PENDING, nullable=False, index=True)
    guest_message: Mapped[str] = mapped_column(Text, nullable=False)
    cancellation_reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cancellation_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    check_in_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    villa: Mapped["Villa"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    guest: Mapped["User"] = relationship(foreign_keys=[guest_id], lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    host: Mapped["User"] = relationship(foreign_keys=[host_id], lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_bookings_checkout_after_checkin"),
        Index("ix_bookings_villa_dates", "villa_id", "check_in", "check_out"),
    )

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def party_of(self, user_id: uuid.UUID) -> str | None:
        """Return ``"guest"`` or ``"host"`` for a participant, ``None`` for anyone else."""
        if user_id == self.guest_id:
            return "guest"
        if user_id == self.host_id:
            return "host"
        return None

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, villa_id={self.villa_id}, guest_id={self.guest_id}, status={self.status})>"
