"""Villa listing and amenity models."""

import uuid
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from villamarket.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class VillaStatus(StrEnum):
    DRAFT = "draft"
    LISTED = "listed"
    UNLISTED = "unlisted"


PROPERTY_TYPES = ("villa", "cabin", "apartment", "cottage", "farmhouse", "house")
PAYMENT_METHODS = ("credit_card", "paypal", "bank_transfer", "cash")


villa_amenities = Table(
    "villa_amenities",
    Base.metadata,
    Column("villa_id", ForeignKey("villas.id", ondelete="CASCADE"), primary_key=True),
    Column("amenity_id", ForeignKey("amenities.id", ondelete="CASCADE"), primary_key=True),
)


class Amenity(UUIDPrimaryKeyMixin, Base):
    """A named feature (pool, wifi, ...) that villas can advertise."""

    __tablename__ = "amenities"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    icon_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<Amenity(id={self.id}, name={self.name!r})>"


class Villa(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A rental listing owned by exactly one host."""

    __tablename__ = "villas"

    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    property_type: Mapped[str] = mapped_column(String(50), nullable=False)
    num_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    num_bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    num_beds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    num_bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    cleaning_fee: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), default=None)
    minimum_nights: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    house_rules: Mapped[str | None] = mapped_column(Text, default=None)
    preferred_payment_method: Mapped[str] = mapped_column(String(50), nullable=False, default="credit_card")
    exact_address: Mapped[str | None] = mapped_column(String(500), default=None)
    directions_landmarks: Mapped[str | None] = mapped_column(Text, default=None)
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 8), default=None)
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(11, 8), default=None)
    status: Mapped[str] = mapped_column(String(20), default=VillaStatus.DRAFT, nullable=False, index=True)

    # Relationships
    host: Mapped["User"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    amenities: Mapped[list[Amenity]] = relationship(
        secondary=villa_amenities,
        lazy="selectin",
        order_by=Amenity.name,
    )

    def __repr__(self) -> str:
        return f"<Villa(id={self.id}, title={self.title!r}, status={self.status!r})>"
