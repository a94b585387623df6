"""SQLAlchemy models for VillaMarket.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from villamarket.models.availability import AvailabilityDay, DayStatus
from villamarket.models.booking import Booking, BookingStatus
from villamarket.models.review import Review
from villamarket.models.user import AccountType, User
from villamarket.models.villa import Amenity, Villa, VillaStatus, villa_amenities

__all__ = [
    "AccountType",
    "Amenity",
    "AvailabilityDay",
    "Booking",
    "BookingStatus",
    "DayStatus",
    "Review",
    "User",
    "Villa",
    "VillaStatus",
    "villa_amenities",
]
