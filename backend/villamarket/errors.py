"""Error taxonomy raised by the marketplace core.

Services raise one of the four kinds below, each carrying a machine-readable
:class:`ErrorReason`. The HTTP layer maps the kind to a status code; callers
that use the services directly branch on ``exc.reason``.
"""

from enum import StrEnum


class ErrorReason(StrEnum):
    """Machine-readable reason codes attached to every core error."""

    # Input
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    INVALID_RATING = "INVALID_RATING"
    INVALID_STATUS = "INVALID_STATUS"
    MINIMUM_NIGHTS_NOT_MET = "MINIMUM_NIGHTS_NOT_MET"
    GUEST_LIMIT_EXCEEDED = "GUEST_LIMIT_EXCEEDED"
    CANCELLATION_REASON_REQUIRED = "CANCELLATION_REASON_REQUIRED"
    STAY_NOT_FINISHED = "STAY_NOT_FINISHED"

    # Authorization
    ACCESS_DENIED = "ACCESS_DENIED"
    HOST_ONLY_ACTION = "HOST_ONLY_ACTION"
    INVALID_PARTICIPANT = "INVALID_PARTICIPANT"

    # Conflict
    SELF_BOOKING_NOT_ALLOWED = "SELF_BOOKING_NOT_ALLOWED"
    DATES_NOT_AVAILABLE = "DATES_NOT_AVAILABLE"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    BOOKING_NOT_COMPLETED = "BOOKING_NOT_COMPLETED"
    DUPLICATE_REVIEW = "DUPLICATE_REVIEW"
    REVIEW_ALREADY_VISIBLE = "REVIEW_ALREADY_VISIBLE"
    VILLA_HAS_BOOKINGS = "VILLA_HAS_BOOKINGS"

    # Lookup
    VILLA_NOT_FOUND = "VILLA_NOT_FOUND"
    VILLA_NOT_AVAILABLE = "VILLA_NOT_AVAILABLE"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    REVIEW_NOT_FOUND = "REVIEW_NOT_FOUND"
    AMENITY_NOT_FOUND = "AMENITY_NOT_FOUND"


class MarketplaceError(Exception):
    """Base class for recoverable errors raised by the core services."""

    kind = "error"

    def __init__(self, reason: ErrorReason, message: str | None = None) -> None:
        self.reason = reason
        self.message = message or reason.value.replace("_", " ").capitalize()
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(reason={self.reason.value}, message={self.message!r})>"


class ValidationError(MarketplaceError):
    """Malformed input or a violated business rule on the input itself."""

    kind = "validation"


class AuthorizationError(MarketplaceError):
    """The actor lacks the role or ownership the operation requires."""

    kind = "authorization"


class ConflictError(MarketplaceError):
    """The operation collides with current state (dates taken, duplicates, wrong status)."""

    kind = "conflict"


class NotFoundError(MarketplaceError):
    """A referenced villa, booking, review or amenity does not exist."""

    kind = "not_found"
