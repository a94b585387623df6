"""Blind two-way reviews.

Each party of a completed booking may review the other once. Reviews stay
hidden until the second one arrives, at which point both become visible in
the same transaction. A one-sided review is revealed by the scheduled
:func:`reveal_expired_reviews` once ``settings.review_reveal_after_days`` have
passed since check-out.
"""

import logging
import uuid
from datetime import date, timedelta
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from villamarket.config import settings
from villamarket.errors import (
    AuthorizationError,
    ConflictError,
    ErrorReason,
    NotFoundError,
    ValidationError,
)
from villamarket.models.booking import Booking, BookingStatus
from villamarket.models.review import Review

logger = logging.getLogger(__name__)

REVIEWS_PER_BOOKING = 2


def _check_rating(rating: int) -> None:
    if not 1 <= rating <= 5:
        raise ValidationError(ErrorReason.INVALID_RATING, "Rating must be between 1 and 5")


async def _reveal_booking_reviews(db: AsyncSession, booking_id: uuid.UUID) -> int:
    result = await db.execute(
        update(Review)
        .where(Review.booking_id == booking_id, Review.is_visible.is_(False))
        .values(is_visible=True)
        .returning(Review.id)
        .execution_options(synchronize_session=False)
    )
    return len(result.scalars().all())


async def submit_review(
    db: AsyncSession,
    booking_id: uuid.UUID,
    reviewer_id: uuid.UUID,
    reviewee_id: uuid.UUID,
    rating: int,
    comment: str | None,
    private_feedback: str | None,
) -> Review:
    """Store a hidden review; reveal both once the booking has two reviews."""
    _check_rating(rating)
    if reviewer_id == reviewee_id:
        raise ValidationError(ErrorReason.INVALID_PARTICIPANT, "Reviewer and reviewee cannot be the same")

    # Lock the booking so two simultaneous submissions count each other.
    booking = await db.scalar(select(Booking).where(Booking.id == booking_id).with_for_update())
    if booking is None:
        raise NotFoundError(ErrorReason.BOOKING_NOT_FOUND, "Booking not found")

    party = booking.party_of(reviewer_id)
    if party is None:
        raise AuthorizationError(ErrorReason.INVALID_PARTICIPANT, "Only the guest or host of this booking can review it")
    if booking.status != BookingStatus.COMPLETED:
        raise ConflictError(ErrorReason.BOOKING_NOT_COMPLETED, "Booking is not completed")

    expected_reviewee = booking.host_id if party == "guest" else booking.guest_id
    if reviewee_id != expected_reviewee:
        raise ValidationError(ErrorReason.INVALID_PARTICIPANT, "The reviewee must be the other party of the booking")

    existing = await db.scalar(
        select(Review.id).where(Review.booking_id == booking_id, Review.reviewer_id == reviewer_id)
    )
    if existing is not None:
        raise ConflictError(ErrorReason.DUPLICATE_REVIEW, "Review already submitted")

    review = Review(
        booking_id=booking_id,
        reviewer_id=reviewer_id,
        reviewee_id=reviewee_id,
        public_rating=rating,
        public_comment=comment,
        private_feedback=private_feedback,
        is_visible=False,
    )
    db.add(review)
    try:
        await db.flush()
    except IntegrityError:
        raise ConflictError(ErrorReason.DUPLICATE_REVIEW, "Review already submitted") from None

    count = await db.scalar(select(func.count()).select_from(Review).where(Review.booking_id == booking_id))
    if count == REVIEWS_PER_BOOKING:
        revealed = await _reveal_booking_reviews(db, booking_id)
        logger.info("Booking %s has both reviews; revealed %d", booking_id, revealed)

    await db.refresh(review)
    logger.info("Review %s submitted by %s %s for booking %s", review.id, party, reviewer_id, booking_id)
    return review


async def update_review(
    db: AsyncSession,
    review_id: uuid.UUID,
    reviewer_id: uuid.UUID,
    changes: dict[str, Any],
) -> Review:
    """Edit a review the caller wrote while it is still hidden."""
    review = await db.scalar(
        select(Review)
        .where(Review.id == review_id, Review.reviewer_id == reviewer_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if review is None:
        raise NotFoundError(ErrorReason.REVIEW_NOT_FOUND, "Review not found")
    if review.is_visible:
        raise ConflictError(ErrorReason.REVIEW_ALREADY_VISIBLE, "Cannot edit a visible review")

    if "public_rating" in changes:
        _check_rating(changes["public_rating"])
    for field_name, value in changes.items():
        setattr(review, field_name, value)

    await db.flush()
    await db.refresh(review)
    return review


async def reveal_expired_reviews(db: AsyncSession, today: date | None = None) -> int:
    """Scheduled sweep: reveal one-sided reviews whose reveal window has closed.

    Returns the number of reviews revealed. A ``review_reveal_after_days`` of
    0 disables the sweep.
    """
    if settings.review_reveal_after_days <= 0:
        return 0
    today = today or date.today()
    cutoff = today - timedelta(days=settings.review_reveal_after_days)

    expired_bookings = select(Booking.id).where(Booking.check_out <= cutoff)
    result = await db.execute(
        update(Review)
        .where(Review.is_visible.is_(False), Review.booking_id.in_(expired_bookings))
        .values(is_visible=True)
        .returning(Review.id)
        .execution_options(synchronize_session=False)
    )
    revealed = len(result.scalars().all())
    if revealed:
        logger.info("Revealed %d one-sided reviews for stays ending on or before %s", revealed, cutoff)
    return revealed


async def list_visible_villa_reviews(
    db: AsyncSession,
    villa_id: uuid.UUID,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Review], int]:
    """Public reviews of a villa's stays (guest → host), newest first."""
    filters = (
        Booking.villa_id == villa_id,
        Review.is_visible.is_(True),
        Review.reviewee_id == Booking.host_id,
    )
    total = await db.scalar(
        select(func.count()).select_from(Review).join(Booking, Review.booking_id == Booking.id).where(*filters)
    )
    result = await db.execute(
        select(Review)
        .join(Booking, Review.booking_id == Booking.id)
        .where(*filters)
        .order_by(Review.created_at.desc())
        .offset(skip)
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all()), total or 0


async def list_reviews_by_author(db: AsyncSession, reviewer_id: uuid.UUID) -> list[Review]:
    result = await db.execute(
        select(Review)
        .where(Review.reviewer_id == reviewer_id)
        .order_by(Review.created_at.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())
