"""Review model — one party's blind review of the other after a stay."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from villamarket.database import Base, UUIDPrimaryKeyMixin


class Review(UUIDPrimaryKeyMixin, Base):
    """Hidden until both parties of the booking have reviewed each other."""

    __tablename__ = "reviews"

    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reviewer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reviewee_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    public_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    public_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    private_feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_visible: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    __table_args__ = (
        CheckConstraint("public_rating >= 1 AND public_rating <= 5", name="ck_reviews_rating_range"),
        CheckConstraint("reviewer_id != reviewee_id", name="ck_reviews_not_self"),
        UniqueConstraint("booking_id", "reviewer_id", "reviewee_id", name="uq_reviews_booking_pair"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, booking_id={self.booking_id}, reviewer_id={self.reviewer_id}, visible={self.is_visible})>"
