"""Pydantic v2 request/response schemas for review endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ReviewCreate(BaseModel):
    booking_id: uuid.UUID
    reviewee_id: uuid.UUID
    public_rating: int = Field(..., ge=1, le=5)
    public_comment: str | None = None
    private_feedback: str | None = None


class ReviewUpdate(BaseModel):
    """Edits allowed while the review is hidden."""

    public_rating: int | None = Field(None, ge=1, le=5)
    public_comment: str | None = None
    private_feedback: str | None = None

    @model_validator(mode="after")
    def check_rating_not_null(self) -> "ReviewUpdate":
        if "public_rating" in self.model_fields_set and self.public_rating is None:
            raise ValueError("public_rating cannot be cleared")
        return self


class PublicReviewResponse(BaseModel):
    """What anyone may see once a review is visible. Never carries private feedback."""

    id: uuid.UUID
    booking_id: uuid.UUID
    reviewer_id: uuid.UUID
    reviewee_id: uuid.UUID
    public_rating: int
    public_comment: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthorReviewResponse(PublicReviewResponse):
    """The reviewer's own view, including private feedback and visibility."""

    private_feedback: str | None = None
    is_visible: bool


class PublicReviewListResponse(BaseModel):
    items: list[PublicReviewResponse]
    total: int
