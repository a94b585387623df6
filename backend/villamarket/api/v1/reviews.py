"""Review API routes — blind two-way reviews of completed stays."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from villamarket.api.deps import get_current_user, get_db
from villamarket.models.user import User
from villamarket.schemas.review import AuthorReviewResponse, ReviewCreate, ReviewUpdate
from villamarket.services import review_service

router = APIRouter(prefix="/api/v1/reviews", tags=["reviews"])


@router.post("", response_model=AuthorReviewResponse, status_code=status.HTTP_201_CREATED, summary="Review a stay")
async def submit_review(
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> AuthorReviewResponse:
    """Review the other party of a completed booking.

    The review stays hidden until the other party has reviewed too.
    """
    review = await review_service.submit_review(
        db,
        booking_id=body.booking_id,
        reviewer_id=current_user.id,
        reviewee_id=body.reviewee_id,
        rating=body.public_rating,
        comment=body.public_comment,
        private_feedback=body.private_feedback,
    )
    return AuthorReviewResponse.model_validate(review)


@router.get("/mine", response_model=list[AuthorReviewResponse], summary="Reviews the caller wrote")
async def list_my_reviews(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[AuthorReviewResponse]:
    reviews = await review_service.list_reviews_by_author(db, current_user.id)
    return [AuthorReviewResponse.model_validate(r) for r in reviews]


@router.patch("/{review_id}", response_model=AuthorReviewResponse, summary="Edit a hidden review")
async def update_review(
    review_id: uuid.UUID,
    body: ReviewUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> AuthorReviewResponse:
    review = await review_service.update_review(
        db, review_id, current_user.id, body.model_dump(exclude_unset=True)
    )
    return AuthorReviewResponse.model_validate(review)
