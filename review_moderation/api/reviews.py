"""Reviews API — submit, edit, delete and read reviews."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field

from review_moderation.api.deps import get_review_service
from review_moderation.models import MAX_RATING, MAX_REVIEW_TEXT_LENGTH, MIN_RATING, ModerationAction, Review
from review_moderation.services import ReviewService

router = APIRouter(prefix="/api/v1", tags=["reviews"])


# ── Schemas ──────────────────────────────────────────────────────────────────

class ReviewCreateRequest(BaseModel):
    product_id: int
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING)
    review_text: str = Field(..., min_length=1, max_length=MAX_REVIEW_TEXT_LENGTH)


class ReviewUpdateRequest(BaseModel):
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING)
    review_text: str = Field(..., min_length=1, max_length=MAX_REVIEW_TEXT_LENGTH)


# ── Endpoints ────────────────────────────────────────────────────────────────

@router.post("/reviews", status_code=201, response_model=Review)
async def create_review(
    req: ReviewCreateRequest,
    user_id: int = Query(..., description="Authenticated user ID"),
    service: ReviewService = Depends(get_review_service),
):
    """Submit a review. It is queued for moderation (status pending)."""
    return await service.create_review(user_id, req.product_id, req.rating, req.review_text)


@router.get("/reviews/{review_id}", response_model=Review)
async def get_review(
    review_id: int,
    service: ReviewService = Depends(get_review_service),
):
    return await service.get_review(review_id)


@router.put("/reviews/{review_id}", response_model=Review)
async def update_review(
    review_id: int,
    req: ReviewUpdateRequest,
    user_id: int = Query(..., description="Authenticated user ID"),
    service: ReviewService = Depends(get_review_service),
):
    """Edit your own review. The review goes back to the moderation queue."""
    return await service.update_review(review_id, user_id, req.rating, req.review_text)


@router.delete("/reviews/{review_id}", status_code=204)
async def delete_review(
    review_id: int,
    user_id: int = Query(..., description="Authenticated user ID"),
    service: ReviewService = Depends(get_review_service),
):
    await service.delete_review(review_id, user_id)
    return Response(status_code=204)


@router.get("/reviews/{review_id}/history", response_model=list[ModerationAction])
async def review_history(
    review_id: int,
    user_id: int = Query(..., description="Authenticated user ID"),
    service: ReviewService = Depends(get_review_service),
):
    """Moderation decisions on a review — owner or moderator only."""
    return await service.get_review_history(review_id, user_id)


@router.get("/users/{owner_id}/reviews", response_model=list[Review])
async def user_reviews(
    owner_id: int,
    service: ReviewService = Depends(get_review_service),
):
    """All reviews written by a user, in every status, newest first."""
    return await service.get_user_reviews(owner_id)
