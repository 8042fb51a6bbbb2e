"""Product-facing reads — approved reviews and rating summary."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from review_moderation.api.deps import get_review_service
from review_moderation.models import ProductStatistics, Review
from review_moderation.services import ReviewService

router = APIRouter(prefix="/api/v1/products", tags=["products"])


@router.get("/{product_id}/reviews", response_model=list[Review])
async def product_reviews(
    product_id: int,
    service: ReviewService = Depends(get_review_service),
):
    """Approved reviews only, most recent first."""
    return await service.get_product_reviews(product_id)


@router.get("/{product_id}/statistics", response_model=ProductStatistics)
async def product_statistics(
    product_id: int,
    service: ReviewService = Depends(get_review_service),
):
    return await service.get_product_statistics(product_id)
