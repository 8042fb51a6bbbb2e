"""Review lifecycle — submission, owner edits and deletion, public reads.

State machine owned here:
- creation always lands in ``pending``
- an owner edit moves any status back to ``pending`` (edited content must be
  moderated again); this is the only status change not made by a moderator
- approve / reject / flag belong to ``ModerationService``
"""
from __future__ import annotations

import logging

from review_moderation.db.store import Store
from review_moderation.errors import ForbiddenError, NotFoundError, operation
from review_moderation.models import (
    ModerationAction,
    ProductStatistics,
    Review,
    ReviewStatus,
    validate_review,
)
from review_moderation.services.authorization import require_owner
from review_moderation.services.statistics import round2

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, store: Store):
        self.store = store

    async def _load_review(self, review_id: int) -> Review:
        review = await self.store.get_review_by_id(review_id)
        if review is None:
            raise NotFoundError(f"Review {review_id} not found")
        return review

    async def _require_user(self, user_id: int) -> None:
        if await self.store.get_user_by_id(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")

    async def _require_product(self, product_id: int):
        product = await self.store.get_product_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    # ── Writes ──────────────────────────────────────────────────────────

    @operation("create review")
    async def create_review(self, user_id: int, product_id: int, rating: int, review_text: str) -> Review:
        """Submit a review. It stays invisible until a moderator approves it."""
        validate_review(rating, review_text)
        await self._require_user(user_id)
        await self._require_product(product_id)

        review = await self.store.insert_review(user_id, product_id, rating, review_text)
        logger.info("Review %s created by user %s for product %s", review.id, user_id, product_id)
        return review

    @operation("update review")
    async def update_review(self, review_id: int, actor_id: int, rating: int, review_text: str) -> Review:
        """Replace rating and text and send the review back to the queue in one write."""
        existing = await self._load_review(review_id)
        require_owner(existing, actor_id)
        validate_review(rating, review_text)

        review = await self.store.update_review_content(
            review_id, rating, review_text, status=ReviewStatus.PENDING
        )
        if review is None:
            raise NotFoundError(f"Review {review_id} not found")

        if existing.status is not ReviewStatus.PENDING:
            logger.info(
                "Review %s edited by owner; status %s -> pending",
                review_id, existing.status.value,
            )
        return review

    @operation("delete review")
    async def delete_review(self, review_id: int, actor_id: int) -> bool:
        """Delete an own review together with its moderation history."""
        existing = await self._load_review(review_id)
        require_owner(existing, actor_id)

        deleted = await self.store.delete_review(review_id)
        if not deleted:
            raise NotFoundError(f"Review {review_id} not found")
        logger.info("Review %s deleted by user %s", review_id, actor_id)
        return True

    # ── Reads ───────────────────────────────────────────────────────────

    @operation("retrieve review")
    async def get_review(self, review_id: int) -> Review:
        return await self._load_review(review_id)

    @operation("get product reviews")
    async def get_product_reviews(self, product_id: int) -> list[Review]:
        """Publicly visible (approved) reviews, most recent first."""
        await self._require_product(product_id)
        return await self.store.list_reviews_by_product(product_id, ReviewStatus.APPROVED)

    @operation("get user reviews")
    async def get_user_reviews(self, user_id: int) -> list[Review]:
        """A user's own reviews in every status, most recent first."""
        await self._require_user(user_id)
        return await self.store.list_reviews_by_user(user_id)

    @operation("get product statistics")
    async def get_product_statistics(self, product_id: int) -> ProductStatistics:
        product = await self._require_product(product_id)
        average = await self.store.average_approved_rating(product_id)
        count = await self.store.count_reviews_by_status(product_id, ReviewStatus.APPROVED)
        return ProductStatistics(
            product_id=product_id,
            product_name=product.name,
            average_rating=round2(average),
            review_count=count,
        )

    @operation("get review history")
    async def get_review_history(self, review_id: int, actor_id: int) -> list[ModerationAction]:
        """Moderation decisions on one review, newest first.

        Visible to the review's author and to moderators.
        """
        review = await self._load_review(review_id)
        if review.user_id != actor_id and not await self.store.is_moderator(actor_id):
            raise ForbiddenError("Only the review owner or a moderator can view its history")
        return await self.store.list_actions_by_review(review_id)
