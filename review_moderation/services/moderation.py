"""Moderation workflow — queue, decisions, audit history and statistics.

Every entry point starts with ``require_moderator``. Decisions go through
``Store.apply_moderation_action`` so that the review status and its audit row
are written in the same transaction.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from review_moderation.db.store import Store
from review_moderation.errors import NotFoundError, operation
from review_moderation.models import (
    ModerationAction,
    ModerationActionType,
    ModerationHistoryEntry,
    ModerationStatistics,
    ModeratorRef,
    Review,
    ReviewSnapshot,
    ReviewStatus,
    validate_moderation_action,
)
from review_moderation.services.authorization import forbid_self_moderation, require_moderator
from review_moderation.services.statistics import StatisticsAggregator, check_window

logger = logging.getLogger(__name__)

HISTORY_SNIPPET_LENGTH = 100


def snippet(text: str, limit: int = HISTORY_SNIPPET_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class ModerationService:
    def __init__(self, store: Store, statistics: Optional[StatisticsAggregator] = None):
        self.store = store
        self.statistics = statistics or StatisticsAggregator(store)

    # ── Queues ──────────────────────────────────────────────────────────

    @operation("get pending queue")
    async def get_pending_queue(self, moderator_id: int) -> list[Review]:
        """Pending reviews, oldest first — the longest wait is served first."""
        await require_moderator(self.store, moderator_id)
        return await self.store.list_reviews_by_status(ReviewStatus.PENDING)

    @operation("get flagged reviews")
    async def get_flagged_reviews(self, moderator_id: int) -> list[Review]:
        await require_moderator(self.store, moderator_id)
        return await self.store.list_reviews_by_status(ReviewStatus.FLAGGED)

    # ── Decisions ───────────────────────────────────────────────────────

    async def _decide(self, review_id: int, moderator_id: int, action, notes: Optional[str]) -> Review:
        await require_moderator(self.store, moderator_id)
        action = validate_moderation_action(action)

        review = await self.store.get_review_by_id(review_id)
        if review is None:
            raise NotFoundError(f"Review {review_id} not found")
        forbid_self_moderation(review, moderator_id)

        updated = await self.store.apply_moderation_action(review_id, moderator_id, action, notes or "")
        if updated is None:
            raise NotFoundError(f"Review {review_id} not found")

        logger.info(
            "Review %s %s by moderator %s (%s -> %s)",
            review_id, action.value, moderator_id,
            review.status.value, updated.status.value,
        )
        return updated

    @operation("approve review")
    async def approve_review(self, review_id: int, moderator_id: int) -> Review:
        return await self._decide(review_id, moderator_id, ModerationActionType.APPROVE, "")

    @operation("reject review")
    async def reject_review(self, review_id: int, moderator_id: int, notes: str = "") -> Review:
        return await self._decide(review_id, moderator_id, ModerationActionType.REJECT, notes)

    @operation("flag review")
    async def flag_review(self, review_id: int, moderator_id: int, notes: str = "") -> Review:
        return await self._decide(review_id, moderator_id, ModerationActionType.FLAG, notes)

    # ── Audit trail ─────────────────────────────────────────────────────

    @operation("get moderation history")
    async def get_moderation_history(
        self,
        moderator_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        filter_moderator_id: Optional[int] = None,
    ) -> list[ModerationHistoryEntry]:
        """Decisions made by ``filter_moderator_id`` (default: the caller).

        The date window is inclusive on both ends. Each entry carries the
        moderator's username and a snapshot of the review as it is now.
        """
        await require_moderator(self.store, moderator_id)
        check_window(start_date, end_date)

        subject_id = filter_moderator_id if filter_moderator_id is not None else moderator_id
        actions = await self.store.list_actions_by_moderator(subject_id, start_date, end_date)

        users: dict[int, Optional[ModeratorRef]] = {}
        reviews: dict[int, Optional[ReviewSnapshot]] = {}
        entries = []
        for action in actions:
            if action.moderator_id not in users:
                users[action.moderator_id] = await self._moderator_ref(action.moderator_id)
            if action.review_id not in reviews:
                reviews[action.review_id] = await self._review_snapshot(action.review_id)
            entries.append(_history_entry(action, users[action.moderator_id], reviews[action.review_id]))
        return entries

    async def _moderator_ref(self, user_id: int) -> Optional[ModeratorRef]:
        user = await self.store.get_user_by_id(user_id)
        return ModeratorRef(id=user.id, username=user.username) if user else None

    async def _review_snapshot(self, review_id: int) -> Optional[ReviewSnapshot]:
        review = await self.store.get_review_by_id(review_id)
        if review is None:
            return None
        return ReviewSnapshot(
            id=review.id,
            rating=review.rating,
            review_text=snippet(review.review_text),
            status=review.status,
        )

    # ── Statistics ──────────────────────────────────────────────────────

    @operation("get moderation statistics")
    async def get_statistics(
        self,
        moderator_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> ModerationStatistics:
        await require_moderator(self.store, moderator_id)
        return await self.statistics.compute(start_date, end_date)


def _history_entry(
    action: ModerationAction,
    moderator: Optional[ModeratorRef],
    review: Optional[ReviewSnapshot],
) -> ModerationHistoryEntry:
    return ModerationHistoryEntry(
        id=action.id,
        review_id=action.review_id,
        moderator_id=action.moderator_id,
        moderator=moderator,
        review=review,
        action=action.action,
        notes=action.notes,
        created_at=action.created_at,
    )
