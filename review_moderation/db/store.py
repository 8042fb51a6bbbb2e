"""Store — the persistence boundary of the review core.

Every operation is awaitable, whatever the backend does underneath. Services
hold a ``Store`` and never learn which adapter they were given. Operations
raise ``StorageError`` when the backend fails; "not found" is reported as
``None`` / ``False`` and turned into ``NotFoundError`` by the services.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from review_moderation.models import (
    ModerationAction,
    ModerationActionType,
    Product,
    Review,
    ReviewStatus,
    User,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise to aware UTC. SQLite hands back naive values; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class ActionStatistics:
    """Raw aggregates over the moderation log for one time window."""
    counts: dict[ModerationActionType, int] = field(default_factory=dict)
    approved_count: int = 0
    decided_count: int = 0  # approve + reject
    average_processing_minutes: float = 0.0
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @property
    def total_actions(self) -> int:
        return sum(self.counts.values())


class Store(ABC):

    # ── Reviews ──────────────────────────────────────────────────────────

    @abstractmethod
    async def insert_review(self, user_id: int, product_id: int, rating: int, review_text: str) -> Review:
        """Insert a review. Status is always pending."""

    @abstractmethod
    async def get_review_by_id(self, review_id: int) -> Optional[Review]:
        ...

    @abstractmethod
    async def list_reviews_by_product(
        self, product_id: int, status: Optional[ReviewStatus] = None
    ) -> list[Review]:
        """Newest first. All statuses when ``status`` is None."""

    @abstractmethod
    async def list_reviews_by_user(self, user_id: int) -> list[Review]:
        """Newest first."""

    @abstractmethod
    async def list_reviews_by_status(self, status: ReviewStatus) -> list[Review]:
        """Pending reviews oldest first (the moderation queue); others newest first."""

    @abstractmethod
    async def update_review_content(
        self,
        review_id: int,
        rating: int,
        review_text: str,
        status: Optional[ReviewStatus] = None,
    ) -> Optional[Review]:
        """Replace rating and text; also set ``status`` when given, in the same transaction."""

    @abstractmethod
    async def update_review_status(self, review_id: int, status: ReviewStatus) -> Optional[Review]:
        ...

    @abstractmethod
    async def delete_review(self, review_id: int) -> bool:
        """Delete a review and its moderation actions. False if it did not exist."""

    @abstractmethod
    async def average_approved_rating(self, product_id: int) -> float:
        """Mean rating over approved reviews; 0.0 when there are none."""

    @abstractmethod
    async def count_reviews_by_status(self, product_id: int, status: ReviewStatus) -> int:
        ...

    # ── Moderation actions ──────────────────────────────────────────────

    @abstractmethod
    async def insert_moderation_action(
        self,
        review_id: int,
        moderator_id: int,
        action: ModerationActionType,
        notes: str = "",
    ) -> ModerationAction:
        ...

    @abstractmethod
    async def apply_moderation_action(
        self,
        review_id: int,
        moderator_id: int,
        action: ModerationActionType,
        notes: str = "",
    ) -> Optional[Review]:
        """Record the decision and move the review to the resulting status.

        Both writes commit together or not at all. Returns None without
        writing anything when the review does not exist.
        """

    @abstractmethod
    async def list_actions_by_review(self, review_id: int) -> list[ModerationAction]:
        """Newest first."""

    @abstractmethod
    async def list_actions_by_moderator(
        self,
        moderator_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[ModerationAction]:
        """Newest first, restricted to the inclusive window when given."""

    @abstractmethod
    async def action_statistics(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> ActionStatistics:
        """Aggregate the moderation log; unbounded sides cover all time."""

    # ── Reference lookups ───────────────────────────────────────────────

    @abstractmethod
    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        ...

    async def is_moderator(self, user_id: int) -> bool:
        user = await self.get_user_by_id(user_id)
        return user is not None and user.is_moderator

    @abstractmethod
    async def get_product_by_id(self, product_id: int) -> Optional[Product]:
        ...
