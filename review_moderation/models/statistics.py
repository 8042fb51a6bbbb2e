"""Read models returned by statistics and history queries."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from review_moderation.models.review import ModerationActionType, ReviewStatus


class ProductStatistics(BaseModel):
    product_id: int
    product_name: Optional[str] = None
    average_rating: float = 0.0
    review_count: int = 0


class ActionCounts(BaseModel):
    approve: int = 0
    reject: int = 0
    flag: int = 0


class DateRange(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class ModerationStatistics(BaseModel):
    action_counts: ActionCounts
    approval_rate: float = 0.0
    average_processing_time_minutes: float = 0.0
    total_actions: int = 0
    date_range: DateRange


class ModeratorRef(BaseModel):
    id: int
    username: str


class ReviewSnapshot(BaseModel):
    """Review as seen from the audit trail — text truncated for listing."""
    id: int
    rating: int
    review_text: str
    status: ReviewStatus


class ModerationHistoryEntry(BaseModel):
    id: int
    review_id: int
    moderator_id: int
    moderator: Optional[ModeratorRef] = None
    review: Optional[ReviewSnapshot] = None
    action: ModerationActionType
    notes: str = ""
    created_at: datetime
