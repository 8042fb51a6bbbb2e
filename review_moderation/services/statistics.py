"""Moderation statistics — approval rate, processing time, action breakdowns."""
from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from review_moderation.db.store import ActionStatistics, Store, as_utc
from review_moderation.errors import ValidationError
from review_moderation.models import (
    ActionCounts,
    DateRange,
    ModerationActionType,
    ModerationStatistics,
)


def round2(value: float) -> float:
    """Two decimals, halves rounded up (4.125 -> 4.13)."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def approval_rate(approved: int, decided: int) -> float:
    """approved / (approved + rejected) as a percentage; 0 with no decisions."""
    if decided <= 0:
        return 0.0
    return round2(approved / decided * 100)


def check_window(start_date: Optional[datetime], end_date: Optional[datetime]) -> None:
    if start_date is not None and end_date is not None and as_utc(start_date) > as_utc(end_date):
        raise ValidationError("start_date must not be after end_date")


def summarize(raw: ActionStatistics) -> ModerationStatistics:
    counts = raw.counts
    return ModerationStatistics(
        action_counts=ActionCounts(
            approve=counts.get(ModerationActionType.APPROVE, 0),
            reject=counts.get(ModerationActionType.REJECT, 0),
            flag=counts.get(ModerationActionType.FLAG, 0),
        ),
        approval_rate=approval_rate(raw.approved_count, raw.decided_count),
        average_processing_time_minutes=round2(raw.average_processing_minutes),
        total_actions=raw.total_actions,
        date_range=DateRange(start_date=raw.start_date, end_date=raw.end_date),
    )


class StatisticsAggregator:
    """Reads the moderation log through the Store and shapes the numbers."""

    def __init__(self, store: Store):
        self.store = store

    async def compute(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> ModerationStatistics:
        check_window(start_date, end_date)
        raw = await self.store.action_statistics(start_date, end_date)
        return summarize(raw)
