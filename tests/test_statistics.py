"""Tests for moderation statistics — approval rate, processing time, windows."""
from datetime import timedelta

import pytest

from review_moderation.db.store import ActionStatistics
from review_moderation.errors import ForbiddenError, ValidationError
from review_moderation.models import ModerationActionType
from review_moderation.services.statistics import approval_rate, round2, summarize
from tests.conftest import ALICE, BOB, KETTLE, LAMP, MAX, MIA, submit


def test_approval_rate():
    assert approval_rate(3, 4) == 75.0
    assert approval_rate(1, 3) == 33.33
    assert approval_rate(0, 0) == 0.0


def test_round2():
    assert round2(4.666666) == 4.67
    assert round2(2) == 2.0
    # Halves go up, not to the even neighbour
    assert round2(4.125) == 4.13
    assert round2(2.675) == 2.68
    assert round2(0.005) == 0.01


def test_summarize_fills_missing_counts():
    raw = ActionStatistics(counts={ModerationActionType.FLAG: 2})
    stats = summarize(raw)
    assert stats.action_counts.approve == 0
    assert stats.action_counts.reject == 0
    assert stats.action_counts.flag == 2
    assert stats.total_actions == 2
    assert stats.approval_rate == 0.0


@pytest.mark.asyncio
async def test_empty_log(moderation_service):
    stats = await moderation_service.get_statistics(MIA)
    assert stats.total_actions == 0
    assert stats.approval_rate == 0.0
    assert stats.average_processing_time_minutes == 0.0
    assert stats.action_counts.model_dump() == {"approve": 0, "reject": 0, "flag": 0}
    assert stats.date_range.start_date is None
    assert stats.date_range.end_date is None


@pytest.mark.asyncio
async def test_counts_and_approval_rate(review_service, moderation_service):
    reviews = [
        await submit(review_service, user_id=ALICE, product_id=LAMP),
        await submit(review_service, user_id=BOB, product_id=LAMP),
        await submit(review_service, user_id=ALICE, product_id=KETTLE),
        await submit(review_service, user_id=BOB, product_id=KETTLE),
    ]
    for review in reviews[:3]:
        await moderation_service.approve_review(review.id, MIA)
    await moderation_service.reject_review(reviews[3].id, MAX, "spam")
    await moderation_service.flag_review(reviews[0].id, MAX, "recheck")

    stats = await moderation_service.get_statistics(MIA)
    assert stats.action_counts.approve == 3
    assert stats.action_counts.reject == 1
    assert stats.action_counts.flag == 1
    assert stats.total_actions == 5
    # Flags do not count toward the approval rate
    assert stats.approval_rate == 75.0


@pytest.mark.asyncio
async def test_average_processing_time(review_service, moderation_service, clock):
    a = await submit(review_service, user_id=ALICE)
    b = await submit(review_service, user_id=BOB)
    clock.advance(minutes=30)
    await moderation_service.approve_review(a.id, MIA)
    clock.advance(minutes=60)
    await moderation_service.reject_review(b.id, MIA)
    # Flags are not decisions and do not affect processing time
    clock.advance(minutes=600)
    await moderation_service.flag_review(a.id, MAX)

    stats = await moderation_service.get_statistics(MAX)
    # (30 + 90) / 2
    assert stats.average_processing_time_minutes == 60.0


@pytest.mark.asyncio
async def test_processing_time_rounded(review_service, moderation_service, clock):
    review = await submit(review_service)
    clock.advance(seconds=100)
    await moderation_service.approve_review(review.id, MIA)

    stats = await moderation_service.get_statistics(MIA)
    assert stats.average_processing_time_minutes == 1.67


@pytest.mark.asyncio
async def test_window_bounds_are_inclusive(review_service, moderation_service, clock):
    a = await submit(review_service, user_id=ALICE)
    b = await submit(review_service, user_id=BOB)
    c = await submit(review_service, user_id=ALICE, product_id=KETTLE)

    t1 = clock.advance(hours=1)
    await moderation_service.approve_review(a.id, MIA)
    t2 = clock.advance(hours=1)
    await moderation_service.reject_review(b.id, MIA)
    clock.advance(hours=1)
    await moderation_service.approve_review(c.id, MIA)

    stats = await moderation_service.get_statistics(MIA, start_date=t1, end_date=t2)
    assert stats.total_actions == 2
    assert stats.approval_rate == 50.0
    assert stats.average_processing_time_minutes == 90.0
    assert stats.date_range.start_date == t1
    assert stats.date_range.end_date == t2

    tail = await moderation_service.get_statistics(MIA, start_date=t2 + timedelta(minutes=1))
    assert tail.total_actions == 1
    assert tail.action_counts.approve == 1
    assert tail.date_range.end_date is None


@pytest.mark.asyncio
async def test_inverted_window_rejected(moderation_service, clock):
    with pytest.raises(ValidationError):
        await moderation_service.get_statistics(MIA, start_date=clock.now, end_date=clock.now - timedelta(hours=1))


@pytest.mark.asyncio
async def test_statistics_require_moderator(moderation_service):
    with pytest.raises(ForbiddenError):
        await moderation_service.get_statistics(ALICE)
