"""Moderation API — queue, decisions, history and statistics.

Every endpoint requires ``user_id`` to belong to a moderator.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from review_moderation.api.deps import get_moderation_service
from review_moderation.models import ModerationHistoryEntry, ModerationStatistics, Review
from review_moderation.services import ModerationService

router = APIRouter(prefix="/api/v1/moderation", tags=["moderation"])


class DecisionRequest(BaseModel):
    notes: str = Field("", max_length=2000)


@router.get("/queue", response_model=list[Review])
async def pending_queue(
    user_id: int = Query(..., description="Authenticated moderator ID"),
    service: ModerationService = Depends(get_moderation_service),
):
    """Pending reviews, oldest first."""
    return await service.get_pending_queue(user_id)


@router.get("/flagged", response_model=list[Review])
async def flagged_reviews(
    user_id: int = Query(..., description="Authenticated moderator ID"),
    service: ModerationService = Depends(get_moderation_service),
):
    return await service.get_flagged_reviews(user_id)


@router.post("/reviews/{review_id}/approve", response_model=Review)
async def approve_review(
    review_id: int,
    user_id: int = Query(..., description="Authenticated moderator ID"),
    service: ModerationService = Depends(get_moderation_service),
):
    return await service.approve_review(review_id, user_id)


@router.post("/reviews/{review_id}/reject", response_model=Review)
async def reject_review(
    review_id: int,
    body: Optional[DecisionRequest] = None,
    user_id: int = Query(..., description="Authenticated moderator ID"),
    service: ModerationService = Depends(get_moderation_service),
):
    return await service.reject_review(review_id, user_id, body.notes if body else "")


@router.post("/reviews/{review_id}/flag", response_model=Review)
async def flag_review(
    review_id: int,
    body: Optional[DecisionRequest] = None,
    user_id: int = Query(..., description="Authenticated moderator ID"),
    service: ModerationService = Depends(get_moderation_service),
):
    return await service.flag_review(review_id, user_id, body.notes if body else "")


@router.get("/history", response_model=list[ModerationHistoryEntry])
async def moderation_history(
    user_id: int = Query(..., description="Authenticated moderator ID"),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    moderator_id: Optional[int] = Query(None, description="Show another moderator's decisions"),
    service: ModerationService = Depends(get_moderation_service),
):
    return await service.get_moderation_history(user_id, start_date, end_date, moderator_id)


@router.get("/statistics", response_model=ModerationStatistics)
async def moderation_statistics(
    user_id: int = Query(..., description="Authenticated moderator ID"),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    service: ModerationService = Depends(get_moderation_service),
):
    """Action counts, approval rate and average processing time."""
    return await service.get_statistics(user_id, start_date, end_date)
