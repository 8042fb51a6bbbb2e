"""Review data models — core schema for the moderation workflow."""
from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

from review_moderation.errors import ValidationError

MIN_RATING = 1
MAX_RATING = 5
MAX_REVIEW_TEXT_LENGTH = 5000


class ReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FLAGGED = "flagged"


class ModerationActionType(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    FLAG = "flag"

    @property
    def resulting_status(self) -> ReviewStatus:
        """Status a review takes when this action is applied to it."""
        return _ACTION_STATUS[self]


_ACTION_STATUS = {
    ModerationActionType.APPROVE: ReviewStatus.APPROVED,
    ModerationActionType.REJECT: ReviewStatus.REJECTED,
    ModerationActionType.FLAG: ReviewStatus.FLAGGED,
}

# Actions that close a review's wait in the queue (used for processing time)
DECISION_ACTIONS = (ModerationActionType.APPROVE, ModerationActionType.REJECT)


class Review(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user_id: int
    product_id: int
    rating: int
    review_text: str
    status: ReviewStatus = ReviewStatus.PENDING
    created_at: datetime
    updated_at: datetime


class ModerationAction(BaseModel):
    """One moderator decision. Append-only audit record."""
    model_config = ConfigDict(frozen=True)

    id: int
    review_id: int
    moderator_id: int
    action: ModerationActionType
    notes: str = ""
    created_at: datetime


def validate_review(rating, review_text) -> None:
    """Check the field-level invariants of review content.

    Raises ValidationError when the rating is not an integer in [1, 5] or the
    text is missing, blank, or longer than MAX_REVIEW_TEXT_LENGTH characters.
    """
    # bool is an int subclass; True must not pass as a rating of 1
    if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")

    if not isinstance(review_text, str):
        raise ValidationError("Review text is required and must be a string")
    if not review_text.strip():
        raise ValidationError("Review text cannot be empty")
    if len(review_text) > MAX_REVIEW_TEXT_LENGTH:
        raise ValidationError(f"Review text cannot exceed {MAX_REVIEW_TEXT_LENGTH} characters")


def validate_moderation_action(action) -> ModerationActionType:
    """Return the action as a ModerationActionType, or raise ValidationError."""
    try:
        return ModerationActionType(action)
    except ValueError:
        valid = ", ".join(a.value for a in ModerationActionType)
        raise ValidationError(f"Action must be one of: {valid}") from None

