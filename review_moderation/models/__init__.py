from review_moderation.models.review import (
    DECISION_ACTIONS,
    MAX_RATING,
    MAX_REVIEW_TEXT_LENGTH,
    MIN_RATING,
    ModerationAction,
    ModerationActionType,
    Review,
    ReviewStatus,
    validate_moderation_action,
    validate_review,
)
from review_moderation.models.statistics import (
    ActionCounts,
    DateRange,
    ModerationHistoryEntry,
    ModerationStatistics,
    ModeratorRef,
    ProductStatistics,
    ReviewSnapshot,
)
from review_moderation.models.user import Product, Role, User

__all__ = [
    "DECISION_ACTIONS",
    "MAX_RATING",
    "MAX_REVIEW_TEXT_LENGTH",
    "MIN_RATING",
    "ActionCounts",
    "DateRange",
    "ModerationAction",
    "ModerationActionType",
    "ModerationHistoryEntry",
    "ModerationStatistics",
    "ModeratorRef",
    "Product",
    "ProductStatistics",
    "Review",
    "ReviewSnapshot",
    "ReviewStatus",
    "Role",
    "User",
    "validate_moderation_action",
    "validate_review",
]
