from review_moderation.services.moderation import ModerationService
from review_moderation.services.reviews import ReviewService
from review_moderation.services.statistics import StatisticsAggregator

__all__ = ["ModerationService", "ReviewService", "StatisticsAggregator"]
