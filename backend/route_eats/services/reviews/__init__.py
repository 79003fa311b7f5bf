"""Reviews for a restaurant from several sources."""

from .service import (
    GoogleReviewSource,
    ReviewAggregator,
    ReviewSource,
    TripAdvisorReviewSource,
    YelpReviewSource,
    review_timestamp,
)

__all__ = [
    "GoogleReviewSource",
    "ReviewAggregator",
    "ReviewSource",
    "TripAdvisorReviewSource",
    "YelpReviewSource",
    "review_timestamp",
]
