"""Route Eats data models."""

from .core import (
    AggregatedReview,
    Bounds,
    ConversationContext,
    Coordinates,
    Facilities,
    LocalizedString,
    LocalizedText,
    Location,
    OpeningHours,
    Photo,
    PriceLevel,
    Restaurant,
    Review,
    ReviewSourceName,
    RoutePath,
    RouteRequest,
    RouteSegment,
    SearchOptions,
    SearchResult,
    TripPlan,
)
from .errors import AppError, ErrorCode, RecoveryOption

__all__ = [
    "AggregatedReview",
    "AppError",
    "Bounds",
    "ConversationContext",
    "Coordinates",
    "ErrorCode",
    "Facilities",
    "LocalizedString",
    "LocalizedText",
    "Location",
    "OpeningHours",
    "Photo",
    "PriceLevel",
    "RecoveryOption",
    "Restaurant",
    "Review",
    "ReviewSourceName",
    "RoutePath",
    "RouteRequest",
    "RouteSegment",
    "SearchOptions",
    "SearchResult",
    "TripPlan",
]
