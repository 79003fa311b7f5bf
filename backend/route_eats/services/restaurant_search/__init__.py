"""Finding restaurants spread along a driving route."""

from .detour import estimate_detours
from .normalizer import convert_price_level, normalize_place, normalize_places
from .segmenter import per_segment_result_cap, segment_count_for_distance, segment_route
from .selection import (
    apply_filters,
    build_result_message,
    deduplicate,
    select_distributed,
    select_restaurants,
    sort_by_route_position,
)
from .service import RestaurantSearchService, SegmentCandidates, TripPlannerService

__all__ = [
    "RestaurantSearchService",
    "SegmentCandidates",
    "TripPlannerService",
    "apply_filters",
    "build_result_message",
    "convert_price_level",
    "deduplicate",
    "estimate_detours",
    "normalize_place",
    "normalize_places",
    "per_segment_result_cap",
    "segment_count_for_distance",
    "segment_route",
    "select_distributed",
    "select_restaurants",
    "sort_by_route_position",
]
