"""Split a route into contiguous segments for per-segment place searches.

The segment count grows with route length so that a results-capped places
search still covers a long route evenly.
"""

import logging
import math

from route_eats.models import RoutePath, RouteSegment
from route_eats.utils.geo import cumulative_distances, sub_path

logger = logging.getLogger(__name__)

# (max route length in meters, segment count); longer routes get MAX_SEGMENTS
SEGMENT_STEPS = (
    (10_000, 2),
    (50_000, 5),
    (100_000, 8),
    (200_000, 12),
)
MAX_SEGMENTS = 15


def segment_count_for_distance(total_meters: float) -> int:
    for max_meters, count in SEGMENT_STEPS:
        if total_meters <= max_meters:
            return count
    return MAX_SEGMENTS


def per_segment_result_cap(segment_count: int, result_cap: int, per_segment_cap: int) -> int:
    """Results requested per segment so no single segment dominates."""
    return max(1, min(per_segment_cap, math.ceil(result_cap / max(1, segment_count))))


def segment_route(route: RoutePath, segment_count: int | None = None) -> list[RouteSegment]:
    """Cut the route into equal-length, non-overlapping segments.

    Segment ``i`` spans ``[i * L, (i + 1) * L)`` with ``L = total / count``;
    the last one ends exactly at the route's total distance. Boundary points
    are interpolated so each segment path starts and ends exactly on its
    range. Segments whose path has fewer than 2 points are dropped.
    """
    cumulative = cumulative_distances(route.points)
    total = float(cumulative[-1])
    count = segment_count or segment_count_for_distance(total)
    length = total / count

    logger.info(
        f"[SEGMENT] Route {total / 1000:.1f}km -> {count} segments of {length / 1000:.1f}km"
    )

    segments: list[RouteSegment] = []
    for index in range(count):
        start = index * length
        end = total if index == count - 1 else min((index + 1) * length, total)
        points = sub_path(route.points, start, end, cumulative)
        if len(points) < 2:
            logger.debug(f"[SEGMENT] Skipping degenerate segment {index + 1}")
            continue
        segments.append(
            RouteSegment(
                index=index,
                start_distance=start,
                end_distance=end,
                path=RoutePath.from_points(points),
            )
        )
    return segments
