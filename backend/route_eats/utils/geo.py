"""Geometry over route polylines.

Distances are great-circle (haversine) distances in meters on a spherical
Earth. A path is a list of ``Coordinates`` in travel order. Per-vertex work
is vectorized with numpy since routes carry hundreds of points.
"""

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from route_eats.models import Coordinates

EARTH_RADIUS_M = 6_371_008.8


@dataclass(frozen=True)
class NearestPoint:
    """Route vertex closest to a target."""
    index: int
    point: Coordinates
    distance_to_target: float


def _haversine_m(lat1, lng1, lat2, lng2):
    """Haversine distance in meters; accepts scalars or numpy arrays."""
    lat1, lng1, lat2, lng2 = (np.radians(v) for v in (lat1, lng1, lat2, lng2))
    a = (
        np.sin((lat2 - lat1) / 2.0) ** 2
        + np.cos(lat1) * np.cos(lat2) * np.sin((lng2 - lng1) / 2.0) ** 2
    )
    return 2.0 * EARTH_RADIUS_M * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def _as_arrays(points: list[Coordinates]) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    lats = np.fromiter((p.lat for p in points), dtype=np.float64, count=len(points))
    lngs = np.fromiter((p.lng for p in points), dtype=np.float64, count=len(points))
    return lats, lngs


def distance_meters(a: Coordinates, b: Coordinates) -> float:
    return float(_haversine_m(a.lat, a.lng, b.lat, b.lng))


def edge_lengths(points: list[Coordinates]) -> NDArray[np.float64]:
    """Length of each consecutive edge of the path."""
    if len(points) < 2:
        return np.zeros(0, dtype=np.float64)
    lats, lngs = _as_arrays(points)
    return _haversine_m(lats[:-1], lngs[:-1], lats[1:], lngs[1:])


def cumulative_distances(points: list[Coordinates]) -> NDArray[np.float64]:
    """Distance along the path to each vertex; the first entry is 0."""
    if not points:
        return np.zeros(0, dtype=np.float64)
    return np.concatenate(([0.0], np.cumsum(edge_lengths(points))))


def path_length(points: list[Coordinates]) -> float:
    # Same summation order as cumulative_distances so the two agree exactly
    if len(points) < 2:
        return 0.0
    return float(cumulative_distances(points)[-1])


def nearest_point_on_path(points: list[Coordinates], target: Coordinates) -> NearestPoint:
    """Find the path vertex nearest to ``target``.

    Only vertices are considered, not positions along edges. Ties go to the
    earliest vertex.
    """
    if not points:
        raise ValueError("Path has no points")
    lats, lngs = _as_arrays(points)
    distances = _haversine_m(lats, lngs, target.lat, target.lng)
    index = int(np.argmin(distances))
    return NearestPoint(index=index, point=points[index], distance_to_target=float(distances[index]))


def interpolate(a: Coordinates, b: Coordinates, fraction: float) -> Coordinates:
    """Point at ``fraction`` of the way along the great circle from a to b."""
    fraction = min(1.0, max(0.0, fraction))
    lat1, lng1 = math.radians(a.lat), math.radians(a.lng)
    lat2, lng2 = math.radians(b.lat), math.radians(b.lng)

    angle = distance_meters(a, b) / EARTH_RADIUS_M
    if angle < 1e-12:
        return Coordinates(
            lat=a.lat + (b.lat - a.lat) * fraction,
            lng=a.lng + (b.lng - a.lng) * fraction,
        )

    sin_angle = math.sin(angle)
    wa = math.sin((1.0 - fraction) * angle) / sin_angle
    wb = math.sin(fraction * angle) / sin_angle

    x = wa * math.cos(lat1) * math.cos(lng1) + wb * math.cos(lat2) * math.cos(lng2)
    y = wa * math.cos(lat1) * math.sin(lng1) + wb * math.cos(lat2) * math.sin(lng2)
    z = wa * math.sin(lat1) + wb * math.sin(lat2)

    lat = math.degrees(math.atan2(z, math.sqrt(x * x + y * y)))
    lng = math.degrees(math.atan2(y, x))
    return Coordinates(lat=lat, lng=lng)


def point_at_distance(
    points: list[Coordinates],
    target_distance: float,
    cumulative: NDArray[np.float64] | None = None,
) -> Coordinates:
    """Point ``target_distance`` meters along the path.

    Walks the cumulative edge lengths to the edge containing the distance and
    interpolates inside it. Distances outside the path clamp to its ends.
    """
    if not points:
        raise ValueError("Path has no points")
    if cumulative is None:
        cumulative = cumulative_distances(points)
    if target_distance <= 0:
        return points[0]
    if target_distance >= cumulative[-1]:
        return points[-1]

    # First vertex strictly beyond the target closes the edge
    end = int(np.searchsorted(cumulative, target_distance, side="right"))
    edge_start = float(cumulative[end - 1])
    edge_length = float(cumulative[end]) - edge_start
    if edge_length <= 0:
        return points[end]
    return interpolate(points[end - 1], points[end], (target_distance - edge_start) / edge_length)


def sub_path(
    points: list[Coordinates],
    start_distance: float,
    end_distance: float,
    cumulative: NDArray[np.float64] | None = None,
) -> list[Coordinates]:
    """Slice of the path between two distances along it.

    The slice begins exactly at ``start_distance`` and ends exactly at
    ``end_distance``, with interpolated boundary points where those fall
    inside an edge. Returns an empty list for an empty or inverted range.
    """
    if len(points) < 2 or end_distance < start_distance:
        return []
    if cumulative is None:
        cumulative = cumulative_distances(points)

    inner = [
        points[i]
        for i in range(len(points))
        if start_distance < cumulative[i] < end_distance
    ]
    return [
        point_at_distance(points, start_distance, cumulative),
        *inner,
        point_at_distance(points, end_distance, cumulative),
    ]
