"""Detour estimates for restaurants along a route.

The estimate is the one-way driving time from the route vertex nearest the
restaurant to the restaurant itself. It is a side-trip time, not the true
added time of an out-and-back stop.
"""

import asyncio
import logging
import math

from route_eats import config
from route_eats.models import Restaurant, RoutePath
from route_eats.services.travel_time import TravelTimeService
from route_eats.utils.geo import nearest_point_on_path

logger = logging.getLogger(__name__)


async def detour_minutes_for(
    restaurant: Restaurant, route: RoutePath, travel_time: TravelTimeService
) -> float:
    """One-way minutes from the route to the restaurant, ``inf`` on failure."""
    try:
        anchor = nearest_point_on_path(route.points, restaurant.location).point
        seconds = await travel_time.travel_time_seconds(anchor, restaurant.location)
        return seconds / 60.0
    except Exception as e:
        logger.warning(f"[DETOUR] Error calculating detour for restaurant {restaurant.id}: {e}")
        return math.inf


async def estimate_detours(
    restaurants: list[Restaurant],
    route: RoutePath,
    travel_time: TravelTimeService,
    batch_size: int | None = None,
) -> list[Restaurant]:
    """Return copies of ``restaurants`` with ``detour_minutes`` set.

    Lookups run concurrently within a batch; batches run one after another
    so at most ``batch_size`` requests are in flight.
    """
    batch_size = batch_size or config.DETOUR_BATCH_SIZE
    estimated: list[Restaurant] = []
    failed = 0

    for start in range(0, len(restaurants), batch_size):
        batch = restaurants[start:start + batch_size]
        minutes = await asyncio.gather(
            *(detour_minutes_for(restaurant, route, travel_time) for restaurant in batch)
        )
        for restaurant, value in zip(batch, minutes):
            if math.isinf(value):
                failed += 1
            estimated.append(restaurant.model_copy(update={"detour_minutes": value}))

    logger.info(f"[DETOUR] Estimated {len(estimated)} detours ({failed} failed)")
    return estimated
