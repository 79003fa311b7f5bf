"""Restaurant search along a driving route.

``RestaurantSearchService`` finds restaurants along an already-fetched route:
segment the route, search each segment, normalize, optionally estimate
detours, then select. ``TripPlannerService`` runs the whole trip from two
addresses: geocode both, fetch the route, search.

All providers are passed in, so both services run against fakes in tests.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from route_eats import config
from route_eats.exceptions import ExternalServiceError, InvalidLocationError
from route_eats.models import (
    Location,
    Restaurant,
    RoutePath,
    RouteSegment,
    SearchOptions,
    SearchResult,
    TripPlan,
)
from route_eats.services.directions import RouteProviderService
from route_eats.services.geocoding import GeocoderService
from route_eats.services.places import PlacesSearchService
from route_eats.services.travel_time import TravelTimeService

from .detour import estimate_detours
from .normalizer import normalize_places
from .segmenter import per_segment_result_cap, segment_route
from .selection import (
    build_result_message,
    deduplicate,
    select_restaurants,
)

logger = logging.getLogger(__name__)

NO_ROUTE_MESSAGE = "No restaurants found: no usable route between these locations."


@dataclass
class SegmentCandidates:
    """Raw places found for one route segment."""
    segment: RouteSegment
    places: list[dict] = field(default_factory=list)


class RestaurantSearchService:
    """Find restaurants spread along a route."""

    def __init__(
        self,
        places: PlacesSearchService,
        travel_time: TravelTimeService | None = None,
        text_query: str | None = None,
        result_cap: int | None = None,
        per_segment_cap: int | None = None,
        detour_batch_size: int | None = None,
    ) -> None:
        self._places = places
        self._travel_time = travel_time
        self._text_query = text_query or config.PLACES_TEXT_QUERY
        self._result_cap = result_cap or config.PLACES_RESULT_CAP
        self._per_segment_cap = per_segment_cap or config.PLACES_PER_SEGMENT_CAP
        self._detour_batch_size = detour_batch_size or config.DETOUR_BATCH_SIZE

    async def find_restaurants_along_route(
        self,
        route: RoutePath | None,
        origin: Location | None,
        options: SearchOptions,
    ) -> SearchResult:
        """Restaurants along ``route``, ordered by distance from its start.

        ``distance_from_start`` is measured along the route from its first
        point; ``origin`` is only used for logging.

        Raises:
            ExternalServiceError: If the places search failed for every
                segment, or detours were requested without a travel-time
                provider.
        """
        if route is None or len(route.points) < 2:
            logger.info("[SEARCH] No usable route, skipping search")
            return SearchResult(restaurants=[], message=NO_ROUTE_MESSAGE)

        logger.info(
            f"[SEARCH] Searching {route.total_distance_meters / 1000:.1f}km route"
            f" from {origin.address if origin and origin.address else 'route start'}"
        )

        segments = segment_route(route)
        if not segments:
            return SearchResult(restaurants=[], message=NO_ROUTE_MESSAGE)

        found = await self.search_segments(segments)
        raw_places = [place for result in found for place in result.places]

        candidates = deduplicate(normalize_places(raw_places, route))
        logger.info(
            f"[SEARCH] {len(raw_places)} places, {len(candidates)} unique restaurants"
        )

        if options.consider_detour and candidates:
            candidates = await self._estimate_detours(candidates, route)

        restaurants = select_restaurants(candidates, route.total_distance_meters, options)
        return SearchResult(
            restaurants=restaurants,
            message=build_result_message(len(restaurants), options),
        )

    async def search_segments(self, segments: list[RouteSegment]) -> list[SegmentCandidates]:
        """Search all segments concurrently, keeping each result with its segment.

        A failing segment is logged and contributes nothing.
        """
        max_results = per_segment_result_cap(
            len(segments), self._result_cap, self._per_segment_cap
        )
        outcomes = await asyncio.gather(
            *(
                self._places.search_along_route(segment.polyline, max_results, self._text_query)
                for segment in segments
            ),
            return_exceptions=True,
        )

        found: list[SegmentCandidates] = []
        for segment, outcome in zip(segments, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.warning(f"[SEGMENT] Search failed for segment {segment.index + 1}: {outcome}")
                continue
            logger.info(
                f"[SEGMENT] Segment {segment.index + 1}: "
                f"{segment.start_distance / 1000:.1f}-{segment.end_distance / 1000:.1f}km, "
                f"{len(outcome)} places"
            )
            found.append(SegmentCandidates(segment=segment, places=list(outcome)))

        if not found:
            raise ExternalServiceError("Restaurant search failed for every route segment")
        return found

    async def _estimate_detours(
        self, candidates: list[Restaurant], route: RoutePath
    ) -> list[Restaurant]:
        if self._travel_time is None:
            raise ExternalServiceError("No travel time provider configured for detour estimates")
        return await estimate_detours(
            candidates, route, self._travel_time, self._detour_batch_size
        )


class TripPlannerService:
    """Addresses in, route and restaurants out."""

    def __init__(
        self,
        geocoder: GeocoderService,
        route_provider: RouteProviderService,
        search: RestaurantSearchService | None = None,
    ) -> None:
        self._geocoder = geocoder
        self._route_provider = route_provider
        self._search = search

    async def plan_route(
        self, origin_address: str | None, destination_address: str | None
    ) -> tuple[Location, Location, RoutePath]:
        """Geocode both endpoints and fetch the driving route between them.

        Raises:
            InvalidLocationError: If an address is missing or cannot be geocoded.
            NoRouteFoundError: If there is no drivable route.
            ExternalServiceError: If a provider fails.
        """
        if not origin_address or not origin_address.strip():
            raise InvalidLocationError("Origin address is required")
        if not destination_address or not destination_address.strip():
            raise InvalidLocationError("Destination address is required")

        origin, destination = await asyncio.gather(
            self._geocoder.geocode(origin_address),
            self._geocoder.geocode(destination_address),
        )
        route = await self._route_provider.get_route(origin, destination)
        logger.info(
            f"[ROUTE] {origin.address} -> {destination.address}: "
            f"{route.total_distance_meters / 1000:.1f}km, {len(route.points)} points"
        )
        return origin, destination, route

    async def plan(
        self,
        origin_address: str | None,
        destination_address: str | None,
        options: SearchOptions,
    ) -> TripPlan:
        if self._search is None:
            raise ExternalServiceError("No restaurant search configured")
        origin, destination, route = await self.plan_route(origin_address, destination_address)
        result = await self._search.find_restaurants_along_route(route, origin, options)
        return TripPlan(
            origin=origin,
            destination=destination,
            route=route,
            restaurants=result.restaurants,
            message=result.message,
        )
