"""Route providers: Google Directions (primary) and OSRM (free fallback).

Both return a ``RoutePath`` built from the route's overview polyline. The
path's total distance is recomputed from the decoded points so that it
always equals the sum of its edges.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
import polyline

from route_eats import config
from route_eats.exceptions import ExternalServiceError, NoRouteFoundError
from route_eats.models import Coordinates, RoutePath
from route_eats.services.http import SharedClientMixin

logger = logging.getLogger(__name__)


class RouteProviderService(ABC):
    """Abstract base class for driving route providers."""

    @abstractmethod
    async def get_route(self, origin: Coordinates, destination: Coordinates) -> RoutePath:
        """Fetch a driving route.

        Raises:
            NoRouteFoundError: If the provider has no usable route.
            ExternalServiceError: If the provider cannot be reached.
        """
        ...

    @staticmethod
    def _path_from_polyline(encoded: str, duration_seconds: float | None) -> RoutePath:
        points = [Coordinates(lat=lat, lng=lng) for lat, lng in polyline.decode(encoded)]
        if len(points) < 2:
            raise NoRouteFoundError("Route geometry unavailable")
        route = RoutePath.from_points(points, duration_seconds=duration_seconds)
        logger.info(
            f"[ROUTE] {len(points)} points, {route.total_distance_meters / 1000:.1f}km"
            + (f", {duration_seconds / 60:.0f}min" if duration_seconds else "")
        )
        return route


class GoogleDirectionsService(SharedClientMixin, RouteProviderService):
    """Google Directions API, driving mode."""

    DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or config.GOOGLE_MAPS_API_KEY
        if not self._api_key:
            raise ValueError("GOOGLE_MAPS_API_KEY not provided")
        self._timeout = timeout or config.GOOGLE_TIMEOUT_SECONDS
        self._transport = transport

    async def get_route(self, origin: Coordinates, destination: Coordinates) -> RoutePath:
        payload = await self._request_json(
            "GET",
            self.DIRECTIONS_URL,
            params={
                "origin": f"{origin.lat},{origin.lng}",
                "destination": f"{destination.lat},{destination.lng}",
                "mode": "driving",
                "alternatives": "false",
                "key": self._api_key,
            },
        )
        return self._parse_response(payload)

    def _parse_response(self, payload: Any) -> RoutePath:
        status = payload.get("status")
        if status in ("ZERO_RESULTS", "NOT_FOUND"):
            raise NoRouteFoundError("No route found between the specified locations")
        if status != "OK":
            raise ExternalServiceError(f"Directions request failed: {status}")

        routes = payload.get("routes") or []
        if not routes:
            raise NoRouteFoundError("No route found between the specified locations")

        first = routes[0]
        encoded = (first.get("overview_polyline") or {}).get("points", "")
        duration = sum(
            float((leg.get("duration") or {}).get("value", 0)) for leg in first.get("legs", [])
        )
        return self._path_from_polyline(encoded, duration or None)


class OSRMDirectionsService(SharedClientMixin, RouteProviderService):
    """OSRM route service, car profile."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or config.OSRM_BASE_URL).rstrip("/")
        self._timeout = timeout or config.OSRM_TIMEOUT_SECONDS
        self._transport = transport

    async def get_route(self, origin: Coordinates, destination: Coordinates) -> RoutePath:
        coords = f"{origin.lng},{origin.lat};{destination.lng},{destination.lat}"
        payload = await self._request_json(
            "GET",
            f"{self._base_url}/route/v1/driving/{coords}",
            params={"overview": "full", "geometries": "polyline", "steps": "false"},
        )
        if payload.get("code") != "Ok" or not payload.get("routes"):
            logger.info(f"[ROUTE] OSRM returned no route: {payload.get('code')}")
            raise NoRouteFoundError("No route found between the specified locations")

        route_data = payload["routes"][0]
        duration = route_data.get("duration")
        return self._path_from_polyline(
            route_data.get("geometry", ""), float(duration) if duration else None
        )


def create_route_provider(provider: str | None = None) -> RouteProviderService:
    """Build the configured route provider (``google`` or ``osrm``)."""
    provider = (provider or config.ROUTE_PROVIDER).lower()
    if provider == "google":
        return GoogleDirectionsService()
    if provider == "osrm":
        return OSRMDirectionsService()
    raise ValueError(f"Unknown route provider: {provider}")
