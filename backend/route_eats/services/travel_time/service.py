"""Travel-time providers used for detour estimates.

- GoogleDistanceMatrixService: Google Distance Matrix API, driving
- OSRMTravelTimeService:       OSRM table service, car profile
"""

import logging
from abc import ABC, abstractmethod

import httpx

from route_eats import config
from route_eats.exceptions import ExternalServiceError
from route_eats.models import Coordinates
from route_eats.services.http import SharedClientMixin

logger = logging.getLogger(__name__)


class TravelTimeService(ABC):
    """Abstract base class for point-to-point travel time."""

    @abstractmethod
    async def travel_time_seconds(self, origin: Coordinates, destination: Coordinates) -> float:
        """Driving duration in seconds from origin to destination.

        Raises:
            ExternalServiceError: If no duration could be obtained.
        """
        ...


class GoogleDistanceMatrixService(SharedClientMixin, TravelTimeService):
    """Google Distance Matrix API with a single origin and destination."""

    DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"

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

    async def travel_time_seconds(self, origin: Coordinates, destination: Coordinates) -> float:
        payload = await self._request_json(
            "GET",
            self.DISTANCE_MATRIX_URL,
            params={
                "origins": f"{origin.lat},{origin.lng}",
                "destinations": f"{destination.lat},{destination.lng}",
                "mode": "driving",
                "units": "metric",
                "key": self._api_key,
            },
        )
        if payload.get("status") != "OK":
            raise ExternalServiceError(f"Distance matrix failed: {payload.get('status')}")
        try:
            element = payload["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError) as exc:
            raise ExternalServiceError("Distance matrix response has no elements") from exc
        if element.get("status") != "OK":
            raise ExternalServiceError(f"Failed to calculate travel time: {element.get('status')}")
        return float(element["duration"]["value"])


class OSRMTravelTimeService(SharedClientMixin, TravelTimeService):
    """OSRM table service restricted to one source and one destination."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or config.OSRM_BASE_URL).rstrip("/")
        self._timeout = timeout or config.OSRM_TIMEOUT_SECONDS
        self._transport = transport

    async def travel_time_seconds(self, origin: Coordinates, destination: Coordinates) -> float:
        coords = f"{origin.lng},{origin.lat};{destination.lng},{destination.lat}"
        payload = await self._request_json(
            "GET",
            f"{self._base_url}/table/v1/driving/{coords}",
            params={"sources": "0", "destinations": "1", "annotations": "duration"},
        )
        if payload.get("code") != "Ok":
            raise ExternalServiceError(f"OSRM table failed: {payload.get('code')}")
        try:
            duration = payload["durations"][0][0]
        except (KeyError, IndexError, TypeError) as exc:
            raise ExternalServiceError("OSRM table response has no durations") from exc
        if duration is None:
            raise ExternalServiceError("OSRM found no path to destination")
        return float(duration)


def create_travel_time_service(provider: str | None = None) -> TravelTimeService:
    provider = (provider or config.ROUTE_PROVIDER).lower()
    if provider == "google":
        return GoogleDistanceMatrixService()
    if provider == "osrm":
        return OSRMTravelTimeService()
    raise ValueError(f"Unknown travel time provider: {provider}")
