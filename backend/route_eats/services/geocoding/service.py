"""Geocoding services.

- GoogleGeocoderService:    Google Geocoding API (needs GOOGLE_MAPS_API_KEY)
- NominatimGeocoderService: OpenStreetMap Nominatim (free, no key)

Both reject empty addresses before any network call and cache results in a
process-level LRU cache keyed by the normalized address.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from route_eats import config
from route_eats.exceptions import ExternalServiceError, InvalidLocationError
from route_eats.models import Location
from route_eats.services.http import SharedClientMixin
from route_eats.utils.cache import LRUCache

logger = logging.getLogger(__name__)


class GeocoderService(ABC):
    """Resolves a free-text address to a ``Location``."""

    def __init__(self, cache: LRUCache[Location] | None = None) -> None:
        self._cache: LRUCache[Location] = cache if cache is not None else LRUCache(
            max_size=config.GEOCODE_CACHE_MAX_SIZE,
            ttl_seconds=config.GEOCODE_CACHE_TTL_SECONDS,
        )

    async def geocode(self, address: str) -> Location:
        """Geocode an address.

        Raises:
            InvalidLocationError: If the address is empty or has no results.
            ExternalServiceError: If the provider cannot be reached.
        """
        query = (address or "").strip()
        if not query:
            raise InvalidLocationError("Address cannot be empty")

        cached = self._cache.get(query)
        if cached is not None:
            return cached

        location = await self._lookup(query)
        logger.info(f"[GEOCODE] {query!r} -> ({location.lat:.5f}, {location.lng:.5f}) {location.address}")
        self._cache.set(query, location)
        return location

    @abstractmethod
    async def _lookup(self, address: str) -> Location:
        """Query the provider for a non-empty address."""
        ...


class GoogleGeocoderService(SharedClientMixin, GeocoderService):
    """Google Geocoding API."""

    GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        cache: LRUCache[Location] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(cache=cache)
        self._api_key = api_key or config.GOOGLE_MAPS_API_KEY
        if not self._api_key:
            raise ValueError("GOOGLE_MAPS_API_KEY not provided")
        self._timeout = timeout or config.GOOGLE_TIMEOUT_SECONDS
        self._transport = transport

    async def _lookup(self, address: str) -> Location:
        payload = await self._request_json(
            "GET", self.GEOCODE_URL, params={"address": address, "key": self._api_key}
        )
        return self._parse_result(payload, address)

    @staticmethod
    def _parse_result(payload: Any, address: str) -> Location:
        status = payload.get("status") if isinstance(payload, dict) else None
        results = payload.get("results") if isinstance(payload, dict) else None
        if status not in (None, "OK", "ZERO_RESULTS"):
            raise ExternalServiceError(f"Geocoding failed for {address!r}: {status}")
        if not results:
            raise InvalidLocationError(f"No results found for address: {address}")

        first = results[0]
        try:
            point = first["geometry"]["location"]
            lat = float(point["lat"])
            lng = float(point["lng"])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidLocationError("Invalid geocoding response") from exc

        return Location(lat=lat, lng=lng, address=first.get("formatted_address") or address)


class NominatimGeocoderService(SharedClientMixin, GeocoderService):
    """OpenStreetMap Nominatim geocoder (1 request/sec usage policy)."""

    NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"

    def __init__(
        self,
        timeout: float = 10.0,
        cache: LRUCache[Location] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(cache=cache)
        self._timeout = timeout
        self._transport = transport
        self._headers = {"User-Agent": "RouteEats/0.1 (route-eats backend)"}

    async def _lookup(self, address: str) -> Location:
        payload = await self._request_json(
            "GET",
            self.NOMINATIM_URL,
            params={"q": address, "format": "json", "limit": 1},
        )
        if not isinstance(payload, list) or not payload:
            raise InvalidLocationError(f"No results found for address: {address}")

        first = payload[0]
        try:
            lat = float(first["lat"])
            lng = float(first["lon"])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidLocationError("Invalid geocoding response") from exc
        return Location(lat=lat, lng=lng, address=first.get("display_name") or address)


def create_geocoder() -> GeocoderService:
    """Google when an API key is configured, Nominatim otherwise."""
    if config.GOOGLE_MAPS_API_KEY:
        return GoogleGeocoderService()
    logger.info("[GEOCODE] No Google key, using Nominatim")
    return NominatimGeocoderService()
