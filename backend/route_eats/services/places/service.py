"""Google Places API (New) client.

Search Along Route takes an encoded polyline as the spatial filter and
returns raw place records; mapping them onto ``Restaurant`` is the
normalizer's job.
"""

import logging
from abc import ABC, abstractmethod

import httpx

from route_eats import config
from route_eats.services.http import SharedClientMixin

logger = logging.getLogger(__name__)

SEARCH_FIELDS = (
    "id",
    "displayName",
    "location",
    "formattedAddress",
    "addressComponents",
    "plusCode",
    "rating",
    "userRatingCount",
    "priceLevel",
    "priceRange",
    "photos",
    "reviews",
    "internationalPhoneNumber",
    "nationalPhoneNumber",
    "websiteUri",
    "regularOpeningHours",
    "currentOpeningHours",
    "businessStatus",
    "types",
    "delivery",
    "dineIn",
    "takeout",
    "reservable",
    "servesBreakfast",
    "servesLunch",
    "servesDinner",
    "servesBrunch",
    "servesBeer",
    "servesWine",
    "servesVegetarianFood",
    "outdoorSeating",
    "restroom",
    "accessibilityOptions",
)


class PlacesSearchService(ABC):
    """Abstract base class for points-of-interest providers."""

    @abstractmethod
    async def search_along_route(
        self, encoded_polyline: str, max_results: int, text_query: str
    ) -> list[dict]:
        """Raw place records matching ``text_query`` along the polyline."""
        ...

    @abstractmethod
    async def get_place_details(self, place_id: str) -> dict:
        ...

    @abstractmethod
    async def get_photo_uri(self, photo_name: str, max_width_px: int = 800) -> str:
        ...


class GooglePlacesService(SharedClientMixin, PlacesSearchService):
    """Places API (New): Text Search with searchAlongRouteParameters."""

    PLACES_URL = "https://places.googleapis.com/v1/places"
    MEDIA_URL = "https://places.googleapis.com/v1"

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        language_code: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or config.GOOGLE_MAPS_API_KEY
        if not self._api_key:
            raise ValueError("GOOGLE_MAPS_API_KEY not provided")
        self._timeout = timeout or config.GOOGLE_TIMEOUT_SECONDS
        self._language_code = language_code or config.PLACES_LANGUAGE_CODE
        self._transport = transport
        self._headers = {"X-Goog-Api-Key": self._api_key}

    async def search_along_route(
        self, encoded_polyline: str, max_results: int, text_query: str
    ) -> list[dict]:
        payload = await self._request_json(
            "POST",
            f"{self.PLACES_URL}:searchText",
            json={
                "textQuery": text_query,
                "searchAlongRouteParameters": {
                    "polyline": {"encodedPolyline": encoded_polyline},
                },
                "maxResultCount": max_results,
                "languageCode": self._language_code,
            },
            headers={"X-Goog-FieldMask": ",".join(f"places.{f}" for f in SEARCH_FIELDS)},
        )
        return payload.get("places") or []

    async def get_place_details(self, place_id: str) -> dict:
        if not place_id or not place_id.strip():
            raise ValueError("place_id cannot be empty")
        return await self._request_json(
            "GET",
            f"{self.PLACES_URL}/{place_id.strip()}",
            params={"languageCode": self._language_code},
            headers={"X-Goog-FieldMask": "*"},
        )

    async def get_photo_uri(self, photo_name: str, max_width_px: int = 800) -> str:
        """Resolve a photo resource name (``places/{id}/photos/{ref}``) to a URI."""
        if not photo_name or not photo_name.startswith("places/"):
            raise ValueError(f"Invalid photo name: {photo_name}")
        payload = await self._request_json(
            "GET",
            f"{self.MEDIA_URL}/{photo_name}/media",
            params={"maxWidthPx": max_width_px, "skipHttpRedirect": "true"},
        )
        uri = payload.get("photoUri")
        if not uri:
            raise ValueError(f"No photo found for {photo_name}")
        return uri
