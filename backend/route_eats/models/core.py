"""Core data models for Route Eats.

Pydantic models for coordinates, driving routes, route segments, restaurants
found along a route, and the options that drive a restaurant search.
"""

from enum import Enum
from typing import Optional, Union

import polyline
from pydantic import BaseModel, ConfigDict, Field, model_validator


class Coordinates(BaseModel):
    """Geographic coordinates with validation.

    Latitude must be between -90 and 90 degrees.
    Longitude must be between -180 and 180 degrees.
    """

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lng: float = Field(..., ge=-180, le=180, description="Longitude in degrees")


class Location(Coordinates):
    """A geocoded point with its canonical address."""

    address: str = Field(default="", description="Formatted address")


class Bounds(BaseModel):
    """Bounding box of a route."""

    northeast: Coordinates
    southwest: Coordinates


class RoutePath(BaseModel):
    """A driving route decoded to points.

    ``total_distance_meters`` is always the sum of great-circle distances
    between consecutive points, in order; a value sent by a client is
    replaced on validation. ``polyline`` is the encoded form of ``points``
    for re-submission to providers.
    """

    points: list[Coordinates] = Field(..., min_length=2)
    total_distance_meters: float = Field(0.0, ge=0)
    polyline: str = Field(..., description="Encoded polyline of the points")
    duration_seconds: Optional[float] = Field(
        None, ge=0, description="Provider travel time for the whole route"
    )
    bounds: Optional[Bounds] = None

    @classmethod
    def from_points(
        cls,
        points: list[Coordinates],
        duration_seconds: float | None = None,
    ) -> "RoutePath":
        lats = [p.lat for p in points]
        lngs = [p.lng for p in points]
        bounds = None
        if points:
            bounds = Bounds(
                northeast=Coordinates(lat=max(lats), lng=max(lngs)),
                southwest=Coordinates(lat=min(lats), lng=min(lngs)),
            )
        return cls(
            points=points,
            polyline=polyline.encode([(p.lat, p.lng) for p in points]),
            duration_seconds=duration_seconds,
            bounds=bounds,
        )

    @model_validator(mode="after")
    def _measure_points(self) -> "RoutePath":
        from route_eats.utils.geo import path_length

        self.total_distance_meters = path_length(self.points)
        return self


class RouteSegment(BaseModel):
    """A contiguous slice ``[start_distance, end_distance)`` of a route."""

    index: int = Field(..., ge=0)
    start_distance: float = Field(..., ge=0, description="Meters from route start")
    end_distance: float = Field(..., ge=0, description="Meters from route start")
    path: RoutePath

    @property
    def polyline(self) -> str:
        return self.path.polyline

    @property
    def length(self) -> float:
        return self.end_distance - self.start_distance


class PriceLevel(int, Enum):
    """Price level indicators, matching Google Places API values."""

    FREE = 0
    INEXPENSIVE = 1
    MODERATE = 2
    EXPENSIVE = 3
    VERY_EXPENSIVE = 4


class LocalizedString(BaseModel):
    """Provider text with its language, e.g. ``{"text": ..., "languageCode": "en"}``."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = ""
    language_code: Optional[str] = Field(None, alias="languageCode")


# Providers send either a plain string or a localized object for the same field
LocalizedText = Union[str, LocalizedString]


class OpeningHours(BaseModel):
    """Opening hours information for a restaurant."""

    open_now: bool = Field(False, description="Whether the place is currently open")
    periods: list[dict] = Field(default_factory=list, description="Opening periods")
    weekday_descriptions: list[str] = Field(
        default_factory=list, description="Human-readable opening hours by day"
    )


class Photo(BaseModel):
    """Photo reference; ``uri`` holds the provider resource name until resolved."""

    name: str
    width_px: Optional[int] = None
    height_px: Optional[int] = None
    author_attributions: list[dict] = Field(default_factory=list)
    uri: Optional[str] = None


class Review(BaseModel):
    """A review as delivered by the places provider."""

    name: str = ""
    rating: float = 0.0
    text: Optional[LocalizedText] = None
    author_attribution: Optional[dict] = None
    publish_time: Optional[str] = None
    relative_publish_time_description: Optional[str] = None


class Facilities(BaseModel):
    """Service and amenity flags; ``None`` means the provider did not say."""

    delivery: Optional[bool] = None
    dine_in: Optional[bool] = None
    takeout: Optional[bool] = None
    reservable: Optional[bool] = None
    serves_breakfast: Optional[bool] = None
    serves_lunch: Optional[bool] = None
    serves_dinner: Optional[bool] = None
    serves_brunch: Optional[bool] = None
    serves_beer: Optional[bool] = None
    serves_wine: Optional[bool] = None
    serves_vegetarian_food: Optional[bool] = None
    outdoor_seating: Optional[bool] = None
    restroom: Optional[bool] = None
    wheelchair_accessible: Optional[bool] = None


class Restaurant(BaseModel):
    """A restaurant candidate found along a route.

    Only ``rating``, ``detour_minutes`` and ``distance_from_start`` drive
    selection; the descriptive fields are passed through for display.

    ``distance_from_start`` is measured along the route up to the route
    vertex nearest the restaurant, not in a straight line from the origin.
    ``detour_minutes`` is the estimated one-way drive from that vertex to the
    restaurant, ``inf`` when the lookup failed.
    """

    id: str = Field(..., min_length=1, description="Provider place identifier")
    name: str = Field(..., description="Display name")
    location: Location
    rating: float = Field(0.0, ge=0, le=5, description="Average rating, 0 if unknown")
    user_rating_count: int = Field(0, ge=0)
    price_level: PriceLevel = PriceLevel.INEXPENSIVE
    distance_from_start: float = Field(0.0, ge=0, description="Meters along the route")
    detour_minutes: float = Field(0.0, ge=0, description="One-way side-trip minutes")

    photos: list[Photo] = Field(default_factory=list)
    reviews: list[Review] = Field(default_factory=list)
    phone_number: Optional[str] = None
    website_uri: Optional[str] = None
    regular_opening_hours: Optional[OpeningHours] = None
    current_opening_hours: Optional[OpeningHours] = None
    facilities: Optional[Facilities] = None
    price_range: Optional[dict] = None
    business_status: Optional[str] = None
    types: list[str] = Field(default_factory=list)


class SearchOptions(BaseModel):
    """Filters for a restaurant search.

    ``max_stops`` of ``None`` or ``0`` means no stop cap.
    """

    max_stops: Optional[int] = Field(None, ge=0, le=50)
    min_rating: float = Field(0.0, ge=0, le=5)
    max_detour_minutes: float = Field(10.0, gt=0, le=240)
    consider_detour: bool = False

    @property
    def stop_cap(self) -> int | None:
        return self.max_stops or None


class SearchResult(BaseModel):
    """Restaurants selected along a route plus a summary for display."""

    restaurants: list[Restaurant] = Field(default_factory=list)
    message: str


class RouteRequest(BaseModel):
    """A possibly-partial search drafted from conversation.

    It has to be confirmed by the user before it runs.
    """

    origin: Optional[str] = None
    destination: Optional[str] = None
    stops: Optional[int] = Field(None, ge=0, le=50)
    rating: Optional[float] = Field(None, ge=0, le=5)
    max_detour_minutes: Optional[float] = Field(None, gt=0, le=240)
    needs_confirmation: bool = True

    def to_search_options(self) -> SearchOptions:
        fields: dict = {
            "max_stops": self.stops,
            "min_rating": self.rating or 0.0,
            "consider_detour": self.max_detour_minutes is not None,
        }
        if self.max_detour_minutes is not None:
            fields["max_detour_minutes"] = self.max_detour_minutes
        return SearchOptions(**fields)


class TripPlan(BaseModel):
    """Geocoded endpoints, the driving route between them and what was found."""

    origin: Location
    destination: Location
    route: RoutePath
    restaurants: list[Restaurant] = Field(default_factory=list)
    message: str


class ConversationContext(BaseModel):
    """What a chat session knows: the current route and what was found on it."""

    origin: Optional[str] = None
    destination: Optional[str] = None
    pending_request: Optional[RouteRequest] = None
    restaurants: list[Restaurant] = Field(default_factory=list)


class ReviewSourceName(str, Enum):
    GOOGLE = "Google"
    YELP = "Yelp"
    TRIPADVISOR = "TripAdvisor"


class AggregatedReview(BaseModel):
    """A review from any source, flattened for display."""

    id: str
    source: ReviewSourceName
    rating: float = 0.0
    text: str = ""
    date: Optional[str] = Field(None, description="Publish time as sent by the source")
    author_name: str = "Anonymous"
    relative_time: Optional[str] = None
