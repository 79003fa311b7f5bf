"""Map raw Google Places records onto ``Restaurant``.

Also places each restaurant on the route: ``distance_from_start`` is the
distance along the route to the route vertex nearest the restaurant.
"""

import logging
from typing import Any

import numpy as np
from numpy.typing import NDArray
from pydantic import ValidationError

from route_eats.models import (
    Coordinates,
    Facilities,
    Location,
    OpeningHours,
    Photo,
    PriceLevel,
    Restaurant,
    Review,
    RoutePath,
)
from route_eats.utils.geo import cumulative_distances, nearest_point_on_path
from route_eats.utils.text import text_of

logger = logging.getLogger(__name__)

PRICE_LEVELS = {
    "PRICE_LEVEL_FREE": PriceLevel.FREE,
    "PRICE_LEVEL_INEXPENSIVE": PriceLevel.INEXPENSIVE,
    "PRICE_LEVEL_MODERATE": PriceLevel.MODERATE,
    "PRICE_LEVEL_EXPENSIVE": PriceLevel.EXPENSIVE,
    "PRICE_LEVEL_VERY_EXPENSIVE": PriceLevel.VERY_EXPENSIVE,
}
DEFAULT_PRICE_LEVEL = PriceLevel.INEXPENSIVE

# Restaurant field -> Places API field
FACILITY_FIELDS = {
    "delivery": "delivery",
    "dine_in": "dineIn",
    "takeout": "takeout",
    "reservable": "reservable",
    "serves_breakfast": "servesBreakfast",
    "serves_lunch": "servesLunch",
    "serves_dinner": "servesDinner",
    "serves_brunch": "servesBrunch",
    "serves_beer": "servesBeer",
    "serves_wine": "servesWine",
    "serves_vegetarian_food": "servesVegetarianFood",
    "outdoor_seating": "outdoorSeating",
    "restroom": "restroom",
}


def convert_price_level(level: Any) -> PriceLevel:
    """Price level from the provider enum string (or a legacy 0-4 int)."""
    if isinstance(level, int) and not isinstance(level, bool) and 0 <= level <= 4:
        return PriceLevel(level)
    if isinstance(level, str):
        return PRICE_LEVELS.get(level, DEFAULT_PRICE_LEVEL)
    return DEFAULT_PRICE_LEVEL


def _photos(raw: list[dict] | None) -> list[Photo]:
    photos = []
    for photo in raw or []:
        if not photo.get("name"):
            continue
        photos.append(Photo(
            name=photo["name"],
            width_px=photo.get("widthPx"),
            height_px=photo.get("heightPx"),
            author_attributions=photo.get("authorAttributions") or [],
            uri=photo["name"],
        ))
    return photos


def _opening_hours(raw: dict | None) -> OpeningHours | None:
    if not raw:
        return None
    return OpeningHours(
        open_now=bool(raw.get("openNow", False)),
        periods=raw.get("periods") or [],
        weekday_descriptions=raw.get("weekdayDescriptions") or [],
    )


def _reviews(raw: list[dict] | None) -> list[Review]:
    return [
        Review(
            name=review.get("name", ""),
            rating=float(review.get("rating") or 0),
            text=review.get("text"),
            author_attribution=review.get("authorAttribution"),
            publish_time=review.get("publishTime"),
            relative_publish_time_description=review.get("relativePublishTimeDescription"),
        )
        for review in raw or []
    ]


def _facilities(place: dict) -> Facilities:
    values = {field: place.get(api_field) for field, api_field in FACILITY_FIELDS.items()}
    accessibility = place.get("accessibilityOptions") or {}
    values["wheelchair_accessible"] = accessibility.get("wheelchairAccessibleEntrance")
    return Facilities(**values)


def normalize_place(
    place: dict,
    route: RoutePath,
    cumulative: NDArray[np.float64] | None = None,
) -> Restaurant | None:
    """Build a ``Restaurant`` from one Places record.

    Returns None for records without an id or a usable location, and for
    records with out-of-range values such as a rating above 5.
    ``detour_minutes`` starts at 0 and is filled in by the detour estimator.
    """
    place_id = place.get("id")
    raw_location = place.get("location") or {}
    try:
        lat = float(raw_location["latitude"])
        lng = float(raw_location["longitude"])
    except (KeyError, TypeError, ValueError):
        logger.info(f"[PLACES] Skipping place without location: {place_id}")
        return None
    if not place_id:
        logger.info("[PLACES] Skipping place without id")
        return None

    if cumulative is None:
        cumulative = cumulative_distances(route.points)
    try:
        nearest = nearest_point_on_path(route.points, Coordinates(lat=lat, lng=lng))
        return Restaurant(
            id=place_id,
            name=text_of(place.get("displayName"), default="Unnamed restaurant"),
            location=Location(lat=lat, lng=lng, address=text_of(place.get("formattedAddress"))),
            rating=float(place.get("rating") or 0.0),
            user_rating_count=int(place.get("userRatingCount") or 0),
            price_level=convert_price_level(place.get("priceLevel")),
            distance_from_start=float(cumulative[nearest.index]),
            detour_minutes=0.0,
            photos=_photos(place.get("photos")),
            reviews=_reviews(place.get("reviews")),
            phone_number=place.get("internationalPhoneNumber") or place.get("nationalPhoneNumber"),
            website_uri=place.get("websiteUri"),
            regular_opening_hours=_opening_hours(place.get("regularOpeningHours")),
            current_opening_hours=_opening_hours(place.get("currentOpeningHours")),
            facilities=_facilities(place),
            price_range=place.get("priceRange"),
            business_status=place.get("businessStatus"),
            types=place.get("types") or [],
        )
    except ValidationError as e:
        logger.warning(f"[PLACES] Skipping invalid place {place_id}: {e.error_count()} bad fields")
        return None


def normalize_places(places: list[dict], route: RoutePath) -> list[Restaurant]:
    cumulative = cumulative_distances(route.points)
    restaurants = []
    for place in places:
        restaurant = normalize_place(place, route, cumulative)
        if restaurant is not None:
            restaurants.append(restaurant)
    return restaurants
