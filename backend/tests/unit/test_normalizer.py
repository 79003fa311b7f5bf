"""Unit tests for normalizing Places records into restaurants."""

import pytest

from route_eats.models import PriceLevel
from route_eats.services.restaurant_search import (
    convert_price_level,
    normalize_place,
    normalize_places,
)


class TestConvertPriceLevel:
    """Tests for price level mapping."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("PRICE_LEVEL_FREE", PriceLevel.FREE),
            ("PRICE_LEVEL_INEXPENSIVE", PriceLevel.INEXPENSIVE),
            ("PRICE_LEVEL_MODERATE", PriceLevel.MODERATE),
            ("PRICE_LEVEL_EXPENSIVE", PriceLevel.EXPENSIVE),
            ("PRICE_LEVEL_VERY_EXPENSIVE", PriceLevel.VERY_EXPENSIVE),
            ("PRICE_LEVEL_UNSPECIFIED", PriceLevel.INEXPENSIVE),
            (None, PriceLevel.INEXPENSIVE),
            (3, PriceLevel.EXPENSIVE),
            (9, PriceLevel.INEXPENSIVE),
        ],
    )
    def test_mapping(self, raw, expected: PriceLevel) -> None:
        assert convert_price_level(raw) == expected


class TestNormalizePlace:
    """Tests for a single Places record."""

    def test_basic_fields(self, make_route, make_raw_place) -> None:
        route = make_route(10)
        restaurant = normalize_place(make_raw_place("abc", km=5, rating=4.6, count=321), route)

        assert restaurant is not None
        assert restaurant.id == "abc"
        assert restaurant.name == "Diner abc"
        assert restaurant.location.address == "abc Route 66"
        assert restaurant.rating == 4.6
        assert restaurant.user_rating_count == 321
        assert restaurant.price_level == PriceLevel.MODERATE
        assert restaurant.detour_minutes == 0.0

    def test_distance_is_along_route_to_nearest_vertex(self, make_route, make_raw_place) -> None:
        # 41 vertices over 10km, so one every 250m; 5km lands on vertex 20
        route = make_route(10)
        restaurant = normalize_place(make_raw_place("abc", km=5.05), route)
        assert restaurant.distance_from_start == pytest.approx(5000.0)

    def test_plain_string_name(self, make_route) -> None:
        place = {
            "id": "p1",
            "displayName": "Joe's",
            "location": {"latitude": 0.01, "longitude": 0.0},
        }
        restaurant = normalize_place(place, make_route(10))
        assert restaurant.name == "Joe's"
        assert restaurant.rating == 0.0
        assert restaurant.price_level == PriceLevel.INEXPENSIVE

    def test_details_pass_through(self, make_route, make_raw_place) -> None:
        place = make_raw_place("abc", km=1)
        place.update({
            "nationalPhoneNumber": "(555) 010-0000",
            "websiteUri": "https://joes.example",
            "photos": [{"name": "places/abc/photos/1", "widthPx": 400, "heightPx": 300}],
            "reviews": [{
                "name": "places/abc/reviews/1",
                "rating": 5,
                "text": {"text": "Great pie", "languageCode": "en"},
                "publishTime": "2024-05-01T12:00:00Z",
            }],
            "regularOpeningHours": {"openNow": True, "weekdayDescriptions": ["Monday: 8-5"]},
            "takeout": True,
            "accessibilityOptions": {"wheelchairAccessibleEntrance": True},
        })
        restaurant = normalize_place(place, make_route(10))

        assert restaurant.phone_number == "(555) 010-0000"
        assert restaurant.website_uri == "https://joes.example"
        assert restaurant.photos[0].uri == "places/abc/photos/1"
        assert restaurant.reviews[0].text.text == "Great pie"
        assert restaurant.regular_opening_hours.open_now is True
        assert restaurant.facilities.takeout is True
        assert restaurant.facilities.wheelchair_accessible is True
        assert restaurant.facilities.delivery is None

    def test_missing_location_is_skipped(self, make_route) -> None:
        assert normalize_place({"id": "x", "displayName": "No Where"}, make_route(10)) is None

    def test_missing_id_is_skipped(self, make_route) -> None:
        place = {"location": {"latitude": 0.01, "longitude": 0.0}}
        assert normalize_place(place, make_route(10)) is None

    def test_normalize_places_drops_bad_records(self, make_route, make_raw_place) -> None:
        places = [make_raw_place("a", km=1), {"id": "bad"}, make_raw_place("b", km=2)]
        restaurants = normalize_places(places, make_route(10))
        assert [r.id for r in restaurants] == ["a", "b"]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"userRatingCount": -1},
            {"rating": 7.5},
            {"location": {"latitude": 95.0, "longitude": 0.0}},
        ],
    )
    def test_out_of_range_record_is_skipped(self, make_route, make_raw_place, overrides) -> None:
        place = {**make_raw_place("bad", km=3), **overrides}
        assert normalize_place(place, make_route(10)) is None

    def test_out_of_range_record_does_not_sink_the_batch(self, make_route, make_raw_place) -> None:
        places = [make_raw_place("a", km=1), {**make_raw_place("bad", km=2), "userRatingCount": -1}]
        restaurants = normalize_places(places, make_route(10))
        assert [r.id for r in restaurants] == ["a"]
