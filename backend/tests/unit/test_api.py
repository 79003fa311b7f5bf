"""API tests with FastAPI's TestClient and dependency overrides."""

import pytest
import redis.asyncio as redis
from fastapi.testclient import TestClient

from route_eats.api import routes
from route_eats.main import app
from route_eats.models import Location, Review, RouteRequest
from route_eats.services.cache import CacheService
from route_eats.services.conversation import ConversationService
from route_eats.services.restaurant_search import RestaurantSearchService, TripPlannerService
from route_eats.services.reviews import GoogleReviewSource, ReviewAggregator

from fakes import FakeGeocoder, FakePlacesService, FakeRouteProvider, meridian_route, raw_place

client = TestClient(app)

PLACES = [raw_place("p1", km=6.0, rating=4.7), raw_place("p2", km=1.5, rating=3.9)]


class MemoryCache(CacheService):
    def __init__(self, broken: bool = False) -> None:
        self.data: dict = {}
        self.broken = broken

    async def get(self, key):
        if self.broken:
            raise redis.ConnectionError("redis down")
        return self.data.get(key)

    async def set(self, key, value, ttl_seconds=None):
        if self.broken:
            raise redis.ConnectionError("redis down")
        self.data[key] = value

    async def invalidate(self, pattern):
        return 0

    async def delete(self, key):
        return self.data.pop(key, None) is not None


class EchoAssistant:
    async def extract_route_request(self, text, context=None):
        if " to " in text:
            origin, destination = text.split(" to ", 1)
            return RouteRequest(origin=origin, destination=destination)
        return None

    async def answer_question(self, text, restaurants):
        return "Try the pie."


def _planner() -> TripPlannerService:
    geocoder = FakeGeocoder({
        "start": Location(lat=0.0, lng=0.0, address="Start, CA"),
        "end": Location(lat=0.07, lng=0.0, address="End, CA"),
    })
    return TripPlannerService(
        geocoder,
        FakeRouteProvider(meridian_route(8)),
        RestaurantSearchService(FakePlacesService(PLACES)),
    )


@pytest.fixture(autouse=True)
def overrides():
    planner = _planner()
    places = FakePlacesService(PLACES)
    app.dependency_overrides[routes.get_trip_planner] = lambda: planner
    app.dependency_overrides[routes.get_route_planner] = lambda: planner
    app.dependency_overrides[routes.get_geocoder] = lambda: planner._geocoder
    app.dependency_overrides[routes.get_restaurant_search_service] = (
        lambda: RestaurantSearchService(places)
    )
    app.dependency_overrides[routes.get_places_service] = lambda: places
    app.dependency_overrides[routes.get_cache_service] = MemoryCache
    app.dependency_overrides[routes.get_review_aggregator] = (
        lambda: ReviewAggregator([GoogleReviewSource()])
    )
    app.dependency_overrides[routes.get_conversation_service] = lambda: None
    yield
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestGeocodeAndRoute:
    """Tests for geocode and route endpoints."""

    def test_geocode(self) -> None:
        data = client.post("/api/geocode", json={"address": "start"}).json()
        assert data["success"] is True
        assert data["location"]["address"] == "Start, CA"

    def test_geocode_unknown(self) -> None:
        data = client.post("/api/geocode", json={"address": "atlantis"}).json()
        assert data["success"] is False
        assert data["error"]["code"] == "INVALID_INPUT"

    def test_route(self) -> None:
        data = client.post("/api/route", json={"origin": "start", "destination": "end"}).json()
        assert data["success"] is True
        assert len(data["route"]["points"]) == 41
        assert data["route"]["polyline"]


class TestRestaurantSearch:
    """Tests for the search endpoints."""

    def test_search(self) -> None:
        response = client.post(
            "/api/restaurants/search",
            json={"origin": "start", "destination": "end", "min_rating": 4.0},
        )
        data = response.json()
        assert response.status_code == 200
        assert data["success"] is True
        assert [r["id"] for r in data["restaurants"]] == ["p1"]
        assert data["message"] == "Found 1 restaurant rated 4+ stars along your route."
        assert data["origin"]["address"] == "Start, CA"

    def test_search_sorted_by_route_position(self) -> None:
        data = client.post(
            "/api/restaurants/search", json={"origin": "start", "destination": "end"}
        ).json()
        assert [r["id"] for r in data["restaurants"]] == ["p2", "p1"]

    def test_missing_origin(self) -> None:
        data = client.post(
            "/api/restaurants/search", json={"origin": "", "destination": "end"}
        ).json()
        assert data["success"] is False
        assert data["error"]["code"] == "INVALID_INPUT"
        assert data["error"]["recovery_options"][0]["action"] == "edit_locations"

    def test_invalid_options_rejected(self) -> None:
        response = client.post(
            "/api/restaurants/search",
            json={"origin": "start", "destination": "end", "min_rating": 9},
        )
        assert response.status_code == 422

    def test_along_route(self) -> None:
        route = meridian_route(8).model_dump(mode="json")
        data = client.post(
            "/api/restaurants/along-route",
            json={"route": route, "options": {"max_stops": 1}},
        ).json()
        assert data["success"] is True
        assert [r["id"] for r in data["restaurants"]] == ["p1"]
        assert data["message"].endswith("limited to 1 stops.")

    def test_along_route_ignores_declared_distance(self) -> None:
        route = meridian_route(8).model_dump(mode="json")
        route["total_distance_meters"] = 500
        data = client.post("/api/restaurants/along-route", json={"route": route}).json()
        assert data["route"]["total_distance_meters"] == pytest.approx(8000.0)
        assert [r["id"] for r in data["restaurants"]] == ["p2", "p1"]


class TestPlaces:
    """Tests for place details and photos."""

    def test_details_are_cached(self) -> None:
        cache = MemoryCache()
        app.dependency_overrides[routes.get_cache_service] = lambda: cache
        data = client.get("/api/places/p1").json()
        assert data["success"] is True
        assert data["place"]["id"] == "p1"
        assert cache.data[CacheService.build_place_key("p1", "en")]["id"] == "p1"

    def test_details_survive_cache_outage(self) -> None:
        app.dependency_overrides[routes.get_cache_service] = lambda: MemoryCache(broken=True)
        data = client.get("/api/places/p1").json()
        assert data["success"] is True

    def test_photo(self) -> None:
        data = client.get("/api/places/photo", params={"name": "places/p1/photos/x"}).json()
        assert data["success"] is True
        assert data["uri"].startswith("https://photos.example/places/p1/photos/x")

    def test_bad_photo_name(self) -> None:
        data = client.get("/api/places/photo", params={"name": "nope"}).json()
        assert data["success"] is False
        assert data["error"]["code"] == "INVALID_INPUT"


class TestReviews:
    def test_reviews(self, make_restaurant) -> None:
        restaurant = make_restaurant("a").model_copy(update={"reviews": [
            Review(name="r1", rating=5, text="Great"),
        ]})
        data = client.post(
            "/api/restaurants/reviews", json=restaurant.model_dump(mode="json")
        ).json()
        assert data["success"] is True
        assert data["reviews"][0]["text"] == "Great"
        assert data["sources"] == ["Google"]


class TestChat:
    """Tests for the chat endpoint."""

    def test_unavailable_without_ai(self) -> None:
        data = client.post("/api/chat", json={"session_id": "s", "message": "hi"}).json()
        assert data["success"] is False
        assert data["error"]["code"] == "AI_UNAVAILABLE"

    def test_confirm_then_search(self) -> None:
        conversation = ConversationService(EchoAssistant(), _planner())
        app.dependency_overrides[routes.get_conversation_service] = lambda: conversation

        first = client.post(
            "/api/chat", json={"session_id": "s", "message": "start to end"}
        ).json()
        assert first["reply"]["state"] == "awaiting_confirmation"

        second = client.post("/api/chat", json={"session_id": "s", "message": "yes"}).json()
        assert second["success"] is True
        assert second["reply"]["state"] == "idle"
        assert [r["id"] for r in second["reply"]["plan"]["restaurants"]] == ["p2", "p1"]

    def test_failed_confirmed_search(self) -> None:
        conversation = ConversationService(EchoAssistant(), _planner())
        app.dependency_overrides[routes.get_conversation_service] = lambda: conversation

        client.post("/api/chat", json={"session_id": "s", "message": "start to atlantis"})
        data = client.post("/api/chat", json={"session_id": "s", "message": "yes"}).json()

        assert data["success"] is False
        assert data["error"]["code"] == "INVALID_INPUT"
