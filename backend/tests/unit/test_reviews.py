"""Unit tests for review aggregation."""

import httpx
import pytest

from route_eats.models import AggregatedReview, Review, ReviewSourceName
from route_eats.services.reviews import (
    GoogleReviewSource,
    ReviewAggregator,
    ReviewSource,
    TripAdvisorReviewSource,
    YelpReviewSource,
    review_timestamp,
)


class StaticSource(ReviewSource):
    def __init__(self, source, reviews=None, error=None, enabled=True):
        self.source = source
        self.reviews = reviews or []
        self.error = error
        self.enabled = enabled

    def is_enabled(self) -> bool:
        return self.enabled

    async def get_reviews(self, restaurant):
        if self.error:
            raise self.error
        return self.reviews


def _review(review_id: str, date: str | None, source=ReviewSourceName.YELP) -> AggregatedReview:
    return AggregatedReview(id=review_id, source=source, rating=4, date=date)


class TestGoogleReviewSource:
    """Tests for reviews carried on the place record."""

    @pytest.mark.asyncio
    async def test_localized_and_plain_text(self, make_restaurant) -> None:
        restaurant = make_restaurant("a").model_copy(update={"reviews": [
            Review(
                name="places/a/reviews/1",
                rating=5,
                text={"text": "Best burgers", "languageCode": "en"},
                author_attribution={"displayName": "Sam"},
                publish_time="2024-03-01T10:00:00Z",
                relative_publish_time_description="a month ago",
            ),
            Review(rating=3, text="Slow service"),
        ]})

        reviews = await GoogleReviewSource().get_reviews(restaurant)

        assert [r.text for r in reviews] == ["Best burgers", "Slow service"]
        assert reviews[0].author_name == "Sam"
        assert reviews[0].relative_time == "a month ago"
        assert reviews[1].author_name == "Anonymous"
        assert reviews[1].id == "a-google-1"
        assert all(r.source == ReviewSourceName.GOOGLE for r in reviews)


class TestYelpReviewSource:
    """Tests for Yelp Fusion lookups."""

    def test_disabled_without_key(self) -> None:
        assert not YelpReviewSource(api_key="").is_enabled()

    @pytest.mark.asyncio
    async def test_matches_business_then_reads_reviews(self, make_restaurant) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.url.path.endswith("/search"):
                return httpx.Response(200, json={"businesses": [{"id": "biz-1"}]})
            return httpx.Response(200, json={"reviews": [{
                "id": "y1",
                "rating": 4,
                "text": "Good fries",
                "time_created": "2023-12-24 18:30:00",
                "user": {"name": "Alex"},
            }]})

        source = YelpReviewSource(api_key="y", transport=httpx.MockTransport(handler))
        reviews = await source.get_reviews(make_restaurant("a"))

        assert [(r.id, r.text, r.author_name) for r in reviews] == [("y1", "Good fries", "Alex")]
        assert seen[0].url.params["term"] == "Restaurant a"
        assert seen[0].headers["Authorization"] == "Bearer y"
        assert seen[1].url.path == "/v3/businesses/biz-1/reviews"

    @pytest.mark.asyncio
    async def test_no_matching_business(self, make_restaurant) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"businesses": []}))
        source = YelpReviewSource(api_key="y", transport=transport)
        assert await source.get_reviews(make_restaurant("a")) == []


class TestTripAdvisorReviewSource:
    """Tests for Travel Advisor lookups."""

    @pytest.mark.asyncio
    async def test_location_then_reviews(self, make_restaurant) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/locations/search":
                return httpx.Response(200, json={"data": [{"result_object": {"location_id": "77"}}]})
            assert request.url.params["location_id"] == "77"
            return httpx.Response(200, json={"data": [{
                "review_id": "t1",
                "rating": "5",
                "text": "Worth the stop",
                "published_date": "2024-01-02T08:00:00-05:00",
                "user": {"username": "roadtripper"},
            }]})

        source = TripAdvisorReviewSource(api_key="t", transport=httpx.MockTransport(handler))
        reviews = await source.get_reviews(make_restaurant("a"))

        assert reviews[0].id == "t1"
        assert reviews[0].rating == 5.0
        assert reviews[0].author_name == "roadtripper"
        assert reviews[0].source == ReviewSourceName.TRIPADVISOR


class TestReviewAggregator:
    """Tests for combining sources."""

    def test_timestamps(self) -> None:
        newer = review_timestamp(_review("a", "2024-01-02T00:00:00Z"))
        older = review_timestamp(_review("b", "2023-12-24 18:30:00"))
        unknown = review_timestamp(_review("c", None))
        garbage = review_timestamp(_review("d", "last week"))
        assert newer > older > unknown
        assert garbage == unknown

    @pytest.mark.asyncio
    async def test_newest_first_across_sources(self, make_restaurant) -> None:
        aggregator = ReviewAggregator([
            StaticSource(ReviewSourceName.GOOGLE, [
                _review("g1", "2024-02-01T00:00:00Z", ReviewSourceName.GOOGLE),
            ]),
            StaticSource(ReviewSourceName.YELP, [
                _review("y1", "2024-03-01 12:00:00"),
                _review("y2", None),
            ]),
        ])
        reviews = await aggregator.get_aggregated_reviews(make_restaurant("a"))
        assert [r.id for r in reviews] == ["y1", "g1", "y2"]

    @pytest.mark.asyncio
    async def test_failing_source_contributes_nothing(self, make_restaurant) -> None:
        aggregator = ReviewAggregator([
            StaticSource(ReviewSourceName.GOOGLE, [_review("g1", None, ReviewSourceName.GOOGLE)]),
            StaticSource(ReviewSourceName.YELP, error=RuntimeError("quota exceeded")),
        ])
        reviews = await aggregator.get_aggregated_reviews(make_restaurant("a"))
        assert [r.id for r in reviews] == ["g1"]

    @pytest.mark.asyncio
    async def test_disabled_sources_are_skipped(self, make_restaurant) -> None:
        disabled = StaticSource(ReviewSourceName.YELP, error=AssertionError("called"), enabled=False)
        aggregator = ReviewAggregator([StaticSource(ReviewSourceName.GOOGLE), disabled])
        assert await aggregator.get_aggregated_reviews(make_restaurant("a")) == []
        assert aggregator.enabled_sources == [ReviewSourceName.GOOGLE]
