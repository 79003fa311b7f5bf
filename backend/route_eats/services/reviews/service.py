"""Review aggregation across Google, Yelp and TripAdvisor.

- GoogleReviewSource:      reviews already attached to the place record
- YelpReviewSource:        Yelp Fusion business match + reviews (needs YELP_API_KEY)
- TripAdvisorReviewSource: Travel Advisor on RapidAPI (needs TRIPADVISOR_API_KEY)

Keyed sources are disabled when their key is missing. A source that fails
contributes no reviews instead of failing the aggregation.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone

import httpx

from route_eats import config
from route_eats.models import AggregatedReview, Restaurant, ReviewSourceName
from route_eats.services.http import SharedClientMixin
from route_eats.utils.text import text_of

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def review_timestamp(review: AggregatedReview) -> datetime:
    """Publish time for sorting; unknown or unparseable dates sort last."""
    if not review.date:
        return _OLDEST
    try:
        parsed = datetime.fromisoformat(review.date.strip().replace("Z", "+00:00"))
    except ValueError:
        return _OLDEST
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ReviewSource(ABC):
    """Abstract base class for review providers."""

    source: ReviewSourceName

    def is_enabled(self) -> bool:
        return True

    @abstractmethod
    async def get_reviews(self, restaurant: Restaurant) -> list[AggregatedReview]:
        ...


class GoogleReviewSource(ReviewSource):
    """Reviews that came with the Places record; no network call."""

    source = ReviewSourceName.GOOGLE

    async def get_reviews(self, restaurant: Restaurant) -> list[AggregatedReview]:
        reviews = []
        for index, review in enumerate(restaurant.reviews):
            author = (review.author_attribution or {}).get("displayName")
            reviews.append(AggregatedReview(
                id=review.name or f"{restaurant.id}-google-{index}",
                source=self.source,
                rating=review.rating,
                text=text_of(review.text),
                date=review.publish_time,
                author_name=author or "Anonymous",
                relative_time=review.relative_publish_time_description,
            ))
        return reviews


class YelpReviewSource(SharedClientMixin, ReviewSource):
    """Yelp Fusion: find the business next to the restaurant, then its reviews."""

    source = ReviewSourceName.YELP
    BASE_URL = "https://api.yelp.com/v3/businesses"
    MATCH_RADIUS_METERS = 100

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else config.YELP_API_KEY
        self._timeout = timeout or config.GOOGLE_TIMEOUT_SECONDS
        self._transport = transport
        self._headers = {"Authorization": f"Bearer {self._api_key}"}

    def is_enabled(self) -> bool:
        return bool(self._api_key)

    async def get_reviews(self, restaurant: Restaurant) -> list[AggregatedReview]:
        if not self.is_enabled():
            return []

        search = await self._request_json(
            "GET",
            f"{self.BASE_URL}/search",
            params={
                "latitude": restaurant.location.lat,
                "longitude": restaurant.location.lng,
                "term": restaurant.name,
                "radius": self.MATCH_RADIUS_METERS,
                "limit": 1,
            },
        )
        businesses = search.get("businesses") or []
        if not businesses:
            return []

        payload = await self._request_json("GET", f"{self.BASE_URL}/{businesses[0]['id']}/reviews")
        return [
            AggregatedReview(
                id=str(review.get("id", "")),
                source=self.source,
                rating=float(review.get("rating") or 0),
                text=review.get("text") or "",
                date=review.get("time_created"),
                author_name=(review.get("user") or {}).get("name") or "Yelp User",
            )
            for review in payload.get("reviews") or []
        ]


class TripAdvisorReviewSource(SharedClientMixin, ReviewSource):
    """Travel Advisor (RapidAPI): location search, then review list."""

    source = ReviewSourceName.TRIPADVISOR
    BASE_URL = "https://travel-advisor.p.rapidapi.com"
    HOST = "travel-advisor.p.rapidapi.com"
    REVIEW_LIMIT = 20

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else config.TRIPADVISOR_API_KEY
        self._timeout = timeout or config.GOOGLE_TIMEOUT_SECONDS
        self._transport = transport
        self._headers = {"X-RapidAPI-Host": self.HOST, "X-RapidAPI-Key": self._api_key}

    def is_enabled(self) -> bool:
        return bool(self._api_key)

    async def get_reviews(self, restaurant: Restaurant) -> list[AggregatedReview]:
        if not self.is_enabled():
            return []

        search = await self._request_json(
            "GET",
            f"{self.BASE_URL}/locations/search",
            params={
                "query": restaurant.name,
                "latitude": restaurant.location.lat,
                "longitude": restaurant.location.lng,
            },
        )
        results = search.get("data") or []
        location_id = ((results[0] if results else {}).get("result_object") or {}).get("location_id")
        if not location_id:
            return []

        payload = await self._request_json(
            "GET",
            f"{self.BASE_URL}/reviews/list",
            params={"location_id": location_id, "limit": self.REVIEW_LIMIT},
        )
        reviews = []
        for review in payload.get("data") or []:
            date = review.get("published_date") or review.get("created")
            reviews.append(AggregatedReview(
                id=str(review.get("review_id") or review.get("id") or ""),
                source=self.source,
                rating=float(review.get("rating") or 0),
                text=review.get("text") or "",
                date=date,
                author_name=(review.get("user") or {}).get("username")
                or review.get("author")
                or "TripAdvisor User",
                relative_time=review.get("relative_time_description"),
            ))
        return reviews


class ReviewAggregator:
    """Collects reviews from every enabled source, newest first."""

    def __init__(self, sources: list[ReviewSource] | None = None) -> None:
        self._sources = sources if sources is not None else [
            GoogleReviewSource(),
            YelpReviewSource(),
            TripAdvisorReviewSource(),
        ]

    @property
    def enabled_sources(self) -> list[ReviewSourceName]:
        return [s.source for s in self._sources if s.is_enabled()]

    async def _safe_reviews(self, source: ReviewSource, restaurant: Restaurant) -> list[AggregatedReview]:
        try:
            return await source.get_reviews(restaurant)
        except Exception as e:
            logger.warning(f"[REVIEWS] {source.source.value} failed for {restaurant.id}: {e}")
            return []

    async def get_aggregated_reviews(self, restaurant: Restaurant) -> list[AggregatedReview]:
        enabled = [s for s in self._sources if s.is_enabled()]
        batches = await asyncio.gather(*(self._safe_reviews(s, restaurant) for s in enabled))
        reviews = [review for batch in batches for review in batch]
        reviews.sort(key=review_timestamp, reverse=True)
        logger.info(
            f"[REVIEWS] {len(reviews)} reviews for {restaurant.name} "
            f"from {', '.join(s.source.value for s in enabled)}"
        )
        return reviews
