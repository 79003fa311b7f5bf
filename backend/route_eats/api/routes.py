"""API routes for Route Eats.

The trip flow:
- Geocoder: origin and destination addresses to coordinates
- Route provider: driving route between them (Google Directions or OSRM)
- Restaurant search: places along each route segment, spread over the trip
- Chat: the assistant drafts a search and runs it once the user says yes

Every response carries ``success``; failures come back as an ``AppError``
with a user-facing message and recovery options.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from route_eats import config
from route_eats.exceptions import (
    ExternalServiceError,
    InvalidLocationError,
    NoRouteFoundError,
    RouteEatsError,
)
from route_eats.models import (
    AggregatedReview,
    AppError,
    ErrorCode,
    Location,
    RecoveryOption,
    Restaurant,
    ReviewSourceName,
    RoutePath,
    SearchOptions,
)
from route_eats.services.ai_reasoning import AIReasoningService, create_ai_service
from route_eats.services.cache import CacheService, RedisCacheService
from route_eats.services.conversation import ChatReply, ConversationService
from route_eats.services.directions import RouteProviderService, create_route_provider
from route_eats.services.geocoding import GeocoderService, create_geocoder
from route_eats.services.places import GooglePlacesService, PlacesSearchService
from route_eats.services.restaurant_search import RestaurantSearchService, TripPlannerService
from route_eats.services.reviews import ReviewAggregator
from route_eats.services.travel_time import TravelTimeService, create_travel_time_service

logger = logging.getLogger(__name__)

router = APIRouter()


def app_error_for(exc: Exception) -> AppError:
    """Translate an exception into the error envelope shown to the user."""
    if isinstance(exc, InvalidLocationError):
        return AppError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            user_message="We couldn't find that location. Please check the addresses.",
            recovery_options=[RecoveryOption(label="Edit locations", action="edit_locations")],
        )
    if isinstance(exc, NoRouteFoundError):
        return AppError(
            code=ErrorCode.NO_ROUTE,
            message=str(exc),
            user_message="There is no driving route between these locations.",
            recovery_options=[RecoveryOption(label="Edit locations", action="edit_locations")],
        )
    if isinstance(exc, ExternalServiceError):
        return AppError(
            code=ErrorCode.API_ERROR,
            message=str(exc),
            user_message="A map service is not responding. Please try again.",
            recovery_options=[RecoveryOption(label="Retry", action="retry")],
        )
    return AppError(
        code=ErrorCode.API_ERROR,
        message=str(exc),
        user_message="Something went wrong. Please try again.",
        recovery_options=[RecoveryOption(label="Retry", action="retry")],
    )


# ─── Request / response models ───

class GeocodeRequest(BaseModel):
    address: str = Field(..., description="Free-text address")


class GeocodeResponse(BaseModel):
    success: bool
    location: Optional[Location] = None
    error: Optional[AppError] = None


class RouteRequestBody(BaseModel):
    origin: str = Field(..., description="Origin address")
    destination: str = Field(..., description="Destination address")


class RouteResponse(BaseModel):
    success: bool
    origin: Optional[Location] = None
    destination: Optional[Location] = None
    route: Optional[RoutePath] = None
    error: Optional[AppError] = None


class RestaurantSearchRequest(BaseModel):
    """Search along the driving route between two addresses."""
    origin: str
    destination: str
    max_stops: Optional[int] = Field(None, ge=0, le=50)
    min_rating: float = Field(0.0, ge=0, le=5)
    max_detour_minutes: float = Field(10.0, gt=0, le=240)
    consider_detour: bool = False

    def to_search_options(self) -> SearchOptions:
        return SearchOptions(
            max_stops=self.max_stops,
            min_rating=self.min_rating,
            max_detour_minutes=self.max_detour_minutes,
            consider_detour=self.consider_detour,
        )


class AlongRouteRequest(BaseModel):
    """Search along a route the client already has."""
    route: RoutePath
    origin: Optional[Location] = None
    options: SearchOptions = Field(default_factory=SearchOptions)


class RestaurantSearchResponse(BaseModel):
    success: bool
    origin: Optional[Location] = None
    destination: Optional[Location] = None
    route: Optional[RoutePath] = None
    restaurants: list[Restaurant] = Field(default_factory=list)
    message: Optional[str] = None
    error: Optional[AppError] = None


class PlaceDetailsResponse(BaseModel):
    success: bool
    place: Optional[dict] = None
    error: Optional[AppError] = None


class PhotoResponse(BaseModel):
    success: bool
    uri: Optional[str] = None
    error: Optional[AppError] = None


class ReviewsResponse(BaseModel):
    success: bool
    reviews: list[AggregatedReview] = Field(default_factory=list)
    sources: list[ReviewSourceName] = Field(default_factory=list)
    error: Optional[AppError] = None


class ChatRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    origin: Optional[str] = None
    destination: Optional[str] = None
    restaurants: Optional[list[Restaurant]] = None


class ChatResponse(BaseModel):
    success: bool
    reply: Optional[ChatReply] = None
    error: Optional[AppError] = None


# ─── Service instances ───

_geocoder: GeocoderService | None = None
_route_provider: RouteProviderService | None = None
_places_service: PlacesSearchService | None = None
_travel_time_service: TravelTimeService | None = None
_cache_service: CacheService | None = None
_review_aggregator: ReviewAggregator | None = None
_ai_service: AIReasoningService | None = None
_conversation_service: ConversationService | None = None


def get_geocoder() -> GeocoderService:
    global _geocoder
    if _geocoder is None:
        _geocoder = create_geocoder()
    return _geocoder


def get_route_provider() -> RouteProviderService:
    global _route_provider
    if _route_provider is None:
        _route_provider = create_route_provider()
    return _route_provider


def get_places_service() -> PlacesSearchService:
    global _places_service
    if _places_service is None:
        try:
            _places_service = GooglePlacesService()
        except ValueError as e:
            raise ExternalServiceError(f"Places search is not configured: {e}") from e
    return _places_service


def get_travel_time_service() -> TravelTimeService:
    global _travel_time_service
    if _travel_time_service is None:
        _travel_time_service = create_travel_time_service()
    return _travel_time_service


def get_cache_service() -> CacheService:
    global _cache_service
    if _cache_service is None:
        _cache_service = RedisCacheService()
    return _cache_service


def get_review_aggregator() -> ReviewAggregator:
    global _review_aggregator
    if _review_aggregator is None:
        _review_aggregator = ReviewAggregator()
    return _review_aggregator


def get_ai_service() -> AIReasoningService | None:
    global _ai_service
    if _ai_service is None:
        try:
            _ai_service = create_ai_service()
        except ValueError as e:
            logger.info(f"[AI] {e}")
            return None
    return _ai_service


def get_restaurant_search_service() -> RestaurantSearchService:
    return RestaurantSearchService(get_places_service(), get_travel_time_service())


def get_route_planner() -> TripPlannerService:
    return TripPlannerService(get_geocoder(), get_route_provider())


def get_trip_planner() -> TripPlannerService:
    return TripPlannerService(
        get_geocoder(), get_route_provider(), get_restaurant_search_service()
    )


def get_conversation_service() -> ConversationService | None:
    global _conversation_service
    if _conversation_service is None:
        assistant = get_ai_service()
        if assistant is None:
            return None
        _conversation_service = ConversationService(assistant, get_trip_planner())
    return _conversation_service


async def close_services() -> None:
    """Release pooled connections on shutdown."""
    for service in (
        _geocoder, _route_provider, _places_service, _travel_time_service, _cache_service
    ):
        close = getattr(service, "close", None)
        if close is not None:
            await close()


# ─── Routes ───

@router.post("/geocode", response_model=GeocodeResponse)
async def geocode_address(
    request: GeocodeRequest,
    geocoder: GeocoderService = Depends(get_geocoder),
) -> GeocodeResponse:
    try:
        location = await geocoder.geocode(request.address)
        return GeocodeResponse(success=True, location=location)
    except RouteEatsError as e:
        return GeocodeResponse(success=False, error=app_error_for(e))


@router.post("/route", response_model=RouteResponse)
async def get_route(
    request: RouteRequestBody,
    planner: TripPlannerService = Depends(get_route_planner),
) -> RouteResponse:
    try:
        origin, destination, route = await planner.plan_route(request.origin, request.destination)
        return RouteResponse(success=True, origin=origin, destination=destination, route=route)
    except RouteEatsError as e:
        return RouteResponse(success=False, error=app_error_for(e))


@router.post("/restaurants/search", response_model=RestaurantSearchResponse)
async def search_restaurants(
    request: RestaurantSearchRequest,
    planner: TripPlannerService = Depends(get_trip_planner),
) -> RestaurantSearchResponse:
    """Geocode, route and find restaurants spread along the trip."""
    logger.info(f"[SEARCH] Request: {request.origin} -> {request.destination}")
    try:
        plan = await planner.plan(request.origin, request.destination, request.to_search_options())
    except RouteEatsError as e:
        logger.info(f"[SEARCH] Failed: {e}")
        return RestaurantSearchResponse(success=False, error=app_error_for(e))

    return RestaurantSearchResponse(
        success=True,
        origin=plan.origin,
        destination=plan.destination,
        route=plan.route,
        restaurants=plan.restaurants,
        message=plan.message,
    )


@router.post("/restaurants/along-route", response_model=RestaurantSearchResponse)
async def search_along_route(
    request: AlongRouteRequest,
    search: RestaurantSearchService = Depends(get_restaurant_search_service),
) -> RestaurantSearchResponse:
    try:
        result = await search.find_restaurants_along_route(
            request.route, request.origin, request.options
        )
    except RouteEatsError as e:
        return RestaurantSearchResponse(success=False, error=app_error_for(e))
    return RestaurantSearchResponse(
        success=True,
        origin=request.origin,
        route=request.route,
        restaurants=result.restaurants,
        message=result.message,
    )


@router.post("/restaurants/reviews", response_model=ReviewsResponse)
async def get_restaurant_reviews(
    restaurant: Restaurant,
    aggregator: ReviewAggregator = Depends(get_review_aggregator),
) -> ReviewsResponse:
    reviews = await aggregator.get_aggregated_reviews(restaurant)
    return ReviewsResponse(success=True, reviews=reviews, sources=aggregator.enabled_sources)


# Registered before /places/{place_id} so "photo" is not taken for an id
@router.get("/places/photo", response_model=PhotoResponse)
async def get_place_photo(
    name: str = Query(..., min_length=1, description="Photo resource name"),
    max_width_px: int = Query(800, ge=1, le=4800),
    places: PlacesSearchService = Depends(get_places_service),
) -> PhotoResponse:
    try:
        uri = await places.get_photo_uri(name, max_width_px)
        return PhotoResponse(success=True, uri=uri)
    except ValueError as e:
        return PhotoResponse(
            success=False,
            error=AppError(
                code=ErrorCode.INVALID_INPUT,
                message=str(e),
                user_message="Photo not found.",
            ),
        )
    except RouteEatsError as e:
        return PhotoResponse(success=False, error=app_error_for(e))


@router.get("/places/{place_id}", response_model=PlaceDetailsResponse)
async def get_place_details(
    place_id: str,
    places: PlacesSearchService = Depends(get_places_service),
    cache: CacheService = Depends(get_cache_service),
) -> PlaceDetailsResponse:
    """Full place details, cached between requests."""
    cache_key = CacheService.build_place_key(place_id, config.PLACES_LANGUAGE_CODE)
    try:
        cached = await cache.get(cache_key)
        if cached:
            return PlaceDetailsResponse(success=True, place=cached)
    except redis.RedisError as e:
        logger.warning(f"[CACHE] Read failed for {cache_key}: {e}")

    try:
        place = await places.get_place_details(place_id)
    except ValueError as e:
        return PlaceDetailsResponse(
            success=False,
            error=AppError(
                code=ErrorCode.INVALID_INPUT,
                message=str(e),
                user_message="Place not found.",
            ),
        )
    except RouteEatsError as e:
        return PlaceDetailsResponse(success=False, error=app_error_for(e))

    try:
        await cache.set(cache_key, place)
    except redis.RedisError as e:
        logger.warning(f"[CACHE] Write failed for {cache_key}: {e}")
    return PlaceDetailsResponse(success=True, place=place)


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    conversation: ConversationService | None = Depends(get_conversation_service),
) -> ChatResponse:
    if conversation is None:
        return ChatResponse(
            success=False,
            error=AppError(
                code=ErrorCode.AI_UNAVAILABLE,
                message="No AI provider configured",
                user_message="The assistant is unavailable. You can still search with the form.",
                recovery_options=[RecoveryOption(label="Use search form", action="open_form")],
            ),
        )
    try:
        reply = await conversation.handle_message(
            request.session_id,
            request.message,
            origin=request.origin,
            destination=request.destination,
            restaurants=request.restaurants,
        )
    except RouteEatsError as e:
        return ChatResponse(success=False, error=app_error_for(e))
    return ChatResponse(success=True, reply=reply)
