"""Route Eats Services.

Service layer components:
- Geocoding: Google Geocoding (or Nominatim) with an in-memory LRU cache
- Directions: Google Directions (or OSRM) driving routes
- Places: Google Places Search Along Route, place details and photos
- Travel Time: Google Distance Matrix (or OSRM table) for detour estimates
- Restaurant Search: segment, search, normalize, estimate detours, select
- AI Reasoning: Groq (primary) + Gemini (fallback) for chat
- Conversation: confirmation state machine around the chat assistant
- Reviews: Google, Yelp and TripAdvisor review aggregation
- Cache: Redis-based caching of place details
"""

from .cache import CacheService, RedisCacheService
from .ai_reasoning import (
    AIReasoningService,
    GeminiReasoningService,
    GroqReasoningService,
    create_ai_service,
)
from .conversation import ChatReply, ConversationService, ConversationState
from .directions import (
    GoogleDirectionsService,
    OSRMDirectionsService,
    RouteProviderService,
    create_route_provider,
)
from .geocoding import (
    GeocoderService,
    GoogleGeocoderService,
    NominatimGeocoderService,
    create_geocoder,
)
from .places import GooglePlacesService, PlacesSearchService
from .restaurant_search import RestaurantSearchService, TripPlannerService
from .reviews import ReviewAggregator, ReviewSource
from .travel_time import (
    GoogleDistanceMatrixService,
    OSRMTravelTimeService,
    TravelTimeService,
    create_travel_time_service,
)

__all__ = [
    # Cache
    "CacheService",
    "RedisCacheService",
    # AI reasoning
    "AIReasoningService",
    "GeminiReasoningService",
    "GroqReasoningService",
    "create_ai_service",
    # Conversation
    "ChatReply",
    "ConversationService",
    "ConversationState",
    # Directions
    "GoogleDirectionsService",
    "OSRMDirectionsService",
    "RouteProviderService",
    "create_route_provider",
    # Geocoding
    "GeocoderService",
    "GoogleGeocoderService",
    "NominatimGeocoderService",
    "create_geocoder",
    # Places
    "GooglePlacesService",
    "PlacesSearchService",
    # Restaurant search
    "RestaurantSearchService",
    "TripPlannerService",
    # Reviews
    "ReviewAggregator",
    "ReviewSource",
    # Travel time
    "GoogleDistanceMatrixService",
    "OSRMTravelTimeService",
    "TravelTimeService",
    "create_travel_time_service",
]
