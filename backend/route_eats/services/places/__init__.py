"""Places search along a route, place details and photos."""

from .service import GooglePlacesService, PlacesSearchService

__all__ = ["GooglePlacesService", "PlacesSearchService"]
