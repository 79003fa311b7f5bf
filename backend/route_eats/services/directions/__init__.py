"""Driving routes between two points."""

from .service import (
    GoogleDirectionsService,
    OSRMDirectionsService,
    RouteProviderService,
    create_route_provider,
)

__all__ = [
    "GoogleDirectionsService",
    "OSRMDirectionsService",
    "RouteProviderService",
    "create_route_provider",
]
