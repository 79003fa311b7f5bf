"""One-way driving time between two points."""

from .service import (
    GoogleDistanceMatrixService,
    OSRMTravelTimeService,
    TravelTimeService,
    create_travel_time_service,
)

__all__ = [
    "GoogleDistanceMatrixService",
    "OSRMTravelTimeService",
    "TravelTimeService",
    "create_travel_time_service",
]
