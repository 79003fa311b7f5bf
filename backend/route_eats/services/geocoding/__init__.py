"""Geocoding: free-text address to coordinates and canonical address."""

from .service import (
    GeocoderService,
    GoogleGeocoderService,
    NominatimGeocoderService,
    create_geocoder,
)

__all__ = [
    "GeocoderService",
    "GoogleGeocoderService",
    "NominatimGeocoderService",
    "create_geocoder",
]
