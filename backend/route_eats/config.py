"""Runtime settings for Route Eats.

Values come from the environment (``.env`` is loaded first). Services take
these as constructor defaults; every one of them can be overridden by passing
an explicit argument.
"""

import os

from dotenv import load_dotenv

load_dotenv()

GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "")
GOOGLE_TIMEOUT_SECONDS = float(os.getenv("GOOGLE_TIMEOUT_SECONDS", "15"))

ROUTE_PROVIDER = os.getenv("ROUTE_PROVIDER", "google" if GOOGLE_MAPS_API_KEY else "osrm")
OSRM_BASE_URL = os.getenv("OSRM_BASE_URL", "https://router.project-osrm.org")
OSRM_TIMEOUT_SECONDS = float(os.getenv("OSRM_TIMEOUT_SECONDS", "15"))

PLACES_TEXT_QUERY = os.getenv("PLACES_TEXT_QUERY", "restaurants")
PLACES_RESULT_CAP = int(os.getenv("PLACES_RESULT_CAP", "50"))
PLACES_PER_SEGMENT_CAP = int(os.getenv("PLACES_PER_SEGMENT_CAP", "30"))
PLACES_LANGUAGE_CODE = os.getenv("PLACES_LANGUAGE_CODE", "en")

# Simultaneous travel-time lookups per batch; the provider rate-limits above 10
DETOUR_BATCH_SIZE = min(10, max(5, int(os.getenv("DETOUR_BATCH_SIZE", "5"))))

GEOCODE_CACHE_TTL_SECONDS = int(os.getenv("GEOCODE_CACHE_TTL_SECONDS", "86400"))
GEOCODE_CACHE_MAX_SIZE = int(os.getenv("GEOCODE_CACHE_MAX_SIZE", "500"))

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379")
PLACE_DETAILS_TTL_SECONDS = int(os.getenv("PLACE_DETAILS_TTL_SECONDS", "3600"))

GROQ_API_KEY = os.getenv("GROQ_API_KEY", "")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemma-3-4b-it")

YELP_API_KEY = os.getenv("YELP_API_KEY", "")
TRIPADVISOR_API_KEY = os.getenv("TRIPADVISOR_API_KEY", "")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
    ).split(",")
    if origin.strip()
]
