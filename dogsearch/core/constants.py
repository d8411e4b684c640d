"""Application-wide constants for the dog services search API."""

from __future__ import annotations

import os

BRAND_NAME = "Dog Services Directory"
API_TITLE = f"{BRAND_NAME} Search API"
API_DESCRIPTION = "Cached, rate-limited location-aware search over service and product listings"
API_VERSION = "1.0.0"

# Listing kinds returned by search
RESULT_KIND_SERVICE = "service"
RESULT_KIND_PRODUCT = "product"
RESULT_KINDS = (RESULT_KIND_SERVICE, RESULT_KIND_PRODUCT)

# Earth's mean radius in miles, used for haversine distances
EARTH_RADIUS_MILES = 3958.8

# Coordinate bounds
MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0

# Search radius around the user, in miles
DEFAULT_SEARCH_RADIUS_MILES = 50.0
MIN_SEARCH_RADIUS_MILES = 1.0
MAX_SEARCH_RADIUS_MILES = 100.0
# Approximate miles per degree of latitude
MILES_PER_DEGREE = 69.0

# Cache introspection
CACHE_TYPE = "memory"

# Frontend URLs
DEFAULT_DEV_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def _split_env(name: str) -> list[str]:
    value = os.getenv(name, "")
    return [origin.strip() for origin in value.split(",") if origin.strip()]


ALLOWED_ORIGINS = _split_env("ALLOWED_ORIGINS") or DEFAULT_DEV_ORIGINS

# Error messages
ERROR_INVALID_QUERY = "Invalid search query"
ERROR_RATE_LIMITED = "Too many requests. Please try again later."
ERROR_FETCH_FAILED = "Search failed"
ERROR_CACHE_STATS = "Failed to get cache statistics"
ERROR_CACHE_CLEAR = "Failed to clear cache"

# Success messages
SUCCESS_CACHE_CLEARED = "Cache cleared successfully"
SUCCESS_CACHE_INVALIDATED = "Matching cache entries invalidated"
