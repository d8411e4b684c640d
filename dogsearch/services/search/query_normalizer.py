# dogsearch/services/search/query_normalizer.py
"""
Query normalization for the search result cache.

Turns a raw SearchQuery into a CacheKey: a canonical, hashable value that is
identical for every request that means the same thing. Text is lower-cased and
whitespace-collapsed, filter sets are sorted, coordinates are rounded into a
bucket so nearby users share an entry, and default values are left out so
differently shaped but equivalent requests collide.
"""
from __future__ import annotations

from dataclasses import dataclass
import hashlib
import json
import math
import re
from typing import Any, Dict, Iterable, Optional, Tuple

from dogsearch.core.constants import (
    DEFAULT_SEARCH_RADIUS_MILES,
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MAX_SEARCH_RADIUS_MILES,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    MIN_SEARCH_RADIUS_MILES,
    RESULT_KINDS,
)
from dogsearch.core.exceptions import InvalidQueryException
from dogsearch.domain.search_filters import CandidateFilters, Coordinates
from dogsearch.schemas.search import SearchQuery, UserLocation

# Cache key prefix
KEY_PREFIX = "search"

DEFAULT_COORDINATE_PRECISION = 2

_PUNCTUATION = re.compile(r"[^\w\s]")


@dataclass(frozen=True)
class CacheKey:
    """
    Canonical fingerprint of a search.

    Equality and hashing cover every canonical field, so two queries that
    differ in any filter never share an entry.
    """

    term: str = ""
    categories: Tuple[str, ...] = ()
    verified_only: bool = False
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    kind: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    sort_by_distance: bool = False
    # Defaults to 50 miles whenever coordinates are present
    radius_miles: Optional[float] = None

    @property
    def location(self) -> Optional[Coordinates]:
        """Bucketed user coordinates, if the query carried any."""
        if self.lat is None or self.lng is None:
            return None
        return Coordinates(self.lat, self.lng)

    @property
    def fingerprint(self) -> str:
        """Canonical JSON with default values omitted."""
        data: Dict[str, Any] = {}
        if self.term:
            data["q"] = self.term
        if self.categories:
            data["cat"] = list(self.categories)
        if self.verified_only:
            data["verified"] = True
        if self.min_price is not None:
            data["min"] = self.min_price
        if self.max_price is not None:
            data["max"] = self.max_price
        if self.kind:
            data["type"] = self.kind
        if self.location is not None:
            data["loc"] = [self.lat, self.lng]
            if not self.sort_by_distance:
                data["sort"] = "relevance"
            if self.radius_miles is not None and self.radius_miles != DEFAULT_SEARCH_RADIUS_MILES:
                data["radius"] = self.radius_miles
        if self.postal_code:
            data["zip"] = self.postal_code
        if self.city:
            data["city"] = self.city
        if self.state:
            data["state"] = self.state
        return json.dumps(data, sort_keys=True, separators=(",", ":"))

    @property
    def digest(self) -> str:
        return hashlib.sha256(self.fingerprint.encode()).hexdigest()

    def __str__(self) -> str:
        return f"{KEY_PREFIX}:{self.digest[:16]}"

    def to_filters(self) -> CandidateFilters:
        """Filters handed to the data store on a cache miss."""
        return CandidateFilters(
            term=self.term,
            categories=self.categories,
            verified_only=self.verified_only,
            min_price=self.min_price,
            max_price=self.max_price,
            kind=self.kind,
            postal_code=self.postal_code,
            city=self.city,
            state=self.state,
            lat=self.lat,
            lng=self.lng,
            radius_miles=self.radius_miles,
        )


def normalize_text(text: Optional[str]) -> str:
    """Lowercase, replace punctuation with spaces and collapse whitespace."""
    if not text:
        return ""
    return " ".join(_PUNCTUATION.sub(" ", text.lower()).split())


def normalize_categories(categories: Iterable[str]) -> Tuple[str, ...]:
    cleaned = {" ".join(str(tag).lower().split()) for tag in categories}
    cleaned.discard("")
    return tuple(sorted(cleaned))


def _finite_or_none(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    if not math.isfinite(value):
        raise InvalidQueryException("price bounds must be finite numbers")
    return float(value)


def _normalize_price_bounds(
    min_price: Optional[float], max_price: Optional[float]
) -> Tuple[Optional[float], Optional[float]]:
    low = _finite_or_none(min_price)
    high = _finite_or_none(max_price)
    if (low is not None and low < 0) or (high is not None and high < 0):
        raise InvalidQueryException(
            "price bounds cannot be negative",
            details={"min_price": low, "max_price": high},
        )
    if low is not None and high is not None and low > high:
        raise InvalidQueryException(
            "min_price cannot exceed max_price",
            details={"min_price": low, "max_price": high},
        )
    return low, high


def _normalize_kind(kind: Optional[str]) -> Optional[str]:
    if kind is None:
        return None
    cleaned = kind.strip().lower()
    if not cleaned:
        return None
    if cleaned not in RESULT_KINDS:
        raise InvalidQueryException(
            f"type must be one of {', '.join(RESULT_KINDS)}",
            details={"type": kind},
        )
    return cleaned


def bucket_coordinate(value: float, precision: int) -> float:
    # Adding 0.0 folds -0.0 into 0.0 so both hemispheres' zero share a bucket
    return round(value, precision) + 0.0


def validate_coordinates(lat: Optional[float], lng: Optional[float]) -> Optional[Coordinates]:
    """Check a lat/lng pair; both or neither must be present."""
    if lat is None and lng is None:
        return None
    if lat is None or lng is None:
        raise InvalidQueryException(
            "both lat and lng must be provided together",
            details={"lat": lat, "lng": lng},
        )
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidQueryException("coordinates must be finite numbers")
    if not MIN_LATITUDE <= lat <= MAX_LATITUDE:
        raise InvalidQueryException(
            f"latitude must be between {MIN_LATITUDE:g} and {MAX_LATITUDE:g}",
            details={"lat": lat},
        )
    if not MIN_LONGITUDE <= lng <= MAX_LONGITUDE:
        raise InvalidQueryException(
            f"longitude must be between {MIN_LONGITUDE:g} and {MAX_LONGITUDE:g}",
            details={"lng": lng},
        )
    return Coordinates(float(lat), float(lng))


def _normalize_radius(radius: Optional[float], has_coordinates: bool) -> Optional[float]:
    if radius is None:
        return DEFAULT_SEARCH_RADIUS_MILES if has_coordinates else None
    if not has_coordinates:
        raise InvalidQueryException("radius requires lat and lng", details={"radius": radius})
    if not (math.isfinite(radius) and MIN_SEARCH_RADIUS_MILES <= radius <= MAX_SEARCH_RADIUS_MILES):
        raise InvalidQueryException(
            f"radius must be between {MIN_SEARCH_RADIUS_MILES:g} and {MAX_SEARCH_RADIUS_MILES:g} miles",
            details={"radius": radius},
        )
    return float(radius)


def _clean_place(value: Optional[str], *, upper: bool = False) -> Optional[str]:
    if value is None:
        return None
    cleaned = " ".join(value.split())
    if not cleaned:
        return None
    return cleaned.upper() if upper else cleaned.lower()


def normalize(
    query: SearchQuery,
    *,
    coordinate_precision: int = DEFAULT_COORDINATE_PRECISION,
) -> CacheKey:
    """
    Canonicalize a search request into its cache key.

    Pure and deterministic. Raises InvalidQueryException for malformed
    coordinates, radius, price bounds or result type before anything touches
    the cache or the admission gate.
    """
    min_price, max_price = _normalize_price_bounds(query.min_price, query.max_price)
    kind = _normalize_kind(query.type)

    location: UserLocation = query.location or UserLocation()
    coords = validate_coordinates(location.lat, location.lng)
    radius = _normalize_radius(location.radius_miles, coords is not None)

    lat = lng = None
    if coords is not None:
        lat = bucket_coordinate(coords.lat, coordinate_precision)
        lng = bucket_coordinate(coords.lng, coordinate_precision)

    return CacheKey(
        term=normalize_text(query.term),
        categories=normalize_categories(query.categories),
        verified_only=bool(query.verified_only),
        min_price=min_price,
        max_price=max_price,
        kind=kind,
        lat=lat,
        lng=lng,
        postal_code=_clean_place(location.postal_code),
        city=_clean_place(location.city),
        state=_clean_place(location.state, upper=True),
        # Distance ordering is unavailable without coordinates
        sort_by_distance=bool(query.sort_by_distance) and coords is not None,
        radius_miles=radius,
    )
