# dogsearch/services/search/distance.py
"""
Distance annotation for search results.

Distances are great-circle (haversine) distances in miles. Full precision is
kept for ordering; `display_distance` rounds to one decimal place so cached
and freshly computed responses render identically.
"""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Dict, Iterable, List, Optional

from dogsearch.core.constants import EARTH_RADIUS_MILES
from dogsearch.domain.search_filters import Coordinates, ListingRecord

LATITUDE_FIELDS = ("latitude", "lat")
LONGITUDE_FIELDS = ("longitude", "lng", "lon")


@dataclass(frozen=True)
class AnnotatedResult:
    """A listing record plus its distance from the searching user, if known."""

    record: ListingRecord
    distance_miles: Optional[float] = None

    @property
    def display_distance(self) -> Optional[float]:
        if self.distance_miles is None:
            return None
        return round(self.distance_miles, 1)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.record)
        data["distance"] = self.display_distance
        return data


def haversine_miles(origin: Coordinates, destination: Coordinates) -> float:
    """Great-circle distance between two points in miles."""
    lat1, lng1 = math.radians(origin.lat), math.radians(origin.lng)
    lat2, lng2 = math.radians(destination.lat), math.radians(destination.lng)

    d_lat = lat2 - lat1
    d_lng = lng2 - lng1
    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    # Clamp guards against a > 1 from floating point error on antipodal points
    c = 2 * math.asin(math.sqrt(min(1.0, a)))
    return EARTH_RADIUS_MILES * c


def _first_number(record: ListingRecord, fields: Iterable[str]) -> Optional[float]:
    for field in fields:
        value = record.get(field)
        if value is None or isinstance(value, bool):
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        return number if math.isfinite(number) else None
    return None


def record_coordinates(record: ListingRecord) -> Optional[Coordinates]:
    """Stored coordinates of a listing, or None when missing or unusable."""
    lat = _first_number(record, LATITUDE_FIELDS)
    lng = _first_number(record, LONGITUDE_FIELDS)
    if lat is None or lng is None:
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return None
    return Coordinates(lat, lng)


def annotate(
    results: Iterable[ListingRecord],
    user_location: Optional[Coordinates] = None,
    sort_by_distance: bool = False,
) -> List[AnnotatedResult]:
    """
    Attach distances to results and optionally order them nearest first.

    Without a user location no distances are computed and the upstream order
    is returned untouched; the same holds when sort_by_distance is False.
    Results lacking coordinates get no distance and sort last.
    """
    if user_location is None:
        return [AnnotatedResult(record=record) for record in results]

    annotated: List[AnnotatedResult] = []
    for record in results:
        coords = record_coordinates(record)
        distance = haversine_miles(user_location, coords) if coords is not None else None
        annotated.append(AnnotatedResult(record=record, distance_miles=distance))

    if sort_by_distance:
        # sorted() is stable, so equal distances keep their relevance order
        annotated = sorted(
            annotated,
            key=lambda item: (item.distance_miles is None, item.distance_miles or 0.0),
        )
    return annotated
