"""Search filter values shared by normalization, the data store and caching."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, NamedTuple, Optional, Tuple

# A listing row as handed back by the data store
ListingRecord = Mapping[str, Any]


class Coordinates(NamedTuple):
    lat: float
    lng: float


@dataclass(frozen=True)
class CandidateFilters:
    """Canonical filters the data store applies when fetching candidates."""

    term: str = ""
    categories: Tuple[str, ...] = ()
    verified_only: bool = False
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    kind: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    # Bounding-box centre and radius; services outside the box are skipped
    lat: Optional[float] = None
    lng: Optional[float] = None
    radius_miles: Optional[float] = None

    def includes_kind(self, kind: str) -> bool:
        return self.kind is None or self.kind == kind

    @property
    def has_radius(self) -> bool:
        return self.lat is not None and self.lng is not None and self.radius_miles is not None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "term": self.term,
            "categories": list(self.categories),
            "verified_only": self.verified_only,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "kind": self.kind,
            "postal_code": self.postal_code,
            "city": self.city,
            "state": self.state,
            "lat": self.lat,
            "lng": self.lng,
            "radius_miles": self.radius_miles,
        }
