# dogsearch/schemas/search.py
"""
Pydantic schemas for the listing search API.

Coordinates are unconstrained here. Range checks happen during query
normalization and surface as invalid queries.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ._strict_base import StrictRequestModel


class UserLocation(StrictRequestModel):
    """Where the searching user is, as precisely as they told us."""

    lat: Optional[float] = Field(None, validation_alias=AliasChoices("lat", "latitude"))
    lng: Optional[float] = Field(None, validation_alias=AliasChoices("lng", "lon", "longitude"))
    postal_code: Optional[str] = Field(
        None,
        max_length=20,
        validation_alias=AliasChoices("postal_code", "postalCode", "zip", "zip_code"),
    )
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    radius_miles: Optional[float] = Field(
        None,
        description="Search radius in miles around lat/lng; 50 when omitted",
        validation_alias=AliasChoices("radius_miles", "radiusMiles", "radius"),
    )


class SearchQuery(StrictRequestModel):
    """Raw search request as sent by the directory frontend."""

    term: str = Field(
        "",
        max_length=500,
        description="Free-text search term",
        validation_alias=AliasChoices("term", "query", "q"),
    )
    categories: List[str] = Field(
        default_factory=list,
        description="Category tags, e.g. service types such as 'groomer'",
        validation_alias=AliasChoices("categories", "tags"),
    )
    verified_only: bool = Field(
        False,
        description="Only return verified listings",
        validation_alias=AliasChoices("verified_only", "verifiedOnly"),
    )
    min_price: Optional[float] = Field(
        None, validation_alias=AliasChoices("min_price", "minPrice")
    )
    max_price: Optional[float] = Field(
        None, validation_alias=AliasChoices("max_price", "maxPrice")
    )
    type: Optional[str] = Field(
        None,
        description="Restrict results to 'service' or 'product' listings",
        validation_alias=AliasChoices("type", "kind"),
    )
    location: Optional[UserLocation] = Field(
        None, validation_alias=AliasChoices("location", "userLocation", "user_location")
    )
    sort_by_distance: bool = Field(
        True,
        description="Order by distance when coordinates are known",
        validation_alias=AliasChoices("sort_by_distance", "sortByDistance"),
    )


class SearchResponse(BaseModel):
    """Search results, flagged with whether they were served from cache."""

    model_config = ConfigDict(populate_by_name=True)

    results: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Listing records, each with a 'distance' in miles (null when unknown)",
    )
    from_cache: bool = Field(False, serialization_alias="fromCache")


class SearchErrorResponse(BaseModel):
    error: str
    code: Optional[str] = None
    retry_after: Optional[int] = Field(None, serialization_alias="retryAfter")
