"""
Listing Repository for the dog services directory.

Handles the read-only queries search runs on a cache miss: fetching service
and product candidates that match a set of canonical filters.
"""

import logging
import math
from typing import Any, Callable, Dict, List, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..core.constants import MILES_PER_DEGREE, RESULT_KIND_PRODUCT, RESULT_KIND_SERVICE
from ..core.exceptions import RepositoryException
from ..database import session_scope
from ..domain.search_filters import CandidateFilters
from ..models.listing import ProductListing, ServiceListing

logger = logging.getLogger(__name__)

# Upper bound on candidates returned per listing kind
DEFAULT_CANDIDATE_LIMIT = 100


def _contains(column: Any, term: str) -> Any:
    return column.ilike(f"%{term}%")


def bounding_box(lat: float, lng: float, radius_miles: float) -> Tuple[float, float, float, float]:
    """(min_lat, max_lat, min_lng, max_lng) of a square enclosing the radius."""
    lat_delta = radius_miles / MILES_PER_DEGREE
    # Clamp so the box stays finite near the poles
    cos_lat = max(math.cos(math.radians(lat)), 0.01)
    lng_delta = radius_miles / (MILES_PER_DEGREE * cos_lat)
    return lat - lat_delta, lat + lat_delta, lng - lng_delta, lng + lng_delta


class ListingRepository:
    """
    Repository for service and product listings.

    Results are plain dicts tagged with their kind so they can be cached and
    serialized without holding on to the session.
    """

    def __init__(self, db: Session, *, limit: int = DEFAULT_CANDIDATE_LIMIT):
        self.db = db
        self.limit = limit
        self.logger = logging.getLogger(__name__)

    def fetch_candidates(self, filters: CandidateFilters) -> List[Dict[str, Any]]:
        """
        Fetch listings matching the filters, services before products.

        Raises:
            RepositoryException: If the database query fails
        """
        try:
            records: List[Dict[str, Any]] = []
            if filters.includes_kind(RESULT_KIND_SERVICE):
                records.extend(row.to_record() for row in self._find_services(filters))
            if filters.includes_kind(RESULT_KIND_PRODUCT):
                records.extend(row.to_record() for row in self._find_products(filters))
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching search candidates: {str(e)}")
            raise RepositoryException(f"Failed to fetch search candidates: {str(e)}") from e

        self.logger.debug(f"Fetched {len(records)} candidates for {filters.as_dict()}")
        return records

    def _find_services(self, filters: CandidateFilters) -> List[ServiceListing]:
        stmt = select(ServiceListing)
        if filters.term:
            stmt = stmt.where(
                or_(
                    _contains(ServiceListing.name, filters.term),
                    _contains(ServiceListing.description, filters.term),
                    _contains(ServiceListing.service_type, filters.term),
                )
            )
        if filters.categories:
            stmt = stmt.where(func.lower(ServiceListing.service_type).in_(filters.categories))
        if filters.verified_only:
            stmt = stmt.where(ServiceListing.is_verified.is_(True))
        if filters.postal_code:
            stmt = stmt.where(func.lower(ServiceListing.zip_code) == filters.postal_code)
        if filters.city:
            stmt = stmt.where(func.lower(ServiceListing.city) == filters.city)
        if filters.state:
            stmt = stmt.where(func.upper(ServiceListing.state) == filters.state)
        if filters.has_radius:
            min_lat, max_lat, min_lng, max_lng = bounding_box(
                filters.lat, filters.lng, filters.radius_miles  # type: ignore[arg-type]
            )
            stmt = stmt.where(
                ServiceListing.latitude.between(min_lat, max_lat),
                ServiceListing.longitude.between(min_lng, max_lng),
            )

        stmt = stmt.order_by(
            ServiceListing.rating.is_(None), ServiceListing.rating.desc(), ServiceListing.name
        ).limit(self.limit)
        return list(self.db.execute(stmt).scalars().all())

    def _find_products(self, filters: CandidateFilters) -> List[ProductListing]:
        stmt = select(ProductListing)
        if filters.term:
            stmt = stmt.where(
                or_(
                    _contains(ProductListing.name, filters.term),
                    _contains(ProductListing.description, filters.term),
                    _contains(ProductListing.category, filters.term),
                )
            )
        if filters.categories:
            stmt = stmt.where(func.lower(ProductListing.category).in_(filters.categories))
        if filters.verified_only:
            stmt = stmt.where(ProductListing.is_verified.is_(True))
        if filters.min_price is not None:
            stmt = stmt.where(ProductListing.price >= filters.min_price)
        if filters.max_price is not None:
            stmt = stmt.where(ProductListing.price <= filters.max_price)

        stmt = stmt.order_by(
            ProductListing.rating.is_(None), ProductListing.rating.desc(), ProductListing.name
        ).limit(self.limit)
        return list(self.db.execute(stmt).scalars().all())


def make_listing_fetcher(
    session_factory: sessionmaker, *, limit: int = DEFAULT_CANDIDATE_LIMIT
) -> Callable[[CandidateFilters], List[Dict[str, Any]]]:
    """Bind a candidate fetcher that opens a short-lived session per call."""

    def fetch_candidates(filters: CandidateFilters) -> List[Dict[str, Any]]:
        with session_scope(session_factory) as db:
            return ListingRepository(db, limit=limit).fetch_candidates(filters)

    return fetch_candidates
