"""
Listing models for the dog services directory.

This module defines ORM models for:
- ServiceListing: Local businesses (groomers, vets, trainers, parks) with coordinates
- ProductListing: Products recommended by the directory; no physical location
"""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, Numeric, String, Text
import ulid

from ..core.constants import RESULT_KIND_PRODUCT, RESULT_KIND_SERVICE
from ..database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ServiceListing(Base):
    """A service business listed in the directory."""

    __tablename__ = "services"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True, index=True)
    zip_code = Column(String(20), nullable=True, index=True)
    service_type = Column(String(50), nullable=False, index=True)  # e.g. 'groomer', 'veterinarian'

    # Coordinates (nullable: not every listing has been geocoded)
    latitude = Column(Numeric(10, 8), nullable=True)
    longitude = Column(Numeric(11, 8), nullable=True)

    rating = Column(Float, nullable=True)
    review_count = Column(Integer, nullable=False, default=0)
    is_verified = Column(Boolean, nullable=False, default=False)
    website_url = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": RESULT_KIND_SERVICE,
            "name": self.name,
            "description": self.description,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "service_type": self.service_type,
            "latitude": float(self.latitude) if self.latitude is not None else None,
            "longitude": float(self.longitude) if self.longitude is not None else None,
            "rating": self.rating,
            "review_count": self.review_count or 0,
            "is_verified": bool(self.is_verified),
            "website_url": self.website_url,
        }


class ProductListing(Base):
    """A product listed in the directory."""

    __tablename__ = "products"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, index=True)
    brand = Column(String(100), nullable=True)
    price = Column(Numeric(10, 2), nullable=True)

    rating = Column(Float, nullable=True)
    review_count = Column(Integer, nullable=False, default=0)
    is_verified = Column(Boolean, nullable=False, default=False)
    website_url = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": RESULT_KIND_PRODUCT,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "brand": self.brand,
            "price": float(self.price) if self.price is not None else None,
            "rating": self.rating,
            "review_count": self.review_count or 0,
            "is_verified": bool(self.is_verified),
            "website_url": self.website_url,
        }
