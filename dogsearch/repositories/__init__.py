from .listing_repository import ListingRepository, make_listing_fetcher

__all__ = ["ListingRepository", "make_listing_fetcher"]
