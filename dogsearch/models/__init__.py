from .listing import ProductListing, ServiceListing

__all__ = ["ProductListing", "ServiceListing"]
