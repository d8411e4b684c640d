from . import cache, health, search

__all__ = ["cache", "health", "search"]
