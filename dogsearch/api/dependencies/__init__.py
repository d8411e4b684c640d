from .services import get_search_cache, get_search_orchestrator, get_search_runtime

__all__ = ["get_search_cache", "get_search_orchestrator", "get_search_runtime"]
