"""Cache infrastructure."""

from .search_cache import InMemorySearchCache, build_cache_key

__all__ = ["InMemorySearchCache", "build_cache_key"]
