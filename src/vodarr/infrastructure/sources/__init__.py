"""Source registry and its backing stores."""

from .diskcache_store import DiskcacheSourceStore
from .factory import create_source_store
from .memory_store import InMemorySourceStore
from .registry import SourceRegistry
from .users import ConfigUserDirectory

__all__ = [
    "ConfigUserDirectory",
    "DiskcacheSourceStore",
    "InMemorySourceStore",
    "SourceRegistry",
    "create_source_store",
]
