from .cache import SearchCachePort
from .source_fetcher import SourceFetcherPort
from .source_registry import SourceRegistryPort
from .source_store import SourceStorePort
from .users import AuthorizationPort, UserPreferencePort

__all__ = [
    "AuthorizationPort",
    "SearchCachePort",
    "SourceFetcherPort",
    "SourceRegistryPort",
    "SourceStorePort",
    "UserPreferencePort",
]
