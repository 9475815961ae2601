from .errors import (
    DetailUnavailable,
    DuplicateSource,
    InvalidCallerInput,
    MalformedUpstreamPayload,
    PermissionDenied,
    RegistryUnavailable,
    SourceNotFound,
    SourceUnreachable,
    VodarrError,
)
from .search import UNKNOWN_YEAR, AggregateGroup, CacheEntry, SearchResult
from .source import Source, SourceOrigin

__all__ = [
    "UNKNOWN_YEAR",
    "AggregateGroup",
    "CacheEntry",
    "DetailUnavailable",
    "DuplicateSource",
    "InvalidCallerInput",
    "MalformedUpstreamPayload",
    "PermissionDenied",
    "RegistryUnavailable",
    "SearchResult",
    "Source",
    "SourceNotFound",
    "SourceOrigin",
    "SourceUnreachable",
    "VodarrError",
]
