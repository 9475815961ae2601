"""Adapters for videolist-compatible upstream source APIs."""

from .content_policy import AdultContentPolicy
from .fetcher import HttpxSourceFetcher
from .normalizer import UpstreamEnvelope, normalize, normalize_page, parse_envelope

__all__ = [
    "AdultContentPolicy",
    "HttpxSourceFetcher",
    "UpstreamEnvelope",
    "normalize",
    "normalize_page",
    "parse_envelope",
]
