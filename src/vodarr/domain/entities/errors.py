"""Error taxonomy of the search pipeline and source administration."""

from __future__ import annotations


class VodarrError(Exception):
    """Base class for all vodarr domain errors."""


class SourceUnreachable(VodarrError):
    """Network failure, timeout or non-2xx status from one upstream."""

    def __init__(self, source_key: str, reason: str) -> None:
        super().__init__(f"{source_key}: {reason}")
        self.source_key = source_key
        self.reason = reason


class MalformedUpstreamPayload(VodarrError):
    """Upstream body is not JSON or does not have the expected shape."""


class RegistryUnavailable(VodarrError):
    """The source registry backing store failed a read or write."""


class InvalidCallerInput(VodarrError):
    """The caller's request is unusable (e.g. missing query)."""


class SourceNotFound(VodarrError):
    """No source with the given key is registered."""


class DuplicateSource(VodarrError):
    """A source with the given key is already registered."""


class DetailUnavailable(VodarrError):
    """A detail lookup against one source failed."""


class PermissionDenied(VodarrError):
    """The caller is not allowed to perform an administrative action."""
