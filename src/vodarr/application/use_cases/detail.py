"""Single-item detail lookup against one source."""

from __future__ import annotations

import structlog

from vodarr.domain.entities import InvalidCallerInput, SearchResult
from vodarr.domain.ports import SourceFetcherPort, SourceRegistryPort

log = structlog.get_logger(__name__)


class DetailUseCase:
    def __init__(self, registry: SourceRegistryPort, fetcher: SourceFetcherPort):
        self.registry = registry
        self.fetcher = fetcher

    async def execute(self, source_key: str, item_id: str) -> SearchResult:
        """Fetch the full episode list of *item_id* from *source_key*.

        Raises:
            InvalidCallerInput: blank source key or item id.
            SourceNotFound: unknown source key.
            DetailUnavailable: the upstream lookup failed.
        """
        source_key = source_key.strip()
        item_id = item_id.strip()
        if not source_key or not item_id:
            raise InvalidCallerInput("source and id are required")

        source = await self.registry.get(source_key)
        result = await self.fetcher.fetch_detail(source, item_id)
        log.info(
            "detail_completed",
            source=source_key,
            item_id=item_id,
            episodes=len(result.episodes),
        )
        return result
