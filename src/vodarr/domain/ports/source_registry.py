"""Site registry port - supplies candidate sources to the search pipeline."""

from __future__ import annotations

from typing import Protocol

from vodarr.domain.entities.source import Source


class SourceRegistryPort(Protocol):
    async def list_eligible_sources(self, include_adult: bool) -> list[Source]:
        """Enabled sources ordered by sort_order.

        Adult-flagged sources are skipped when *include_adult* is False.

        Raises:
            RegistryUnavailable: backing store could not be read.
        """
        ...

    async def get(self, key: str) -> Source:
        """Return the source registered under *key*.

        Raises:
            SourceNotFound: unknown key.
            RegistryUnavailable: backing store could not be read.
        """
        ...
