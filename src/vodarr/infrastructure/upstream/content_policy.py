"""Per-item adult-content classification.

A keyword heuristic over title, description and type name.  It is a
best-effort filter: false positives and false negatives are expected.
The coarser source-level gate (``Source.is_adult``) is applied
separately by the site registry.
"""

from __future__ import annotations

from collections.abc import Iterable

from vodarr.domain.entities.search import SearchResult
from vodarr.infrastructure.config.schema import DEFAULT_ADULT_KEYWORDS


class AdultContentPolicy:
    def __init__(self, keywords: Iterable[str] = DEFAULT_ADULT_KEYWORDS) -> None:
        self.keywords: tuple[str, ...] = tuple(
            k.casefold() for k in keywords if k and k.strip()
        )

    def is_adult_text(self, *fields: str | None) -> bool:
        """True if any field contains any keyword (case-insensitive)."""
        haystacks = [f.casefold() for f in fields if f]
        return any(k in h for h in haystacks for k in self.keywords)

    def is_adult(self, item: SearchResult) -> bool:
        return self.is_adult_text(item.title, item.description, item.type_name)

    def is_allowed(self, item: SearchResult, include_adult: bool) -> bool:
        if include_adult:
            return True
        return not self.is_adult(item)
