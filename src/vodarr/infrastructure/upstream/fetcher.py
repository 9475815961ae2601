"""httpx adapter that searches one videolist source.

Search flow per source:

1. GET ``{api}?ac=videolist&wd={query}`` (page 1).
2. Normalize and content-filter the items.
3. If page 1 had items and the upstream reports more pages, fetch up to
   ``max_pages_for(query) - 1`` further pages concurrently.
4. Concatenate page 1 with the extra pages in page order.

Network errors, non-2xx responses and malformed JSON are logged and
degrade to an empty list for the affected page.  Retries happen below
this layer, in the client's ``RetryTransport``.
"""

from __future__ import annotations

import asyncio
import dataclasses
import re
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from vodarr.domain.entities.errors import (
    DetailUnavailable,
    MalformedUpstreamPayload,
    SourceUnreachable,
)
from vodarr.domain.entities.search import SearchResult
from vodarr.domain.entities.source import Source
from vodarr.infrastructure.common.html import parse_html, select_text
from vodarr.infrastructure.config.schema import SearchConfig

from .content_policy import AdultContentPolicy
from .episodes import (
    M3U8_LINK_RE,
    dedupe_links,
    extract_first_source_episodes,
    find_stream_links,
)
from .normalizer import (
    UpstreamEnvelope,
    clean_title,
    normalize,
    normalize_page,
    parse_envelope,
    parse_year,
)

log = structlog.get_logger(__name__)

SEARCH_PATH = "?ac=videolist&wd="
DETAIL_PATH = "?ac=videolist&ids="
HTML_DETAIL_PATH = "/index.php/vod/detail/id/{id}.html"

_POSTER_RE = re.compile(r"https?://[^\"'\s]+?\.jpg")
_YEAR_NODE_RE = re.compile(r">([0-9]{4})<")


def build_search_url(source: Source, query: str, page: int = 1) -> str:
    url = f"{source.api_base_url}{SEARCH_PATH}{quote(query, safe='')}"
    if page > 1:
        url = f"{url}&pg={page}"
    return url


def build_detail_url(source: Source, item_id: str) -> str:
    return f"{source.api_base_url}{DETAIL_PATH}{quote(item_id, safe='')}"


def build_html_detail_url(source: Source, item_id: str) -> str:
    base = (source.detail_page_url or "").rstrip("/")
    return base + HTML_DETAIL_PATH.format(id=quote(item_id, safe=""))


class HttpxSourceFetcher:
    """Per-source search and detail lookups over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        policy: AdultContentPolicy,
        search_config: SearchConfig,
        timeout_seconds: float = 6.0,
        detail_timeout_seconds: float = 10.0,
    ) -> None:
        self._http = http_client
        self._policy = policy
        self._config = search_config
        self._timeout = timeout_seconds
        self._detail_timeout = detail_timeout_seconds
        self._strict_patterns: dict[str, re.Pattern[str]] = {
            key: re.compile(pattern)
            for key, pattern in search_config.strict_episode_patterns.items()
        }

    def max_pages_for(self, query: str) -> int:
        """Pages to request per source for *query* (page 1 included).

        Long queries are usually precise, so fewer pages are worth
        fetching.  Never exceeds the site-wide ``max_pages``.
        """
        if len(query) > self._config.long_query_threshold:
            per_query = self._config.long_query_max_pages
        else:
            per_query = self._config.short_query_max_pages
        return max(1, min(per_query, self._config.max_pages))

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def fetch_from_source(
        self, source: Source, query: str, include_adult: bool
    ) -> list[SearchResult]:
        try:
            envelope, first_page = await self._fetch_page(
                source, query, 1, include_adult
            )
        except (SourceUnreachable, MalformedUpstreamPayload) as e:
            log.warning(
                "source_search_failed",
                source=source.key,
                query=query,
                error=str(e),
            )
            return []
        except Exception:  # noqa: BLE001
            log.warning(
                "source_search_failed",
                source=source.key,
                query=query,
                exc_info=True,
            )
            return []

        if not first_page:
            return first_page

        max_pages = self.max_pages_for(query)
        pages_to_fetch = min(envelope.page_count, max_pages) - 1
        if pages_to_fetch <= 0:
            log.debug(
                "source_search_done",
                source=source.key,
                pages=1,
                results=len(first_page),
            )
            return first_page

        extra_pages = await asyncio.gather(
            *(
                self._fetch_extra_page(source, query, page, include_adult)
                for page in range(2, pages_to_fetch + 2)
            )
        )

        results = list(first_page)
        for page_results in extra_pages:
            results.extend(page_results)

        log.debug(
            "source_search_done",
            source=source.key,
            pages=pages_to_fetch + 1,
            results=len(results),
        )
        return results

    async def _fetch_extra_page(
        self, source: Source, query: str, page: int, include_adult: bool
    ) -> list[SearchResult]:
        try:
            _, results = await self._fetch_page(source, query, page, include_adult)
        except Exception as e:  # noqa: BLE001
            log.warning(
                "source_page_failed",
                source=source.key,
                query=query,
                page=page,
                error=str(e),
            )
            return []
        return results

    async def _fetch_page(
        self, source: Source, query: str, page: int, include_adult: bool
    ) -> tuple[UpstreamEnvelope, list[SearchResult]]:
        url = build_search_url(source, query, page)
        payload = await self._get_json(source, url, self._timeout)
        envelope = parse_envelope(payload)
        results = [
            item
            for item in normalize_page(envelope, source)
            if self._policy.is_allowed(item, include_adult)
        ]
        return envelope, results

    async def _get_json(self, source: Source, url: str, timeout: float) -> Any:
        response = await self._get(source, url, timeout)
        try:
            return response.json()
        except ValueError as e:
            raise MalformedUpstreamPayload(f"{source.key}: invalid JSON") from e

    async def _get(self, source: Source, url: str, timeout: float) -> httpx.Response:
        try:
            response = await self._http.get(url, timeout=timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceUnreachable(
                source.key, f"HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise SourceUnreachable(source.key, repr(e)) from e
        return response

    # ------------------------------------------------------------------
    # Detail
    # ------------------------------------------------------------------

    async def fetch_detail(self, source: Source, item_id: str) -> SearchResult:
        try:
            if source.detail_page_url:
                result = await self._fetch_html_detail(source, item_id)
            else:
                result = await self._fetch_json_detail(source, item_id)
        except (SourceUnreachable, MalformedUpstreamPayload) as e:
            log.warning(
                "source_detail_failed",
                source=source.key,
                item_id=item_id,
                error=str(e),
            )
            raise DetailUnavailable(f"{source.key}/{item_id}: {e}") from e

        log.debug(
            "source_detail_done",
            source=source.key,
            item_id=item_id,
            episodes=len(result.episodes),
        )
        return result

    async def _fetch_json_detail(self, source: Source, item_id: str) -> SearchResult:
        url = build_detail_url(source, item_id)
        payload = await self._get_json(source, url, self._detail_timeout)
        envelope = parse_envelope(payload)
        if not envelope.items:
            raise DetailUnavailable(f"{source.key}/{item_id}: empty detail payload")

        raw = envelope.items[0]
        result = normalize(raw, source)
        if result is None:
            raise DetailUnavailable(f"{source.key}/{item_id}: unusable detail item")

        episodes = extract_first_source_episodes(raw.get("vod_play_url"))
        if not episodes and isinstance(raw.get("vod_content"), str):
            episodes = dedupe_links(find_stream_links(raw["vod_content"]))
        return dataclasses.replace(result, episodes=episodes)

    async def _fetch_html_detail(self, source: Source, item_id: str) -> SearchResult:
        url = build_html_detail_url(source, item_id)
        html = (await self._get(source, url, self._detail_timeout)).text

        links: list[str] = []
        strict = self._strict_patterns.get(source.key)
        if strict is not None:
            links = find_stream_links(html, strict)
        if not links:
            links = find_stream_links(html, M3U8_LINK_RE)

        soup = parse_html(html)
        poster = _POSTER_RE.search(html)
        year = _YEAR_NODE_RE.search(html)

        return SearchResult(
            id=item_id,
            title=clean_title(select_text(soup, "h1")),
            source_key=source.key,
            source_name=source.name,
            episodes=dedupe_links(links),
            poster_url=poster.group(0) if poster else None,
            year=parse_year(year.group(1) if year else None),
            description=select_text(soup, "div.sketch"),
        )
