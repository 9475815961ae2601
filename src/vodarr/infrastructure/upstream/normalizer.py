"""Turn raw videolist payloads into canonical ``SearchResult`` objects.

Upstreams are independently operated, so the wire shape drifts: ids and
years arrive as numbers or strings, optional fields go missing, whole
items are sometimes half-empty.  The envelope is validated with pydantic
and each item is normalized on its own so one bad item never sinks its
page.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from vodarr.domain.entities.errors import MalformedUpstreamPayload
from vodarr.domain.entities.search import UNKNOWN_YEAR, SearchResult
from vodarr.domain.entities.source import Source
from vodarr.infrastructure.common.html import strip_html_tags

from .episodes import extract_episodes

log = structlog.get_logger(__name__)

_WS_RE = re.compile(r"\s+")
_YEAR_RE = re.compile(r"[0-9]{4}")


def _to_str(v: Any) -> Any:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return str(int(v)) if float(v).is_integer() else str(v)
    return v


class UpstreamItem(BaseModel):
    """One entry of the upstream ``list`` array."""

    model_config = ConfigDict(extra="ignore")

    vod_id: str
    vod_name: str
    vod_pic: Optional[str] = None
    vod_play_url: Optional[str] = None
    vod_class: Optional[str] = None
    vod_year: Optional[str] = None
    vod_content: Optional[str] = None
    vod_douban_id: Optional[str] = None
    type_name: Optional[str] = None

    @field_validator(
        "vod_id",
        "vod_name",
        "vod_year",
        "vod_douban_id",
        "vod_pic",
        "vod_class",
        "type_name",
        mode="before",
    )
    @classmethod
    def _coerce_scalars(cls, v: Any) -> Any:
        return _to_str(v)

    @field_validator("vod_id", "vod_name")
    @classmethod
    def _require_non_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class UpstreamEnvelope(BaseModel):
    """Validated top-level search/detail response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    items: list[dict[str, Any]] = Field(default_factory=list, alias="list")
    page_count: int = Field(default=1, alias="pagecount")

    @field_validator("items", mode="before")
    @classmethod
    def _keep_objects(cls, v: Any) -> list[dict[str, Any]]:
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, dict)]

    @field_validator("page_count", mode="before")
    @classmethod
    def _coerce_page_count(cls, v: Any) -> int:
        try:
            count = int(v)
        except (TypeError, ValueError, OverflowError):
            return 1
        return max(count, 1)


def parse_envelope(payload: Any) -> UpstreamEnvelope:
    """Validate a decoded JSON payload.

    A payload without a usable ``list`` yields an envelope with no items.

    Raises:
        MalformedUpstreamPayload: payload is not a JSON object.
    """
    if not isinstance(payload, Mapping):
        raise MalformedUpstreamPayload(
            f"expected JSON object, got {type(payload).__name__}"
        )
    try:
        return UpstreamEnvelope.model_validate(dict(payload))
    except ValidationError as e:
        raise MalformedUpstreamPayload(str(e)) from e


def clean_title(raw: str) -> str:
    return _WS_RE.sub(" ", raw).strip()


def parse_year(raw: str | None) -> str:
    if not raw:
        return UNKNOWN_YEAR
    match = _YEAR_RE.search(raw)
    return match.group(0) if match else UNKNOWN_YEAR


def normalize(raw_item: Mapping[str, Any], source: Source) -> SearchResult | None:
    """Map one raw upstream item to a ``SearchResult``.

    Returns ``None`` for items without a usable ``vod_id``/``vod_name``.
    """
    try:
        item = UpstreamItem.model_validate(dict(raw_item))
    except ValidationError as e:
        log.debug(
            "upstream_item_skipped",
            source=source.key,
            errors=e.error_count(),
        )
        return None

    return SearchResult(
        id=item.vod_id.strip(),
        title=clean_title(item.vod_name),
        source_key=source.key,
        source_name=source.name,
        episodes=extract_episodes(item.vod_play_url),
        poster_url=item.vod_pic or None,
        category=item.vod_class or None,
        year=parse_year(item.vod_year),
        description=strip_html_tags(item.vod_content),
        type_name=item.type_name or None,
        douban_id=item.vod_douban_id or None,
    )


def normalize_page(
    envelope: UpstreamEnvelope, source: Source
) -> list[SearchResult]:
    """Normalize every item of one page, dropping unusable ones."""
    results: list[SearchResult] = []
    for raw in envelope.items:
        result = normalize(raw, source)
        if result is not None:
            results.append(result)
    return results
