from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

SourceOrigin = Literal["config", "custom"]


@dataclass(frozen=True)
class Source:
    """One configured upstream videolist API."""

    key: str  # unique, stable identifier (e.g. "ffzy")
    name: str  # display name
    api_base_url: str  # e.g. "https://api.example.com/api.php/provide/vod"

    # Only set for sources whose detail pages must be scraped as HTML
    detail_page_url: str | None = None

    is_adult: bool = False
    enabled: bool = True
    sort_order: int = 0
    origin: SourceOrigin = "config"
