"""Small HTML text helpers shared by the upstream adapters."""

from __future__ import annotations

import re
from html import unescape

from bs4 import BeautifulSoup, Tag

_TAG_RE = re.compile(r"<[^>]+>")


def strip_html_tags(html: str | None) -> str:
    """Remove HTML tags, unescape entities and trim."""
    if not html:
        return ""
    return unescape(_TAG_RE.sub("", html)).replace("\xa0", " ").strip()


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (lxml parser)."""
    return BeautifulSoup(html, "lxml")


def select_text(root: BeautifulSoup | Tag, selector: str, default: str = "") -> str:
    """Whitespace-normalized text of the first element matching *selector*."""
    match = root.select_one(selector)
    if match is None:
        return default
    text = match.get_text(" ", strip=True)
    return text if text else default
