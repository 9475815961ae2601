"""Episode stream-link extraction from upstream play-URL strings.

Upstreams pack every episode of every play source into one string::

    <source A>$$$<source B>$$$...

where each source segment is a ``#``-separated list of
``<label>$<url>`` pairs, e.g.::

    第01集$https://cdn.a/1/index.m3u8#第02集$https://cdn.a/2/index.m3u8
    $$$第01集$https://share.b/play/xyz

Only direct HLS playlists are wanted, so links are taken from regex
matches of ``$<http(s) url ending in .m3u8>`` rather than by trusting
the label/URL split.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

# Separates the play sources (players/CDNs) of one title.
SEGMENT_DELIMITER = "$$$"
# Separates episodes inside one play source.
EPISODE_DELIMITER = "#"
# Separates an episode label from its URL.
LABEL_URL_SEPARATOR = "$"

# "$" followed by an http(s) URL ending in .m3u8 (shortest match).
M3U8_LINK_RE = re.compile(r"\$(https?://[^\"'\s]+?\.m3u8)")


def clean_stream_link(link: str) -> str:
    """Drop a leading ``$`` and any parenthetical suffix such as ``(HD)``."""
    if link.startswith(LABEL_URL_SEPARATOR):
        link = link[1:]
    paren = link.find("(")
    return link[:paren] if paren > 0 else link


def dedupe_links(links: Iterable[str]) -> tuple[str, ...]:
    """Clean each link and drop exact duplicates, keeping first-seen order."""
    return tuple(dict.fromkeys(clean_stream_link(link) for link in links))


def find_stream_links(
    text: str, pattern: re.Pattern[str] = M3U8_LINK_RE
) -> list[str]:
    """All raw matches of *pattern* in *text* (group 1 when present)."""
    if pattern.groups:
        return [m.group(1) for m in pattern.finditer(text)]
    return [m.group(0) for m in pattern.finditer(text)]


def extract_episodes(play_url: str | None) -> tuple[str, ...]:
    """Episode URLs of the richest play source in *play_url*.

    Every ``$$$`` segment is scanned; the one with the most ``.m3u8``
    matches wins (first one on ties).
    """
    if not play_url:
        return ()

    best: list[str] = []
    for segment in play_url.split(SEGMENT_DELIMITER):
        matches = find_stream_links(segment)
        if len(matches) > len(best):
            best = matches
    return dedupe_links(best)


def extract_first_source_episodes(play_url: str | None) -> tuple[str, ...]:
    """Episode URLs of the first play source, using the label/URL split.

    Used for detail lookups, where any http(s) URL is playable (not only
    HLS playlists).
    """
    if not play_url:
        return ()

    first_segment = play_url.split(SEGMENT_DELIMITER)[0]
    urls: list[str] = []
    for episode in first_segment.split(EPISODE_DELIMITER):
        parts = episode.split(LABEL_URL_SEPARATOR)
        if len(parts) < 2:
            continue
        url = parts[1].strip()
        if url.startswith(("http://", "https://")):
            urls.append(url)
    return tuple(dict.fromkeys(urls))
