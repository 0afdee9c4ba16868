"""
Fetch-then-parse glue between provider scrapers and the playlist parser.
"""
from __future__ import annotations
import logging

from .base import ParsedPlaylist, Stream
from .fetcher import Fetcher
from .playlist import parse_master_playlist

log = logging.getLogger("streamfinder.providers.hls")


async def resolve_variants(
    fetcher: Fetcher, playlist_url: str, headers: dict | None = None,
) -> ParsedPlaylist:
    """Fetch `playlist_url` and parse it. Relative URIs resolve against the URL as given."""
    text = await fetcher.get(playlist_url, headers=headers)
    parsed = parse_master_playlist(text, playlist_url)
    if parsed.is_media_playlist_fallback:
        log.debug("%s is a media playlist, using it as 'auto'", playlist_url)
    elif not parsed.variants:
        log.warning("No variants in playlist %s", playlist_url)
    return parsed


def variants_to_streams(
    parsed: ParsedPlaylist, *, headers: dict | None = None, language: str = "",
) -> list[Stream]:
    return [
        Stream(
            stream_type="hls",
            playlist=v.media_playlist_url,
            quality=v.quality_label,
            language=language,
            source_order=v.source_order,
            headers=dict(headers or {}),
        )
        for v in parsed.variants
    ]
