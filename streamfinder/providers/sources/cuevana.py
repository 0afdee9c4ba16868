"""
Cuevana: JSON embed list keyed by TMDB id → streamwish embeds per language.

Flow:
  1. {CUEVANA_BASE_URL}/movie/{tmdb_id}                       → {"embeds": [...]}
  2. {CUEVANA_BASE_URL}/tv/{tmdb_id}/season/{s}/episode/{e}   → same shape
  3. embedId "streamwish-<lang>" → language tag, url → streamwish embed
"""
from __future__ import annotations
import logging
from urllib.parse import urlparse

from ..base import MediaContext, SourceResult, EmbedRef
from ..fetcher import Fetcher
from ..runner import register_source
from ...config import get_settings

log = logging.getLogger("streamfinder.providers.cuevana")

STREAMWISH_HOSTS = ("streamwish.to", "swiftplayers.com", "playerswish.com")
ORIGIN = "https://pstream.org"


def embed_language(embed_id: str) -> str:
    prefix = "streamwish-"
    if embed_id and embed_id.startswith(prefix) and len(embed_id) > len(prefix):
        return embed_id[len(prefix):]
    return "unk"


def is_streamwish(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return any(h in host for h in STREAMWISH_HOSTS)


@register_source
class Cuevana:
    id = "cuevana"
    name = "Cuevana"
    rank = 200
    media_types = ["movie", "tv"]

    async def scrape(self, ctx: MediaContext, fetcher: Fetcher) -> SourceResult:
        base = get_settings().cuevana_base_url
        if ctx.media_type == "movie":
            url = f"{base}/movie/{ctx.tmdb_id}"
        else:
            url = f"{base}/tv/{ctx.tmdb_id}/season/{ctx.season}/episode/{ctx.episode}"

        log.info("[cuevana] fetching %s", url)
        data = await fetcher.get_json(url, headers={"Origin": ORIGIN})
        embeds = data.get("embeds") if isinstance(data, dict) else None
        if not isinstance(embeds, list) or not embeds:
            raise ValueError("Cuevana: no embeds in response")

        refs = []
        for embed in embeds:
            embed_url = (embed or {}).get("url") or ""
            if not is_streamwish(embed_url):
                log.debug("[cuevana] skipping non-streamwish embed %s", embed_url)
                continue
            refs.append(EmbedRef(
                embed_id="streamwish",
                url=embed_url,
                language=embed_language(embed.get("embedId", "")),
            ))

        log.info("[cuevana] %d streamwish embed(s)", len(refs))
        return SourceResult(embeds=refs)
