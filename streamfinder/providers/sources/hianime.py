"""
Hianime: anime JSON API → per-server HLS master → variants tagged dub/sub.

Flow:
  1. {HIANIME_API_URL}/search?q={title}                  → slug (exact name, else first hit)
  2. {HIANIME_API_URL}/anime/{slug}/episodes             → episodeId for ctx.episode
  3. {HIANIME_API_URL}/episode/sources?animeEpisodeId=…&server=…&category=…
                                                          → master playlist + play headers
  4. master playlist                                      → one stream per variant

ctx.episode is the absolute episode number; Hianime does not split seasons.
"""
from __future__ import annotations
import asyncio
import logging
from urllib.parse import urlencode

from ..base import MediaContext, SourceResult, Stream
from ..fetcher import Fetcher
from ..runner import register_source
from .. import hls
from ...config import get_settings

log = logging.getLogger("streamfinder.providers.hianime")

API_HEADERS = {
    "Accept": "application/json, text/plain, */*",
    "Origin": "https://pstream.org",
}
DEFAULT_REFERER = "https://megacloud.blog/"

SERVERS_TO_TRY = [
    ("hd-1", "dub"),
    ("hd-1", "sub"),
    ("hd-2", "dub"),
    ("hd-2", "sub"),
]


def _payload(data, key: str):
    """data["data"][key] of a successful API response, else None."""
    if not isinstance(data, dict) or not data.get("success"):
        return None
    inner = data.get("data")
    return inner.get(key) if isinstance(inner, dict) else None


def pick_slug(animes: list, title: str) -> str | None:
    wanted = title.lower()
    for anime in animes:
        if str(anime.get("name", "")).lower() == wanted and anime.get("id"):
            return anime["id"]
    return animes[0].get("id") if animes else None


def play_headers(headers) -> dict:
    out = {str(k): str(v) for k, v in (headers or {}).items() if v}
    out.setdefault("Referer", DEFAULT_REFERER)
    return out


@register_source
class Hianime:
    id = "hianime"
    name = "Hianime"
    rank = 120
    media_types = ["tv"]

    async def scrape(self, ctx: MediaContext, fetcher: Fetcher) -> SourceResult:
        if not ctx.title:
            raise ValueError("Hianime: a title is required to search")
        api = get_settings().hianime_api_url

        slug = await self._search(api, ctx.title, fetcher)
        episode_id = await self._episode_id(api, slug, ctx.episode, fetcher)
        log.info("[hianime] %s episode %d → %s", slug, ctx.episode, episode_id)

        per_server = await asyncio.gather(
            *(self._try_server(api, episode_id, server, category, fetcher)
              for server, category in SERVERS_TO_TRY)
        )
        return SourceResult(streams=[st for streams in per_server for st in streams])

    async def _search(self, api: str, title: str, fetcher: Fetcher) -> str:
        url = f"{api}/search?{urlencode({'q': title})}"
        log.info("[hianime] searching %s", url)
        animes = _payload(await fetcher.get_json(url, headers=API_HEADERS), "animes")
        slug = pick_slug(animes, title) if isinstance(animes, list) else None
        if not slug:
            raise ValueError(f"Hianime: {title!r} not found")
        return slug

    async def _episode_id(self, api: str, slug: str, number: int, fetcher: Fetcher) -> str:
        data = await fetcher.get_json(f"{api}/anime/{slug}/episodes", headers=API_HEADERS)
        episodes = _payload(data, "episodes")
        if not isinstance(episodes, list):
            raise ValueError(f"Hianime: no episode list for {slug}")
        for ep in episodes:
            if ep.get("number") == number and ep.get("episodeId"):
                return ep["episodeId"]
        raise ValueError(f"Hianime: episode {number} not listed for {slug}")

    async def _try_server(self, api: str, episode_id: str, server: str, category: str,
                          fetcher: Fetcher) -> list[Stream]:
        """Streams from one server/category pair; any failure yields []."""
        query = urlencode({"animeEpisodeId": episode_id, "server": server, "category": category})
        try:
            data = await fetcher.get_json(f"{api}/episode/sources?{query}", headers=API_HEADERS)
            sources = _payload(data, "sources")
            if not sources:
                log.warning("[hianime] %s/%s: no sources", server, category)
                return []
            master = sources[0].get("url")
            if not master or sources[0].get("type") != "hls":
                log.warning("[hianime] %s/%s: no HLS master", server, category)
                return []
            headers = play_headers(data["data"].get("headers"))
            parsed = await hls.resolve_variants(fetcher, master, headers=headers)
        except Exception as e:
            log.warning("[hianime] %s/%s failed: %r", server, category, e)
            return []
        return hls.variants_to_streams(parsed, headers=headers, language=category)
