"""
VidSrc: resolves vidsrc embed → cloudnestra rcp → prorcp/srcrcp → HLS variants.

Flow:
  1. {VIDSRC_EMBED_URL}/movie/{id} | /tv/{id}/{s}-{e}  → server list + player iframe
  2. iframe origin (default cloudnestra.com)           → base for every later request
  3. {base}/rcp/{data-hash}                            → src: '/prorcp/…' or '/srcrcp/…'
  4. prorcp: file: '<master.m3u8>'                     → master playlist
     srcrcp: file pattern, raw #EXTM3U body, or any .m3u8 URL
  5. master playlist                                   → one stream per variant

The base URL travels on ServerListing; nothing here is module state.
"""
from __future__ import annotations
import asyncio
import logging
import re
from dataclasses import dataclass, field

from ..base import MediaContext, SourceResult, Stream, ParsedPlaylist
from ..fetcher import Fetcher
from ..runner import register_source
from ..playlist import parse_master_playlist, resolve_uri
from .. import extract, hls
from ...config import get_settings

log = logging.getLogger("streamfinder.providers.vidsrc")

DEFAULT_BASE = "https://cloudnestra.com"
SKIP_SRCRCP_SERVERS = {"Superembed", "2Embed"}

_TITLE_RE = re.compile(r"<title>(.*?)</title>", re.DOTALL | re.IGNORECASE)
_IFRAME_RE = re.compile(r"<iframe\b[^>]*\bsrc=[\"']([^\"']*)[\"']", re.IGNORECASE)
_SERVER_RE = re.compile(
    r"<(div|li|span|a)\b([^>]*\bclass=[\"'][^\"']*\bserver\b[^\"']*[\"'][^>]*)>(.*?)</\1>",
    re.DOTALL | re.IGNORECASE,
)
_HASH_RE = re.compile(r"\bdata-hash=[\"']([^\"']*)[\"']", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")


@dataclass
class Server:
    name: str
    data_hash: str | None = None


@dataclass
class ServerListing:
    title: str = ""
    base_url: str = DEFAULT_BASE
    servers: list[Server] = field(default_factory=list)


def parse_servers(html: str, default_base: str = DEFAULT_BASE) -> ServerListing:
    """Server list, page title and the player iframe's origin."""
    title_m = _TITLE_RE.search(html)
    iframe_m = _IFRAME_RE.search(html)
    base = default_base
    if iframe_m and iframe_m.group(1):
        base = extract.origin_of(iframe_m.group(1)) or default_base

    servers = []
    for m in _SERVER_RE.finditer(html):
        attrs, inner = m.group(2), m.group(3)
        hash_m = _HASH_RE.search(attrs)
        servers.append(Server(
            name=_TAG_RE.sub("", inner).strip(),
            data_hash=hash_m.group(1) if hash_m and hash_m.group(1) else None,
        ))
    return ServerListing(
        title=title_m.group(1).strip() if title_m else "",
        base_url=base,
        servers=servers,
    )


def embed_url(ctx: MediaContext, root: str) -> str:
    media_id = ctx.imdb_id or ctx.tmdb_id
    if ctx.media_type == "movie":
        return f"{root}/movie/{media_id}"
    return f"{root}/tv/{media_id}/{ctx.season}-{ctx.episode}"


@register_source
class VidSrc:
    id = "vidsrc"
    name = "VidSrc"
    rank = 150
    media_types = ["movie", "tv"]

    async def scrape(self, ctx: MediaContext, fetcher: Fetcher) -> SourceResult:
        root = get_settings().vidsrc_embed_url
        url = embed_url(ctx, root)

        log.info("[vidsrc] fetching %s", url)
        html = await fetcher.get(url, headers={"Referer": root})
        listing = parse_servers(html)
        servers = [s for s in listing.servers if s.data_hash]
        if not servers:
            log.warning("[vidsrc] no servers with data-hash")
            return SourceResult()

        log.info("[vidsrc] %d server(s), base %s", len(servers), listing.base_url)
        per_server = await asyncio.gather(
            *(self._try_server(s, listing.base_url, url, fetcher) for s in servers)
        )
        return SourceResult(streams=[st for streams in per_server for st in streams])

    async def _try_server(self, server: Server, base: str, referer: str, fetcher: Fetcher) -> list[Stream]:
        """Streams from one server; any failure yields []."""
        rcp_url = f"{base}/rcp/{server.data_hash}"
        try:
            rcp_html = await fetcher.get(rcp_url, headers={"Referer": referer})
            path = extract.find_player_src(rcp_html)
            if not path:
                log.warning("[vidsrc] %s: no rcp src", server.name)
                return []

            if path.startswith("/prorcp/"):
                parsed = await self._prorcp(path, base, fetcher)
            elif path.startswith("/srcrcp/"):
                if server.name in SKIP_SRCRCP_SERVERS:
                    log.info("[vidsrc] skipping srcrcp for %s", server.name)
                    return []
                parsed = await self._srcrcp(path, base, rcp_url, fetcher)
            else:
                log.warning("[vidsrc] %s: unhandled rcp path %s", server.name, path[:50])
                return []
        except Exception as e:
            log.warning("[vidsrc] %s failed: %r", server.name, e)
            return []

        if parsed is None or not parsed.variants:
            log.warning("[vidsrc] %s: no stream details", server.name)
            return []
        return hls.variants_to_streams(
            parsed, headers={"Referer": f"{base}/", "Origin": base},
        )

    async def _prorcp(self, path: str, base: str, fetcher: Fetcher) -> ParsedPlaylist | None:
        prorcp_url = base + path
        page = await fetcher.get(prorcp_url, headers={"Referer": f"{base}/"})
        master = extract.find_file_source(page)
        if not master:
            log.debug("[vidsrc] no master URL in %s", prorcp_url)
            return None
        return await hls.resolve_variants(fetcher, master, headers={"Referer": prorcp_url})

    async def _srcrcp(self, path: str, base: str, referer: str, fetcher: Fetcher) -> ParsedPlaylist | None:
        srcrcp_url = base + path
        page = await fetcher.get(srcrcp_url, headers={"Referer": referer})

        if page.lstrip().startswith("#EXTM3U"):
            return parse_master_playlist(page, srcrcp_url)

        master = extract.find_file_source(page) or extract.find_any_m3u8(page)
        if not master:
            log.debug("[vidsrc] nothing playable in %s", srcrcp_url)
            return None
        master = resolve_uri(master, srcrcp_url)
        return await hls.resolve_variants(fetcher, master, headers={"Referer": srcrcp_url})
