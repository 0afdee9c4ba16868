"""
Streamwish embed scraper (also swiftplayers / playerswish mirrors).
Packed JS deobfuscation → "hls…" master URL → per-quality variant streams.
"""
from __future__ import annotations
import logging
from ..base import EmbedResult, DecodeFailure
from ..fetcher import Fetcher
from ..runner import register_embed
from .. import unpacker, extract, hls

log = logging.getLogger("streamfinder.providers.streamwish")


@register_embed
class StreamwishEmbed:
    id = "streamwish"
    name = "Streamwish"
    rank = 216

    async def scrape(self, url: str, fetcher: Fetcher) -> EmbedResult:
        origin = extract.origin_of(url)
        if not origin:
            raise ValueError(f"Streamwish: invalid embed URL {url!r}")

        html = await fetcher.get(url, headers={"Referer": origin})
        unpacked = unpacker.deobfuscate(html)
        if isinstance(unpacked, DecodeFailure):
            raise ValueError(f"Streamwish: could not unpack player JS ({unpacked.reason})")

        master = extract.find_hls_source(unpacked)
        if not master:
            raise ValueError("Streamwish: HLS master URL not found in unpacked JS")
        log.info("[streamwish] master playlist %s", master)

        headers = {"Referer": f"{origin}/", "Origin": origin}
        parsed = await hls.resolve_variants(fetcher, master, headers=headers)
        if not parsed.variants:
            raise ValueError("Streamwish: no media playlists in master")

        return EmbedResult(streams=hls.variants_to_streams(parsed, headers=headers))
