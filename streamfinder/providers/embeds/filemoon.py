"""
Filemoon embed scraper.
Uses packed JS deobfuscation → extracts HLS URL from the player `file:` setup.
"""
from __future__ import annotations
from ..base import EmbedResult, DecodeFailure
from ..fetcher import Fetcher
from ..runner import register_embed
from .. import unpacker, extract, hls


@register_embed
class FilemoonEmbed:
    id = "filemoon"
    name = "Filemoon"
    rank = 210

    async def scrape(self, url: str, fetcher: Fetcher) -> EmbedResult:
        html = await fetcher.get(url)
        unpacked = unpacker.deobfuscate(html)
        if isinstance(unpacked, DecodeFailure):
            raise ValueError(f"Filemoon packed JS not found ({unpacked.reason})")

        playlist = extract.find_file_source(unpacked)
        if not playlist:
            raise ValueError("Filemoon HLS URL not found")

        origin = extract.origin_of(url)
        headers = {"Referer": f"{origin}/", "Origin": origin} if origin else {}
        parsed = await hls.resolve_variants(fetcher, playlist, headers=headers)

        return EmbedResult(streams=hls.variants_to_streams(parsed, headers=headers))
