"""
Provider engine: discovers source scrapers, resolves embeds, returns HLS streams.

Usage:
    engine = ProviderEngine()
    outputs = await engine.run_all_streams(media)
    for out in outputs:
        print(out.to_dict())
    await engine.close()
"""
from __future__ import annotations
import asyncio
import logging
from typing import Optional

from .base import (
    MediaContext, RunOutput, Stream, SourceResult, EmbedResult,
)
from .fetcher import Fetcher
from .filters import StreamFilter, apply_filters
from .playlist import sort_for_display

log = logging.getLogger("streamfinder.providers")

SOURCE_TIMEOUT = 20
EMBED_TIMEOUT = 15


# ──────────────────────────────
#  Scraper registries
# ──────────────────────────────
class _SourceScraper:
    id: str
    name: str
    rank: int
    media_types: list[str]          # ["movie"] or ["movie", "tv"]

    async def scrape(self, ctx: MediaContext, fetcher: Fetcher) -> SourceResult:
        raise NotImplementedError


class _EmbedScraper:
    id: str
    name: str
    rank: int

    async def scrape(self, url: str, fetcher: Fetcher) -> EmbedResult:
        raise NotImplementedError


# Global registries, populated when source/embed modules are imported
_SOURCES: list[_SourceScraper] = []
_EMBEDS: dict[str, _EmbedScraper] = {}


def register_source(scraper):
    """Decorator to register a source scraper class."""
    # Deduplicate: remove any existing entry with same id
    global _SOURCES
    _SOURCES = [s for s in _SOURCES if s.id != scraper.id]
    inst = scraper()
    if not getattr(inst, 'disabled', False):
        _SOURCES.append(inst)
        _SOURCES.sort(key=lambda s: s.rank, reverse=True)
    return scraper


def register_embed(scraper):
    """Decorator to register an embed scraper class."""
    inst = scraper()
    _EMBEDS[inst.id] = inst
    return scraper


# ──────────────────────────────
#  Engine
# ──────────────────────────────
class ProviderEngine:
    def __init__(
        self,
        *,
        timeout: int = 12,
        proxy: str | None = None,
        fetcher: Fetcher | None = None,
        sources: list | None = None,
        embeds: dict | None = None,
        filters: list[StreamFilter] | None = None,
    ):
        self.fetcher = fetcher or Fetcher(timeout=timeout, proxy=proxy)
        self.sources = sorted(sources, key=lambda s: s.rank, reverse=True) if sources is not None else _SOURCES
        self.embeds = embeds if embeds is not None else _EMBEDS
        self.filters = filters or []

    async def close(self):
        await self.fetcher.close()

    def list_sources(self):
        return [{'id': s.id, 'name': s.name, 'rank': s.rank, 'media_types': list(s.media_types)}
                for s in self.sources if not getattr(s, 'disabled', False)]

    def list_embeds(self):
        return [{'id': e.id, 'name': e.name, 'rank': e.rank}
                for e in self.embeds.values() if not getattr(e, 'disabled', False)]

    def _applicable(self, media: MediaContext):
        return [
            s for s in self.sources
            if media.media_type in s.media_types
            and not getattr(s, 'disabled', False)
        ]

    async def _collect(self, source, media: MediaContext) -> list[RunOutput]:
        """All valid streams from one source. Failures degrade to an empty list."""
        found: list[RunOutput] = []
        try:
            log.info(f"[{source.id}] Trying source scraper...")
            result = await asyncio.wait_for(
                source.scrape(media, self.fetcher), timeout=SOURCE_TIMEOUT)
        except Exception as e:
            log.warning(f"[{source.id}] Source failed: {e!r}")
            return found

        for stream in result.streams:
            found.append(RunOutput(source_id=source.id, embed_id=None, stream=stream))

        for ref in result.embeds:
            scraper = self.embeds.get(ref.embed_id)
            if not scraper or getattr(scraper, 'disabled', False):
                log.debug(f"[{source.id}] No embed scraper for {ref.embed_id}")
                continue
            try:
                log.info(f"  [{source.id} → {scraper.id}] Resolving embed...")
                out = await asyncio.wait_for(
                    scraper.scrape(ref.url, self.fetcher), timeout=EMBED_TIMEOUT)
            except Exception as e:
                log.warning(f"  [{scraper.id}] Embed failed: {e!r}")
                continue
            for stream in out.streams:
                if ref.language and not stream.language:
                    stream.language = ref.language
                found.append(RunOutput(source_id=source.id, embed_id=scraper.id, stream=stream))

        found = [o for o in found if self._valid(o.stream)]
        found = apply_filters(found, self.filters, key=lambda o: o.stream)
        self._assign_ids(found)
        return found

    @staticmethod
    def _assign_ids(outputs: list[RunOutput]):
        for n, out in enumerate(outputs):
            s = out.stream
            if s.stream_id:
                continue
            parts = [out.source_id, out.embed_id or "direct", s.language or "unk", s.quality, str(n)]
            s.stream_id = "-".join(parts)

    async def run_all(self, media: MediaContext) -> Optional[RunOutput]:
        """Try all sources concurrently, return the best stream of the highest-rank source."""
        applicable = self._applicable(media)
        results = await asyncio.gather(
            *(self._collect(s, media) for s in applicable), return_exceptions=True)

        for source, res in zip(applicable, results):
            if isinstance(res, list) and res:
                log.info(f"[{source.id}] Stream resolved")
                return self._ordered(res)[0]

        log.warning("All providers exhausted, no stream found")
        return None

    async def run_all_streams(self, media: MediaContext) -> list[RunOutput]:
        """Try ALL sources/embeds, collect every working stream for the player UI."""
        applicable = self._applicable(media)
        task_results = await asyncio.gather(
            *(self._collect(s, media) for s in applicable), return_exceptions=True)

        results: list[RunOutput] = []
        for r in task_results:
            if isinstance(r, list):
                results.extend(r)
        if not results:
            log.warning("All providers exhausted, no stream found")
        return self._ordered(results)

    async def run_source(self, source_id: str, media: MediaContext) -> Optional[list[RunOutput]]:
        """Run a single named source. None if no such source is registered."""
        source = next((s for s in self.sources if s.id == source_id), None)
        if not source:
            return None
        return self._ordered(await self._collect(source, media))

    @staticmethod
    def _ordered(outputs: list[RunOutput]) -> list[RunOutput]:
        return sort_for_display(
            outputs,
            group=lambda o: o.stream.language,
            quality=lambda o: o.stream.quality,
            order=lambda o: o.stream.source_order,
        )

    @staticmethod
    def _valid(stream: Stream) -> bool:
        return stream.stream_type == "hls" and bool(stream.playlist)


# ──────────────────────────────
#  Import all scrapers to register them
# ──────────────────────────────
def _load_scrapers():
    # ── Sources ──
    from .sources import cuevana        # noqa: F401  rank 200
    from .sources import vidsrc         # noqa: F401  rank 150
    from .sources import hianime        # noqa: F401  rank 120
    # ── Embeds ──
    from .embeds import streamwish      # noqa: F401  rank 216
    from .embeds import filemoon        # noqa: F401  rank 210

_load_scrapers()
