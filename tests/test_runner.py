import asyncio

from streamfinder.providers.base import (
    EmbedRef, EmbedResult, MediaContext, SourceResult, Stream,
)
from streamfinder.providers.filters import min_height
from streamfinder.providers.runner import ProviderEngine, _EMBEDS, _SOURCES


class StubSource:
    media_types = ["movie", "tv"]

    def __init__(self, id, rank, result=None, error=None):
        self.id, self.name, self.rank = id, id.title(), rank
        self.result, self.error = result, error

    async def scrape(self, ctx, fetcher):
        if self.error:
            raise self.error
        return self.result


class StubEmbed:
    def __init__(self, id, streams=None, error=None):
        self.id, self.name, self.rank = id, id.title(), 100
        self.streams, self.error = streams or [], error

    async def scrape(self, url, fetcher):
        if self.error:
            raise self.error
        return EmbedResult(streams=[Stream(**vars(s)) for s in self.streams])


def _hls(quality, order, url=None, language=""):
    return Stream(playlist=url or f"https://cdn.example/{quality}.m3u8",
                  quality=quality, source_order=order, language=language)


def _engine(sources, embeds=None, filters=None, fake_fetcher=None):
    return ProviderEngine(fetcher=fake_fetcher(), sources=sources,
                          embeds=embeds or {}, filters=filters)


def test_real_scrapers_registered():
    assert {"cuevana", "vidsrc", "hianime"} <= {s.id for s in _SOURCES}
    assert {"streamwish", "filemoon"} <= set(_EMBEDS)


def test_run_all_streams_groups_by_language(fake_fetcher):
    wish = StubEmbed("wish", [_hls("480p", 0), _hls("1080p", 1)])
    source = StubSource("cue", 200, SourceResult(embeds=[
        EmbedRef("wish", "https://e/1", language="lat"),
        EmbedRef("wish", "https://e/2", language="spa"),
    ]))
    direct = StubSource("vid", 150, SourceResult(streams=[_hls("720p", 0)]))
    engine = _engine([direct, source], {"wish": wish}, fake_fetcher=fake_fetcher)

    outputs = asyncio.run(engine.run_all_streams(MediaContext(tmdb_id=1)))
    assert [(o.source_id, o.stream.language, o.stream.quality) for o in outputs] == [
        ("cue", "lat", "1080p"), ("cue", "lat", "480p"),
        ("cue", "spa", "1080p"), ("cue", "spa", "480p"),
        ("vid", "", "720p"),
    ]
    assert outputs[0].stream.stream_id == "cue-wish-lat-1080p-1"
    assert outputs[-1].stream.stream_id == "vid-direct-unk-720p-0"
    assert outputs[-1].embed_id is None


def test_failures_degrade_to_empty(fake_fetcher):
    broken_embed = StubEmbed("bad", error=ValueError("Streamwish: pattern-not-found"))
    sources = [
        StubSource("boom", 300, error=ConnectionError("down")),
        StubSource("refs", 200, SourceResult(embeds=[
            EmbedRef("bad", "https://e/1"), EmbedRef("missing", "https://e/2"),
        ])),
    ]
    engine = _engine(sources, {"bad": broken_embed}, fake_fetcher=fake_fetcher)
    assert asyncio.run(engine.run_all_streams(MediaContext(tmdb_id=1))) == []
    assert asyncio.run(engine.run_all(MediaContext(tmdb_id=1))) is None


def test_filters_applied(fake_fetcher):
    source = StubSource("vid", 150, SourceResult(streams=[
        _hls("360p", 0), _hls("720p", 1), _hls("auto", 2), Stream(playlist=None, quality="1080p"),
    ]))
    engine = _engine([source], filters=[min_height(480)], fake_fetcher=fake_fetcher)
    outputs = asyncio.run(engine.run_all_streams(MediaContext(tmdb_id=1)))
    assert [o.stream.quality for o in outputs] == ["720p", "auto"]


def test_run_all_prefers_highest_rank(fake_fetcher):
    low = StubSource("low", 10, SourceResult(streams=[_hls("1080p", 0)]))
    high = StubSource("high", 500, SourceResult(streams=[_hls("480p", 0), _hls("720p", 1)]))
    engine = _engine([low, high], fake_fetcher=fake_fetcher)
    out = asyncio.run(engine.run_all(MediaContext(tmdb_id=1)))
    assert out.source_id == "high"
    assert out.stream.quality == "720p"


def test_run_source_and_listing(fake_fetcher):
    source = StubSource("vid", 150, SourceResult(streams=[_hls("720p", 0)]))
    engine = _engine([source], {"wish": StubEmbed("wish")}, fake_fetcher=fake_fetcher)
    assert asyncio.run(engine.run_source("nope", MediaContext(tmdb_id=1))) is None
    assert len(asyncio.run(engine.run_source("vid", MediaContext(tmdb_id=1)))) == 1
    assert engine.list_sources() == [{"id": "vid", "name": "Vid", "rank": 150, "media_types": ["movie", "tv"]}]
    assert engine.list_embeds() == [{"id": "wish", "name": "Wish", "rank": 100}]

    asyncio.run(engine.close())
    assert engine.fetcher.closed
