from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException

from streamfinder.config import VERSION, get_settings, setup_logging
from streamfinder.providers.base import MediaContext
from streamfinder.providers.runner import ProviderEngine

settings = get_settings()
setup_logging(settings.log_level)

MEDIA_TYPES = {"movie", "tv", "show"}

_engine: Optional[ProviderEngine] = None


def get_engine() -> ProviderEngine:
    global _engine
    if _engine is None:
        _engine = ProviderEngine(
            timeout=settings.timeout,
            proxy=settings.proxy,
            filters=settings.stream_filters(),
        )
    return _engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if _engine is not None:
        await _engine.close()


app = FastAPI(title="streamfinder", version=VERSION, lifespan=lifespan)


@app.get("/")
def read_index():
    return {"service": "streamfinder", "version": VERSION}


@app.get("/providers")
def list_providers():
    engine = get_engine()
    return {"sources": engine.list_sources(), "embeds": engine.list_embeds()}


@app.get("/streams/{media_type}/{tmdb_id}")
async def get_streams(
    media_type: str,
    tmdb_id: int,
    season: int = 1,
    episode: int = 1,
    imdb_id: Optional[str] = None,
    title: str = "",
    source: Optional[str] = None,
):
    if media_type not in MEDIA_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported media type: {media_type}")

    media = MediaContext(
        tmdb_id=tmdb_id, imdb_id=imdb_id, title=title, media_type=media_type,
        season=season, episode=episode,
    )
    engine = get_engine()

    # "auto" (or nothing) cycles through every source
    if source and source != "auto":
        outputs = await engine.run_source(source, media)
        if outputs is None:
            raise HTTPException(status_code=404, detail=f"Unknown source: {source}")
    else:
        outputs = await engine.run_all_streams(media)

    return {"streams": [o.to_dict() for o in outputs]}
