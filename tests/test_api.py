import pytest
from fastapi.testclient import TestClient

from streamfinder.api import main
from streamfinder.providers.base import SourceResult, Stream
from streamfinder.providers.runner import ProviderEngine


class OneStreamSource:
    id = "stub"
    name = "Stub"
    rank = 1
    media_types = ["movie", "tv"]

    async def scrape(self, ctx, fetcher):
        return SourceResult(streams=[
            Stream(playlist=f"https://cdn.example/{ctx.tmdb_id}/720.m3u8", quality="720p",
                   language=ctx.title),
        ])


@pytest.fixture
def client(monkeypatch, fake_fetcher):
    engine = ProviderEngine(fetcher=fake_fetcher(), sources=[OneStreamSource()], embeds={})
    monkeypatch.setattr(main, "_engine", engine)
    return TestClient(main.app)


def test_read_main(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"service": "streamfinder", "version": "0.1.0"}


def test_providers(client):
    response = client.get("/providers")
    assert response.status_code == 200
    assert [s["id"] for s in response.json()["sources"]] == ["stub"]


def test_streams(client):
    response = client.get("/streams/movie/550")
    assert response.status_code == 200
    streams = response.json()["streams"]
    assert streams == [{
        "source": "stub",
        "embed": None,
        "stream": {
            "id": "stub-direct-unk-720p-0",
            "type": "hls",
            "playlist": "https://cdn.example/550/720.m3u8",
            "quality": "720p",
        },
    }]


def test_streams_single_source(client):
    assert client.get("/streams/show/1399?season=1&episode=2&source=stub").status_code == 200
    assert client.get("/streams/movie/550?source=nope").status_code == 404


def test_bad_media_type(client):
    assert client.get("/streams/anime/1").status_code == 400


def test_docs_reachable(client):
    assert client.get("/docs").status_code == 200


def test_title_reaches_sources(client):
    response = client.get("/streams/tv/37854?episode=5&title=One%20Piece")
    assert response.status_code == 200
    assert response.json()["streams"][0]["stream"]["language"] == "One Piece"
