"""
Core types for the streamfinder provider system.

Two layers:
  - Parsing results: packed-JS payloads, HLS variants, parsed playlists
  - Provider results: HLS streams handed back to the caller
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

# ──────────────────────────────
#  Packed JS
# ──────────────────────────────
PATTERN_NOT_FOUND = "pattern-not-found"
INVALID_NUMERIC_PARAMS = "invalid-numeric-params"
DICTIONARY_LENGTH_MISMATCH = "dictionary-length-mismatch"


@dataclass(frozen=True)
class DecodeFailure:
    reason: str                       # one of the *_NOT_FOUND / *_PARAMS / *_MISMATCH tags

    def __bool__(self):
        return False


@dataclass
class PackedPayload:
    packed_body: str
    radix: int
    token_count: int
    dictionary: list[str] = field(default_factory=list)

# ──────────────────────────────
#  HLS playlists
# ──────────────────────────────
@dataclass(frozen=True)
class StreamVariant:
    quality_label: str                # "720p" | "2500k" | "auto"
    media_playlist_url: str           # always absolute
    source_order: int = 0


@dataclass
class ParsedPlaylist:
    variants: list[StreamVariant] = field(default_factory=list)
    is_media_playlist_fallback: bool = False

# ──────────────────────────────
#  Stream definitions
# ──────────────────────────────
@dataclass
class Stream:
    stream_type: str = "hls"
    playlist: Optional[str] = None    # media (or master) playlist URL
    quality: str = "auto"
    language: str = ""
    source_order: int = 0
    stream_id: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    def to_dict(self):
        d = {
            "id": self.stream_id,
            "type": self.stream_type,
            "playlist": self.playlist,
            "quality": self.quality,
        }
        if self.language:
            d["language"] = self.language
        if self.headers:
            d["headers"] = self.headers
        return d

# ──────────────────────────────
#  Embed reference (returned by source scrapers)
# ──────────────────────────────
@dataclass
class EmbedRef:
    embed_id: str                     # must match an embed scraper id
    url: str
    language: str = ""

# ──────────────────────────────
#  Source scraper output
# ──────────────────────────────
@dataclass
class SourceResult:
    embeds: list[EmbedRef] = field(default_factory=list)
    streams: list[Stream] = field(default_factory=list)  # direct streams (skip embed step)

# ──────────────────────────────
#  Embed scraper output
# ──────────────────────────────
@dataclass
class EmbedResult:
    streams: list[Stream] = field(default_factory=list)

# ──────────────────────────────
#  Final run output
# ──────────────────────────────
@dataclass
class RunOutput:
    source_id: str
    embed_id: Optional[str]
    stream: Stream

    def to_dict(self):
        return {
            "source": self.source_id,
            "embed": self.embed_id,
            "stream": self.stream.to_dict(),
        }

# ──────────────────────────────
#  Media context (passed to scrapers)
# ──────────────────────────────
@dataclass
class MediaContext:
    tmdb_id: int
    imdb_id: Optional[str] = None
    title: str = ""
    media_type: str = "movie"         # "movie" | "tv"
    season: int = 1
    episode: int = 1

    def __post_init__(self):
        # Normalize: accept both "show" and "tv" → always "tv"
        if self.media_type == "show":
            self.media_type = "tv"
