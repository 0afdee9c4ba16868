"""
Environment-driven settings. Values come from the process environment,
with a local .env file loaded first if present.
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

log = logging.getLogger("streamfinder.config")

VERSION = "0.1.0"

CUEVANA_BASE_URL = "https://ws-m3u8.moonpic.qzz.io:3008/tmdb"
VIDSRC_EMBED_URL = "https://vidsrc.xyz/embed"
HIANIME_API_URL = "https://hianime.pstream.org/api/v2/hianime"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning(f"{name}={raw!r} is not an integer, using {default}")
        return default


def _list_env(name: str) -> list[str]:
    raw = os.getenv(name) or ""
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class Settings:
    timeout: int = 12
    proxy: str | None = None
    log_level: str = "INFO"
    cuevana_base_url: str = CUEVANA_BASE_URL
    vidsrc_embed_url: str = VIDSRC_EMBED_URL
    hianime_api_url: str = HIANIME_API_URL
    min_height: int = 0
    hosts: list[str] = field(default_factory=list)
    exclude_langs: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            timeout=_int_env("STREAMFINDER_TIMEOUT", 12),
            proxy=os.getenv("STREAMFINDER_PROXY") or None,
            log_level=(os.getenv("STREAMFINDER_LOG_LEVEL") or "INFO").upper(),
            cuevana_base_url=(os.getenv("CUEVANA_BASE_URL") or CUEVANA_BASE_URL).rstrip("/"),
            vidsrc_embed_url=(os.getenv("VIDSRC_EMBED_URL") or VIDSRC_EMBED_URL).rstrip("/"),
            hianime_api_url=(os.getenv("HIANIME_API_URL") or HIANIME_API_URL).rstrip("/"),
            min_height=_int_env("STREAMFINDER_MIN_HEIGHT", 0),
            hosts=_list_env("STREAMFINDER_HOSTS"),
            exclude_langs=_list_env("STREAMFINDER_EXCLUDE_LANGS"),
        )

    def stream_filters(self):
        from .providers import filters
        out = []
        if self.min_height > 0:
            out.append(filters.min_height(self.min_height))
        if self.hosts:
            out.append(filters.host_allowlist(self.hosts))
        if self.exclude_langs:
            out.append(filters.exclude_languages(self.exclude_langs))
        return out


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
