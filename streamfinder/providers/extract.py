"""
Pattern helpers that pull a master playlist URL out of player pages or
unpacked JS. Each returns None when nothing matches.
"""
from __future__ import annotations
import re
from typing import Optional
from urllib.parse import urlparse

HLS_KEY_RE = re.compile(r'"(?:hls[^"}]*)":\s*"(https?://[^"]+\.m3u8[^"]*)"', re.IGNORECASE)
FILE_RE = re.compile(r"""file\s*:\s*(['"])([^'"]+)\1""")
ANY_M3U8_RE = re.compile(r"""['"](https?://[^'"\s]+\.m3u8[^'"\s]*)['"]""", re.IGNORECASE)
SRC_RE = re.compile(r"src:\s*'([^']*)'")


def find_hls_source(text: str) -> Optional[str]:
    m = HLS_KEY_RE.search(text or "")
    return m.group(1) if m else None


def find_file_source(text: str) -> Optional[str]:
    m = FILE_RE.search(text or "")
    return m.group(2) if m else None


def find_any_m3u8(text: str) -> Optional[str]:
    m = ANY_M3U8_RE.search(text or "")
    return m.group(1) if m else None


def find_player_src(text: str) -> Optional[str]:
    """`src: '/prorcp/...'` style path in an rcp page."""
    m = SRC_RE.search(text or "")
    if not m or not m.group(1):
        return None
    return m.group(1)


def find_master_url(text: str) -> Optional[str]:
    """Try the hls key, then `file:`, then any quoted .m3u8 URL."""
    return find_hls_source(text) or find_file_source(text) or find_any_m3u8(text)


def origin_of(url: str) -> Optional[str]:
    """scheme://host of `url`; protocol-relative `//host/...` is taken as https."""
    if not url:
        return None
    if url.startswith("//"):
        url = "https:" + url
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"
