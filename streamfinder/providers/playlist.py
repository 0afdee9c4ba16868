"""
HLS master playlist parsing.

Turns the text of a master playlist into StreamVariants with absolute
URLs and a quality label ("1080p", "2500k" or "auto"). A playlist that
turns out to be a media playlist (segments only) yields a single "auto"
variant pointing back at the playlist itself.
"""
from __future__ import annotations
import re
from decimal import Decimal, MAX_EMAX, ROUND_HALF_UP, localcontext
from operator import attrgetter
from typing import Callable, Iterable, TypeVar
from urllib.parse import urljoin

from .base import ParsedPlaylist, StreamVariant

STREAM_INF = "#EXT-X-STREAM-INF:"
EXTINF = "#EXTINF:"

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_RESOLUTION_RE = re.compile(r"RESOLUTION=(-?\d+)x(-?\d+)", re.ASCII)
_BANDWIDTH_RE = re.compile(r"(?<![\w-])BANDWIDTH=(-?\d+)", re.ASCII)
_NUMBER_RE = re.compile(r"\d+", re.ASCII)

T = TypeVar("T")


def _kbps(bandwidth: str) -> str:
    """bits/s digits → kbit/s digits, rounded half away from zero."""
    digits = bandwidth.lstrip("-")
    with localcontext() as ctx:
        ctx.prec = len(digits) + 3
        ctx.Emax = MAX_EMAX
        kbps = Decimal(digits).scaleb(-3).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    if bandwidth.startswith("-") and kbps:
        return f"-{kbps:f}"
    return f"{kbps:f}"


def quality_label(stream_inf: str) -> str:
    """Quality tag for one #EXT-X-STREAM-INF line. Resolution beats bandwidth."""
    res = _RESOLUTION_RE.search(stream_inf)
    if res:
        return f"{res.group(2)}p"
    bw = _BANDWIDTH_RE.search(stream_inf)
    if bw:
        return f"{_kbps(bw.group(1))}k"
    return "auto"


def base_dir(playlist_url: str) -> str:
    """Everything up to and including the last '/'."""
    return playlist_url[: playlist_url.rfind("/") + 1]


def resolve_uri(uri: str, playlist_url: str) -> str:
    return urljoin(base_dir(playlist_url), uri)


def parse_master_playlist(playlist_text: str, playlist_url: str) -> ParsedPlaylist:
    """Parse a master playlist fetched from `playlist_url`. Never raises."""
    lines = _LINE_SPLIT_RE.split(playlist_text or "")
    variants: list[StreamVariant] = []

    for i, line in enumerate(lines):
        if not line.strip().startswith(STREAM_INF):
            continue
        label = quality_label(line)
        if i + 1 >= len(lines):
            continue
        uri = lines[i + 1].strip()
        if not uri or uri.startswith("#"):
            # malformed entry, keep scanning
            continue
        variants.append(StreamVariant(
            quality_label=label,
            media_playlist_url=resolve_uri(uri, playlist_url),
            source_order=len(variants),
        ))

    if not variants and EXTINF in (playlist_text or ""):
        return ParsedPlaylist(
            variants=[StreamVariant("auto", playlist_url, 0)],
            is_media_playlist_fallback=True,
        )
    return ParsedPlaylist(variants=variants)


# ──────────────────────────────
#  Display ordering
# ──────────────────────────────
def quality_rank(label: str) -> Decimal:
    """First integer in the label; -1 for "auto" and anything unparsable.

    Decimal keeps arbitrarily long digit runs exact and comparable.
    """
    m = _NUMBER_RE.search(label or "")
    return Decimal(m.group(0)) if m else Decimal(-1)


def sort_for_display(
    items: Iterable[T],
    group: Callable[[T], str] = lambda _item: "",
    quality: Callable[[T], str] = attrgetter("quality_label"),
    order: Callable[[T], int] = attrgetter("source_order"),
) -> list[T]:
    """Group by `group` (first-seen order), best quality first, then file order."""
    groups: dict[str, list[T]] = {}
    for item in items:
        groups.setdefault(group(item), []).append(item)

    out: list[T] = []
    for members in groups.values():
        # stable: equal qualities keep file order through the reversed pass
        by_order = sorted(members, key=order)
        out.extend(sorted(by_order, key=lambda it: quality_rank(quality(it)), reverse=True))
    return out
