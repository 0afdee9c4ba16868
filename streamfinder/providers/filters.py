"""
Stream predicates applied after parsing. Per-provider policy (minimum
quality, CDN host pinning, language exclusion) lives here, not in the parser.
"""
from __future__ import annotations
import re
from decimal import Decimal
from typing import Callable, Iterable, TypeVar
from urllib.parse import urlparse

from .base import Stream

StreamFilter = Callable[[Stream], bool]
T = TypeVar("T")

_HEIGHT_RE = re.compile(r"^(\d+)p$", re.ASCII)


def min_height(height: int) -> StreamFilter:
    """Drop "<h>p" streams below `height`. Bandwidth and "auto" labels pass."""
    def _keep(stream: Stream) -> bool:
        m = _HEIGHT_RE.match(stream.quality or "")
        return not m or Decimal(m.group(1)) >= height
    return _keep


def host_allowlist(hosts: Iterable[str]) -> StreamFilter:
    allowed = tuple(h.lower().lstrip(".") for h in hosts if h)

    def _keep(stream: Stream) -> bool:
        host = (urlparse(stream.playlist or "").hostname or "").lower()
        return any(host == h or host.endswith("." + h) for h in allowed)
    return _keep


def exclude_languages(languages: Iterable[str]) -> StreamFilter:
    excluded = {lang.lower() for lang in languages}
    return lambda stream: (stream.language or "").lower() not in excluded


def apply_filters(
    items: Iterable[T],
    filters: Iterable[StreamFilter],
    key: Callable[[T], Stream] = lambda s: s,
) -> list[T]:
    filters = list(filters)
    return [it for it in items if all(f(key(it)) for f in filters)]
