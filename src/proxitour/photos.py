"""
Landmark photo URLs.

`PhotoUrlCache` is an explicit, injected cache for resolved Google Places photo
URLs. Eviction policy:
- entries expire after `valid_ttl_s` (good URLs) or `invalid_ttl_s` (known-bad URLs)
- at `max_size` entries the least recently used one is evicted

`PhotoResolver` builds a Places photo media URL, validates its shape, optionally
probes it over HTTP, and caches the outcome either way.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable
from urllib.parse import parse_qs, quote, urlencode, urlparse

import httpx

from proxitour.config.settings import PhotoSettings
from proxitour.core.http import head_ok
from proxitour.core.time import Clock, SystemClock

logger = logging.getLogger(__name__)

PLACES_PHOTO_HOST = "places.googleapis.com"
MAX_PHOTO_PX = 4800


@dataclass
class PhotoCacheStats:
    hits: int = 0
    misses: int = 0
    sets: int = 0
    evictions: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "hits": int(self.hits),
            "misses": int(self.misses),
            "sets": int(self.sets),
            "evictions": int(self.evictions),
        }


@dataclass
class _Entry:
    url: str
    is_valid: bool
    stored_at: float


class PhotoUrlCache:
    def __init__(
        self,
        *,
        max_size: int = 500,
        valid_ttl_s: float = 30 * 60,
        invalid_ttl_s: float = 5 * 60,
        clock: Clock | None = None,
    ):
        if int(max_size) <= 0:
            raise ValueError("max_size must be > 0")
        self._max_size = int(max_size)
        self._valid_ttl_s = float(valid_ttl_s)
        self._invalid_ttl_s = float(invalid_ttl_s)
        self._clock = clock or SystemClock()
        self._entries: OrderedDict[tuple[str, str], _Entry] = OrderedDict()
        self.stats = PhotoCacheStats()

    @classmethod
    def from_settings(cls, settings: PhotoSettings, *, clock: Clock | None = None) -> "PhotoUrlCache":
        return cls(
            max_size=settings.max_size,
            valid_ttl_s=settings.valid_ttl_s,
            invalid_ttl_s=settings.invalid_ttl_s,
            clock=clock,
        )

    def __len__(self) -> int:
        return len(self._entries)

    def _fresh(self, entry: _Entry) -> bool:
        ttl = self._valid_ttl_s if entry.is_valid else self._invalid_ttl_s
        return self._clock.monotonic() - entry.stored_at < ttl

    def _lookup(self, key: tuple[str, str]) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not self._fresh(entry):
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry

    def get(self, photo_ref: str, size: str) -> str | None:
        """Cached URL, or None when missing, expired or known to be invalid."""
        entry = self._lookup((photo_ref, size))
        if entry is None:
            self.stats.misses += 1
            return None
        self.stats.hits += 1
        return entry.url if entry.is_valid else None

    def is_known_invalid(self, photo_ref: str, size: str) -> bool:
        entry = self._lookup((photo_ref, size))
        return entry is not None and not entry.is_valid

    def set(self, photo_ref: str, size: str, url: str, *, is_valid: bool = True) -> None:
        key = (photo_ref, size)
        if key in self._entries:
            del self._entries[key]
        while len(self._entries) >= self._max_size:
            evicted, _ = self._entries.popitem(last=False)
            self.stats.evictions += 1
            logger.debug("Evicted photo URL %s", evicted)
        self._entries[key] = _Entry(url=url, is_valid=is_valid, stored_at=self._clock.monotonic())
        self.stats.sets += 1

    def cleanup_expired(self) -> int:
        stale = [k for k, e in self._entries.items() if not self._fresh(e)]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
        self.stats = PhotoCacheStats()


def validate_places_photo_url(url: str) -> str | None:
    """Return None for a well-formed Places photo media URL, else the reason it is not."""
    try:
        parsed = urlparse(url)
    except ValueError as e:
        return f"URL parsing error: {e}"
    if parsed.scheme != "https":
        return "Invalid protocol (must be https)"
    if parsed.hostname != PLACES_PHOTO_HOST:
        return f"Invalid hostname (must be {PLACES_PHOTO_HOST})"

    # /v1/places/{place_id}/photos/{photo_ref}/media
    segments = parsed.path.split("/")
    if (
        len(segments) < 7
        or segments[1] != "v1"
        or segments[2] != "places"
        or segments[4] != "photos"
        or segments[6] != "media"
    ):
        return "Invalid path structure or missing 'media' endpoint"

    query = parse_qs(parsed.query)
    if "key" not in query:
        return "Missing 'key' parameter"
    dims = [p for p in ("maxWidthPx", "maxHeightPx") if p in query]
    if not dims:
        return "Missing required 'maxWidthPx' or 'maxHeightPx' parameter"
    for p in dims:
        raw = query[p][0]
        if not raw.isdigit() or not 1 <= int(raw) <= MAX_PHOTO_PX:
            return f"Invalid {p} value (must be 1-{MAX_PHOTO_PX})"
    return None


def build_places_photo_url(photo_name: str, *, api_key: str, max_width_px: int, base_url: str) -> str:
    """`photo_name` is the Places resource name `places/{id}/photos/{ref}`."""
    path = quote(photo_name.strip("/"), safe="/")
    query = urlencode({"maxWidthPx": int(max_width_px), "key": api_key})
    return f"{base_url.rstrip('/')}/{path}/media?{query}"


class PhotoResolver:
    def __init__(
        self,
        settings: PhotoSettings,
        cache: PhotoUrlCache,
        *,
        probe: Callable[[str], bool] | None = None,
        timeout_seconds: float = 10,
    ):
        self._settings = settings
        self._cache = cache
        self._probe = probe or (lambda url: head_ok(url, timeout_seconds=timeout_seconds))

    @property
    def cache(self) -> PhotoUrlCache:
        return self._cache

    def resolve(self, photo_name: str, max_width_px: int = 800) -> str | None:
        size = str(int(max_width_px))
        cached = self._cache.get(photo_name, size)
        if cached is not None:
            return cached
        if self._cache.is_known_invalid(photo_name, size):
            return None
        if not self._settings.api_key:
            logger.warning("No photo API key configured; cannot resolve %s", photo_name)
            return None

        url = build_places_photo_url(
            photo_name,
            api_key=self._settings.api_key,
            max_width_px=int(max_width_px),
            base_url=self._settings.base_url,
        )
        problem = validate_places_photo_url(url)
        ok = problem is None
        if ok and self._settings.probe:
            try:
                ok = self._probe(url)
            except httpx.HTTPError as e:
                logger.warning("Photo probe failed for %s: %s", photo_name, e)
                ok = False
        elif problem:
            logger.warning("Rejected photo URL for %s: %s", photo_name, problem)

        self._cache.set(photo_name, size, url, is_valid=ok)
        return url if ok else None
