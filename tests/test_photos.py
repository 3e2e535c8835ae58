import httpx
import pytest

from proxitour.config.settings import PhotoSettings
from proxitour.photos import (
    PhotoResolver,
    PhotoUrlCache,
    build_places_photo_url,
    validate_places_photo_url,
)

GOOD = "https://places.googleapis.com/v1/places/ChIJ1/photos/AbC/media?maxWidthPx=800&key=k"


def test_cache_ttls_differ_for_valid_and_invalid(clock):
    cache = PhotoUrlCache(valid_ttl_s=100, invalid_ttl_s=10, clock=clock)
    cache.set("good", "800", "https://x/good")
    cache.set("bad", "800", "https://x/bad", is_valid=False)

    assert cache.get("good", "800") == "https://x/good"
    assert cache.get("bad", "800") is None
    assert cache.is_known_invalid("bad", "800")

    clock.advance(10)
    assert not cache.is_known_invalid("bad", "800")
    assert cache.get("good", "800") == "https://x/good"
    clock.advance(90)
    assert cache.get("good", "800") is None


def test_cache_evicts_least_recently_used(clock):
    cache = PhotoUrlCache(max_size=2, clock=clock)
    cache.set("a", "1", "ua")
    cache.set("b", "1", "ub")
    assert cache.get("a", "1") == "ua"
    cache.set("c", "1", "uc")

    assert cache.get("b", "1") is None
    assert cache.get("a", "1") == "ua"
    assert cache.stats.evictions == 1
    assert len(cache) == 2


def test_cleanup_expired(clock):
    cache = PhotoUrlCache(valid_ttl_s=5, clock=clock)
    cache.set("a", "1", "ua")
    clock.advance(6)
    assert cache.cleanup_expired() == 1
    assert len(cache) == 0


def test_cache_rejects_non_positive_size():
    with pytest.raises(ValueError):
        PhotoUrlCache(max_size=0)


@pytest.mark.parametrize(
    "url, fragment",
    [
        ("http://places.googleapis.com/v1/places/p/photos/r/media?key=k&maxWidthPx=1", "protocol"),
        ("https://example.com/v1/places/p/photos/r/media?key=k&maxWidthPx=1", "hostname"),
        ("https://places.googleapis.com/v1/places/p/photos/r?key=k&maxWidthPx=1", "path"),
        ("https://places.googleapis.com/v1/places/p/photos/r/media?maxWidthPx=1", "'key'"),
        ("https://places.googleapis.com/v1/places/p/photos/r/media?key=k", "maxWidthPx"),
        ("https://places.googleapis.com/v1/places/p/photos/r/media?key=k&maxHeightPx=5000", "maxHeightPx"),
    ],
)
def test_validate_places_photo_url_reports_problem(url, fragment):
    problem = validate_places_photo_url(url)
    assert problem is not None
    assert fragment in problem


def test_build_url_is_valid():
    url = build_places_photo_url(
        "places/ChIJ1/photos/AbC", api_key="k", max_width_px=800, base_url="https://places.googleapis.com/v1/"
    )
    assert url == GOOD
    assert validate_places_photo_url(url) is None


def test_resolver_caches_and_probes_once(clock):
    probes: list[str] = []

    def probe(url: str) -> bool:
        probes.append(url)
        return True

    settings = PhotoSettings(api_key="k", probe=True)
    resolver = PhotoResolver(settings, PhotoUrlCache(clock=clock), probe=probe)
    assert resolver.resolve("places/ChIJ1/photos/AbC", 800) == GOOD
    assert resolver.resolve("places/ChIJ1/photos/AbC", 800) == GOOD
    assert probes == [GOOD]
    assert resolver.cache.stats.hits == 1


def test_resolver_caches_probe_failures(clock):
    calls = {"n": 0}

    def probe(url: str) -> bool:
        calls["n"] += 1
        raise httpx.ConnectError("down")

    resolver = PhotoResolver(PhotoSettings(api_key="k", probe=True), PhotoUrlCache(clock=clock), probe=probe)
    assert resolver.resolve("places/ChIJ1/photos/AbC") is None
    assert resolver.resolve("places/ChIJ1/photos/AbC") is None
    assert calls["n"] == 1


def test_resolver_without_key_returns_none(clock):
    resolver = PhotoResolver(PhotoSettings(api_key=None), PhotoUrlCache(clock=clock))
    assert resolver.resolve("places/ChIJ1/photos/AbC") is None
