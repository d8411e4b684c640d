import pytest

from dogsearch.services.search.distance import AnnotatedResult
from dogsearch.services.search.query_normalizer import CacheKey
from dogsearch.services.search.result_cache import SearchResultCache


def _results(*ids):
    return [AnnotatedResult(record={"id": i, "name": f"Listing {i}"}, distance_miles=1.0) for i in ids]


def test_put_then_get_returns_results(clock):
    cache = SearchResultCache(ttl_seconds=300, max_entries=10, clock=clock)
    key = CacheKey(term="vet")
    cache.put(key, _results("a", "b"))

    entry = cache.get(key)
    assert entry is not None
    assert [r.record["id"] for r in entry.results] == ["a", "b"]
    assert entry.hit_count == 1
    assert cache.get(CacheKey(term="groomer")) is None


def test_entry_expires_exactly_at_ttl(clock):
    cache = SearchResultCache(ttl_seconds=300, max_entries=10, clock=clock)
    key = CacheKey(term="vet")
    cache.put(key, _results("a"))

    clock.advance(299.5)
    assert cache.get(key) is not None

    clock.advance(0.5)
    assert cache.get(key) is None
    stats = cache.stats()
    assert stats.expirations == 1
    assert stats.entries == 0


def test_hits_do_not_extend_ttl(clock):
    cache = SearchResultCache(ttl_seconds=10, max_entries=10, clock=clock)
    key = CacheKey(term="vet")
    cache.put(key, _results("a"))
    for _ in range(5):
        clock.advance(1.5)
        assert cache.get(key) is not None
    clock.advance(3)
    assert cache.get(key) is None


def test_capacity_evicts_least_recently_used(clock):
    cache = SearchResultCache(ttl_seconds=300, max_entries=2, clock=clock)
    k1, k2, k3 = CacheKey(term="one"), CacheKey(term="two"), CacheKey(term="three")
    cache.put(k1, _results("1"))
    clock.advance(1)
    cache.put(k2, _results("2"))
    clock.advance(1)
    assert cache.get(k1) is not None  # k2 is now least recently used

    cache.put(k3, _results("3"))
    assert len(cache) == 2
    assert cache.get(k2) is None
    assert cache.get(k1) is not None
    assert cache.get(k3) is not None
    assert cache.stats().evictions == 1


def test_expired_entries_are_evicted_before_live_ones(clock):
    cache = SearchResultCache(ttl_seconds=10, max_entries=2, clock=clock)
    old, live, new = CacheKey(term="old"), CacheKey(term="live"), CacheKey(term="new")
    cache.put(old, _results("o"), ttl=1)
    cache.put(live, _results("l"))
    clock.advance(2)
    cache.put(new, _results("n"))

    stats = cache.stats()
    assert stats.entries == 2
    assert stats.evictions == 0
    assert stats.expirations == 1
    assert cache.get(live) is not None


def test_put_replaces_existing_entry(clock):
    cache = SearchResultCache(ttl_seconds=300, max_entries=10, clock=clock)
    key = CacheKey(term="vet")
    cache.put(key, _results("a"))
    cache.put(key, _results("b", "c"))
    assert len(cache) == 1
    assert [r.record["id"] for r in cache.get(key).results] == ["b", "c"]


def test_stats_track_hits_misses_and_rate(clock):
    cache = SearchResultCache(ttl_seconds=300, max_entries=10, clock=clock)
    key = CacheKey(term="vet")
    cache.get(key)
    cache.put(key, _results("a"))
    cache.get(key)
    cache.get(key)
    cache.get(key)

    stats = cache.stats()
    assert (stats.hits, stats.misses) == (3, 1)
    assert stats.hit_rate == 75.0
    assert stats.size_bytes > 0
    assert stats.max_entries == 10
    assert stats.ttl_seconds == 300


def test_clear_drops_entries_and_resets_counters(clock):
    cache = SearchResultCache(ttl_seconds=300, max_entries=10, clock=clock)
    cache.put(CacheKey(term="a"), _results("a"))
    cache.put(CacheKey(term="b"), _results("b"))
    cache.get(CacheKey(term="a"))

    assert cache.clear() == 2
    stats = cache.stats()
    assert (stats.entries, stats.hits, stats.misses, stats.size_bytes) == (0, 0, 0, 0)
    assert stats.hit_rate == 0.0


def test_invalidate_matches_filters(clock):
    cache = SearchResultCache(ttl_seconds=300, max_entries=10, clock=clock)
    groomers = CacheKey(term="dog", categories=("groomer",), state="IN")
    any_kind = CacheKey(term="dog", state="IN")
    products = CacheKey(term="dog", kind="product")
    ohio = CacheKey(term="dog", kind="service", state="OH")
    for key in (groomers, any_kind, products, ohio):
        cache.put(key, _results("x"))

    assert cache.invalidate(kind="service", state="in") == 2
    assert cache.get(groomers) is None
    assert cache.get(any_kind) is None
    assert cache.get(products) is not None
    assert cache.get(ohio) is not None

    # Unrestricted keys match any category
    assert cache.invalidate(category="Groomer") == 2
    assert len(cache) == 0


def test_invalidate_drops_unrestricted_entries_holding_matching_listings(clock):
    cache = SearchResultCache(ttl_seconds=300, max_entries=10, clock=clock)
    broad = CacheKey(term="groomer")
    indiana = CacheKey(term="groomer", state="IN")
    ohio = CacheKey(term="groomer", state="OH", postal_code="43215", categories=("groomer",))
    record = {"id": "svc-9", "state": "IN", "zip_code": "46204", "service_type": "groomer"}
    for key in (broad, indiana, ohio):
        cache.put(key, [AnnotatedResult(record=record)])

    assert cache.invalidate(state="IN") == 2
    assert cache.get(broad) is None
    assert cache.get(indiana) is None
    assert cache.get(ohio) is not None

    cache.put(broad, [AnnotatedResult(record=record)])
    assert cache.invalidate(postal_code="46204") == 1
    assert cache.get(broad) is None

    cache.put(broad, [AnnotatedResult(record=record)])
    assert cache.invalidate(category="groomer") == 2
    assert len(cache) == 0


def test_returned_entries_are_immutable(clock):
    cache = SearchResultCache(ttl_seconds=300, max_entries=10, clock=clock)
    entry = cache.put(CacheKey(term="vet"), _results("a"))
    with pytest.raises(AttributeError):
        entry.hit_count = 5  # type: ignore[misc]
    assert isinstance(entry.results, tuple)


def test_invalid_configuration_is_rejected():
    with pytest.raises(ValueError):
        SearchResultCache(ttl_seconds=0)
    with pytest.raises(ValueError):
        SearchResultCache(max_entries=0)
