"""Unit tests for the expiring cache."""

import pytest

from muzik.utils import ExpiringCache, search_cache_key


class TestExpiringCacheInit:
    def test_rejects_non_positive_capacity(self) -> None:
        with pytest.raises(ValueError, match="capacity"):
            ExpiringCache(capacity=0, ttl_seconds=10)

    def test_rejects_non_positive_ttl(self) -> None:
        with pytest.raises(ValueError, match="ttl_seconds"):
            ExpiringCache(capacity=1, ttl_seconds=0)

    def test_starts_empty(self) -> None:
        cache = ExpiringCache(capacity=5, ttl_seconds=10)
        assert cache.size() == 0
        assert len(cache) == 0
        assert cache.get("missing") is None


class TestExpiry:
    def test_hit_before_ttl_and_miss_after(self, clock) -> None:
        cache = ExpiringCache(capacity=10, ttl_seconds=1.0, clock=clock)
        cache.set("foo::10", ["v1"])

        clock.advance(0.9)
        assert cache.get("foo::10") == ["v1"]

        clock.advance(0.2)
        assert cache.get("foo::10") is None

    def test_entry_at_exact_ttl_is_still_valid(self, clock) -> None:
        cache = ExpiringCache(capacity=10, ttl_seconds=5, clock=clock)
        cache.set("k", 1)
        clock.advance(5)
        assert cache.get("k") == 1

    def test_expired_entry_removed_on_lookup(self, clock) -> None:
        cache = ExpiringCache(capacity=10, ttl_seconds=5, clock=clock)
        cache.set("k", 1)
        clock.advance(6)
        # Lazy expiry: still counted until someone looks it up
        assert cache.size() == 1
        assert cache.get("k") is None
        assert cache.size() == 0

    def test_overwrite_resets_age(self, clock) -> None:
        cache = ExpiringCache(capacity=10, ttl_seconds=5, clock=clock)
        cache.set("k", "old")
        clock.advance(4)
        cache.set("k", "new")
        clock.advance(4)
        assert cache.get("k") == "new"


class TestCapacity:
    def test_oldest_entry_evicted(self) -> None:
        cache = ExpiringCache(capacity=2, ttl_seconds=60)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3
        assert cache.size() == 2

    def test_reads_do_not_change_eviction_order(self) -> None:
        cache = ExpiringCache(capacity=2, ttl_seconds=60)
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.get("a") == 1
        cache.set("c", 3)
        assert cache.get("a") is None
        assert cache.get("b") == 2

    def test_overwrite_does_not_evict(self) -> None:
        cache = ExpiringCache(capacity=2, ttl_seconds=60)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        assert cache.size() == 2
        assert cache.get("a") == 10
        assert cache.get("b") == 2

    def test_size_never_exceeds_capacity(self) -> None:
        cache = ExpiringCache(capacity=3, ttl_seconds=60)
        for i in range(20):
            cache.set(f"k{i}", i)
            assert cache.size() <= 3
        assert [cache.get(f"k{i}") for i in (17, 18, 19)] == [17, 18, 19]


class TestMaintenance:
    def test_clear_returns_removed_count(self) -> None:
        cache = ExpiringCache(capacity=5, ttl_seconds=60)
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.clear() == 2
        assert cache.size() == 0
        assert cache.get("a") is None

    def test_delete(self) -> None:
        cache = ExpiringCache(capacity=5, ttl_seconds=60)
        cache.set("a", 1)
        assert cache.delete("a") is True
        assert cache.delete("a") is False
        assert cache.get("a") is None

    def test_stats(self) -> None:
        cache = ExpiringCache(capacity=5, ttl_seconds=60)
        cache.set("a", 1)
        assert cache.stats() == {"size": 1, "max_size": 5, "ttl_seconds": 60}


class TestSearchCacheKey:
    def test_case_and_whitespace_folded(self) -> None:
        assert search_cache_key("  Foo  ", 10) == search_cache_key("foo", 10)

    def test_result_count_is_part_of_key(self) -> None:
        assert search_cache_key("foo", 10) != search_cache_key("foo", 20)

    def test_format(self) -> None:
        assert search_cache_key(" Lofi ", 5) == "lofi::5"
