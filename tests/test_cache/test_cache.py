"""Tests for the ResponseCache module."""

from __future__ import annotations

import time

import pytest

from grimoire.cache import MISSING, CacheEntry, ResponseCache, make_key

URL = "https://www.dnd5eapi.co/api/spells"


# ------------------------------------------------------------------ #
# Core get/set behaviour
# ------------------------------------------------------------------ #


class TestGetSet:
    def test_set_and_get(self, cache: ResponseCache) -> None:
        payload = {"count": 1, "results": [{"index": "fireball"}]}
        cache.set(URL, payload)
        assert cache.get(URL, 60) == payload

    def test_get_returns_stored_object_not_copy(self, cache: ResponseCache) -> None:
        payload = {"results": []}
        cache.set(URL, payload)
        assert cache.get(URL, 60) is payload

    def test_cache_miss_returns_missing(self, cache: ResponseCache) -> None:
        assert cache.get("https://www.dnd5eapi.co/api/missing", 60) is MISSING

    @pytest.mark.parametrize("payload", [None, [], {}, 0, "", False])
    def test_falsy_payloads_are_distinguishable_from_missing(
        self, cache: ResponseCache, payload: object
    ) -> None:
        cache.set(URL, payload)
        result = cache.get(URL, 60)
        assert result is not MISSING
        assert result == payload
        assert cache.has(URL, 60) is True

    def test_missing_repr_and_falsiness(self) -> None:
        assert repr(MISSING) == "MISSING"
        assert not MISSING


# ------------------------------------------------------------------ #
# Freshness window
# ------------------------------------------------------------------ #


class TestFreshness:
    def test_fresh_within_window(self, cache: ResponseCache, clock) -> None:
        cache.set(URL, "v")
        clock.advance(59)
        assert cache.get(URL, 60) == "v"

    def test_fresh_at_exact_window_boundary(self, cache: ResponseCache, clock) -> None:
        """Age equal to the window is still fresh; only age > window expires."""
        cache.set(URL, "v")
        clock.advance(60)
        assert cache.get(URL, 60) == "v"

    def test_stale_just_past_window(self, cache: ResponseCache, clock) -> None:
        cache.set(URL, "v")
        clock.advance(60.001)
        assert cache.get(URL, 60) is MISSING

    def test_same_entry_fresh_for_longer_window(self, cache: ResponseCache, clock) -> None:
        """The window is chosen per lookup, not fixed at insert time."""
        cache.set(URL, "v")
        clock.advance(120)
        assert cache.get(URL, 600) == "v"
        assert cache.get(URL, 60) is MISSING

    def test_default_window_used_when_none(self, cache: ResponseCache, clock) -> None:
        cache.set(URL, "v")
        clock.advance(300)
        assert cache.get(URL) == "v"
        clock.advance(1)
        assert cache.get(URL) is MISSING

    def test_zero_window_only_same_instant(self, cache: ResponseCache, clock) -> None:
        cache.set(URL, "v")
        assert cache.get(URL, 0) == "v"
        clock.advance(0.5)
        assert cache.get(URL, 0) is MISSING

    def test_real_clock_by_default(self) -> None:
        c = ResponseCache()
        c.set(URL, "v")
        assert c.get(URL, 60) == "v"
        entry = c.entry(URL)
        assert entry is not None
        assert entry.fetched_at <= time.monotonic()


# ------------------------------------------------------------------ #
# Lazy eviction
# ------------------------------------------------------------------ #


class TestLazyEviction:
    def test_stale_get_removes_entry(self, cache: ResponseCache, clock) -> None:
        cache.set(URL, "v")
        clock.advance(61)
        assert URL in cache.stats()["keys"]

        assert cache.get(URL, 60) is MISSING

        assert URL not in cache.stats()["keys"]
        assert cache.stats()["size"] == 0

    def test_stale_has_removes_entry(self, cache: ResponseCache, clock) -> None:
        cache.set(URL, "v")
        clock.advance(61)
        assert cache.has(URL, 60) is False
        assert URL not in cache.stats()["keys"]

    def test_fresh_lookup_keeps_entry(self, cache: ResponseCache, clock) -> None:
        cache.set(URL, "v")
        clock.advance(30)
        assert cache.has(URL, 60) is True
        assert cache.stats()["keys"] == [URL]

    def test_stale_entries_remain_until_looked_up(self, cache: ResponseCache, clock) -> None:
        cache.set("a", 1)
        cache.set("b", 2)
        clock.advance(1000)
        assert len(cache) == 2
        cache.get("a", 10)
        assert cache.stats() == {"size": 1, "keys": ["b"]}

    def test_entry_and_contains_do_not_evict(self, cache: ResponseCache, clock) -> None:
        cache.set(URL, "v")
        clock.advance(10_000)
        assert URL in cache
        assert cache.entry(URL) == CacheEntry(payload="v", fetched_at=1000.0)
        assert len(cache) == 1


# ------------------------------------------------------------------ #
# Overwrite
# ------------------------------------------------------------------ #


class TestOverwrite:
    def test_second_set_replaces_payload_and_timestamp(self, cache: ResponseCache, clock) -> None:
        cache.set(URL, "v1")
        clock.advance(50)
        cache.set(URL, "v2")

        assert cache.stats() == {"size": 1, "keys": [URL]}
        entry = cache.entry(URL)
        assert entry is not None
        assert entry.payload == "v2"
        assert entry.fetched_at == 1050.0

    def test_overwrite_restarts_freshness(self, cache: ResponseCache, clock) -> None:
        cache.set(URL, "v1")
        clock.advance(50)
        cache.set(URL, "v2")
        clock.advance(50)
        assert cache.get(URL, 60) == "v2"

    def test_entries_are_immutable(self, cache: ResponseCache) -> None:
        cache.set(URL, "v")
        entry = cache.entry(URL)
        with pytest.raises(AttributeError):
            entry.payload = "other"  # type: ignore[misc]


# ------------------------------------------------------------------ #
# Delete and clear
# ------------------------------------------------------------------ #


class TestDeleteAndClear:
    def test_delete_removes_specific_entry(self, cache: ResponseCache) -> None:
        cache.set("a", 1)
        cache.set("b", 2)
        cache.delete("a")
        assert cache.get("a", 60) is MISSING
        assert cache.get("b", 60) == 2

    def test_delete_nonexistent_key_no_error(self, cache: ResponseCache) -> None:
        cache.delete("nope")
        assert len(cache) == 0

    def test_clear_removes_all_entries(self, cache: ResponseCache) -> None:
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()
        assert cache.stats() == {"size": 0, "keys": []}


# ------------------------------------------------------------------ #
# Stats
# ------------------------------------------------------------------ #


class TestStats:
    def test_stats_empty_cache(self, cache: ResponseCache) -> None:
        assert cache.stats() == {"size": 0, "keys": []}

    def test_stats_lists_keys_in_insertion_order(self, cache: ResponseCache) -> None:
        cache.set("b", 1)
        cache.set("a", 2)
        assert cache.stats() == {"size": 2, "keys": ["b", "a"]}

    def test_stats_keys_is_a_snapshot(self, cache: ResponseCache) -> None:
        cache.set("a", 1)
        keys = cache.stats()["keys"]
        cache.set("b", 2)
        assert keys == ["a"]


# ------------------------------------------------------------------ #
# Cache keys
# ------------------------------------------------------------------ #


class TestMakeKey:
    def test_no_params_returns_url(self) -> None:
        assert make_key(URL) == URL
        assert make_key(URL, {}) == URL

    def test_params_appended(self) -> None:
        assert make_key(URL, {"level": 3}) == f"{URL}?level=3"

    def test_param_order_independent(self) -> None:
        assert make_key(URL, {"a": 1, "b": 2}) == make_key(URL, {"b": 2, "a": 1})

    def test_different_values_differ(self) -> None:
        assert make_key(URL, {"level": 1}) != make_key(URL, {"level": 2})

    def test_existing_query_string_extended(self) -> None:
        assert make_key(f"{URL}?a=1", {"b": 2}) == f"{URL}?a=1&b=2"

    def test_values_are_url_encoded(self) -> None:
        assert make_key(URL, {"name": "magic missile"}) == f"{URL}?name=magic+missile"
