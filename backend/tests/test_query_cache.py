"""Tests for cache stores and generation-stamped versioned caching."""

import json
from unittest.mock import MagicMock, patch

import pytest

from affiliate_coupons.core import cache as cache_module
from affiliate_coupons.core.cache import (
    GENERATION_KEY,
    MemoryCacheStore,
    RedisCacheStore,
    VersionedCache,
    get_cache_store,
    get_versioned_cache,
    reset_cache_store,
)


class TestMemoryCacheStore:
    def test_set_and_get(self):
        store = MemoryCacheStore()
        store.set("key", [1, 2], "coupons", 60)

        assert store.get("key", "coupons") == [1, 2]
        assert store.get("key", "affiliates") is None
        assert store.get("missing", "coupons") is None

    def test_add_only_when_absent(self):
        store = MemoryCacheStore()

        assert store.add("key", "first", "coupons", 60) is True
        assert store.add("key", "second", "coupons", 60) is False
        assert store.get("key", "coupons") == "first"

    def test_entries_expire(self):
        store = MemoryCacheStore()
        with patch.object(cache_module.time, "monotonic", return_value=1000.0):
            store.set("key", "value", "coupons", 60)

        with patch.object(cache_module.time, "monotonic", return_value=1059.0):
            assert store.get("key", "coupons") == "value"

        with patch.object(cache_module.time, "monotonic", return_value=1060.0):
            assert store.get("key", "coupons") is None
            assert store.add("key", "fresh", "coupons", 60) is True

    def test_zero_ttl_never_expires(self):
        store = MemoryCacheStore()
        with patch.object(cache_module.time, "monotonic", return_value=0.0):
            store.set("key", "value", "coupons", 0)

        with patch.object(cache_module.time, "monotonic", return_value=10**9):
            assert store.get("key", "coupons") == "value"

    def test_delete_and_clear(self):
        store = MemoryCacheStore()
        store.set("a", 1, "coupons")
        store.set("b", 2, "coupons")

        store.delete("a", "coupons")
        assert store.get("a", "coupons") is None

        store.clear()
        assert store.get("b", "coupons") is None


class TestRedisCacheStore:
    @pytest.fixture
    def client(self):
        return MagicMock()

    def test_get_decodes_json(self, client):
        client.get.return_value = json.dumps({"a": 1}).encode()
        store = RedisCacheStore(client)

        assert store.get("key", "coupons") == {"a": 1}
        client.get.assert_called_once_with("coupons:key")

    def test_get_missing(self, client):
        client.get.return_value = None

        assert RedisCacheStore(client).get("key", "coupons") is None

    def test_set_with_ttl(self, client):
        RedisCacheStore(client).set("key", [1, 2], "coupons", 3600)

        client.set.assert_called_once_with("coupons:key", "[1, 2]", ex=3600)

    def test_set_without_ttl(self, client):
        RedisCacheStore(client).set("key", "v", "coupons", 0)

        client.set.assert_called_once_with("coupons:key", '"v"', ex=None)

    def test_add_uses_set_nx(self, client):
        client.set.return_value = True
        store = RedisCacheStore(client)

        assert store.add("key", 5, "coupons", 60) is True
        client.set.assert_called_once_with("coupons:key", "5", ex=60, nx=True)

    def test_add_existing_key(self, client):
        client.set.return_value = None

        assert RedisCacheStore(client).add("key", 5, "coupons", 60) is False

    def test_delete(self, client):
        RedisCacheStore(client).delete("key", "coupons")

        client.delete.assert_called_once_with("coupons:key")

    def test_from_url(self):
        with patch.object(cache_module.redis.Redis, "from_url") as from_url:
            store = RedisCacheStore.from_url("redis://cache:6379/2")

        from_url.assert_called_once_with("redis://cache:6379/2")
        assert store.client is from_url.return_value


class TestVersionedCache:
    def test_generation_is_lazily_initialized_and_stable(self):
        store = MemoryCacheStore()
        cache = VersionedCache(store, ttl=60)

        assert store.get(GENERATION_KEY, "coupons") is None
        generation = cache.generation("coupons")

        assert generation
        assert cache.generation("coupons") == generation
        assert store.get(GENERATION_KEY, "coupons") == generation

    def test_concurrent_initializer_wins(self):
        store = MemoryCacheStore()
        cache = VersionedCache(store, ttl=60)

        original_add = store.add

        def racing_add(key, value, namespace, ttl):
            original_add(key, "winner", namespace, ttl)
            return original_add(key, value, namespace, ttl)

        with patch.object(store, "add", side_effect=racing_add):
            assert cache.generation("coupons") == "winner"

    def test_bump_changes_generation(self):
        cache = VersionedCache(MemoryCacheStore(), ttl=60)
        before = cache.generation("coupons")

        bumped = cache.bump("coupons")

        assert bumped != before
        assert cache.generation("coupons") == bumped

    def test_back_to_back_bumps_are_distinct(self):
        cache = VersionedCache(MemoryCacheStore(), ttl=60)

        with patch.object(cache_module.time, "time", return_value=1700000000.0):
            tokens = {cache.bump("coupons") for _ in range(20)}

        assert len(tokens) == 20

    def test_namespaces_are_independent(self):
        cache = VersionedCache(MemoryCacheStore(), ttl=60)
        coupons = cache.generation("coupons")

        cache.bump("referrals")

        assert cache.generation("coupons") == coupons

    def test_current_key_embeds_generation(self):
        cache = VersionedCache(MemoryCacheStore(), ttl=60)
        key = cache.current_key("coupons", "abc")

        assert key == f"abc:{cache.generation('coupons')}"
        cache.bump("coupons")
        assert cache.current_key("coupons", "abc") != key

    def test_fingerprint_is_stable_and_order_independent(self):
        first = VersionedCache.fingerprint("coupons", {"a": 1, "b": [1, 2]})
        second = VersionedCache.fingerprint("coupons", {"b": [1, 2], "a": 1})

        assert first == second
        assert first != VersionedCache.fingerprint("coupons", {"a": 2, "b": [1, 2]})

    def test_fingerprint_distinguishes_count_mode(self):
        payload = {"number": 20}

        assert VersionedCache.fingerprint("coupons", payload) != VersionedCache.fingerprint(
            "coupons", payload, count=True
        )

    def test_add_and_get_use_ttl(self):
        store = MagicMock()
        store.get.return_value = "gen-1"
        cache = VersionedCache(store, ttl=120)

        cache.add("coupons", cache.current_key("coupons", "fp"), [1])

        store.add.assert_called_once_with("fp:gen-1", [1], "coupons", 120)

    def test_bump_orphans_cached_values(self):
        cache = VersionedCache(MemoryCacheStore(), ttl=60)
        cache.add("coupons", cache.current_key("coupons", "fp"), [1, 2, 3])
        assert cache.get("coupons", cache.current_key("coupons", "fp")) == [1, 2, 3]

        cache.bump("coupons")

        assert cache.get("coupons", cache.current_key("coupons", "fp")) is None

    def test_value_added_under_stale_key_is_never_read(self):
        cache = VersionedCache(MemoryCacheStore(), ttl=60)
        stale_key = cache.current_key("coupons", "fp")

        cache.bump("coupons")
        cache.add("coupons", stale_key, [1])

        assert cache.get("coupons", cache.current_key("coupons", "fp")) is None

    def test_default_ttl_from_settings(self):
        with patch.object(cache_module.settings, "QUERY_CACHE_TTL", 42):
            assert VersionedCache(MemoryCacheStore()).ttl == 42


class TestCacheSingletons:
    def test_memory_store_by_default(self):
        store = get_cache_store()

        assert isinstance(store, MemoryCacheStore)
        assert get_cache_store() is store
        assert get_versioned_cache().store is store

    def test_redis_store_when_configured(self):
        reset_cache_store()
        with (
            patch.object(cache_module.settings, "CACHE_BACKEND", "redis"),
            patch.object(cache_module.redis.Redis, "from_url") as from_url,
        ):
            store = get_cache_store()

        assert isinstance(store, RedisCacheStore)
        from_url.assert_called_once_with(cache_module.settings.REDIS_URL)

    def test_reset(self):
        store = get_cache_store()
        reset_cache_store()

        assert get_cache_store() is not store
