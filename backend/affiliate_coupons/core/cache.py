"""Query cache with generation-stamped keys.

Cached query results are stored under ``"{fingerprint}:{generation}"``. Every
mutation of a namespace replaces its generation token, so results cached
under the previous token are never looked up again and simply age out via
their TTL. No enumeration or bulk eviction of old keys is ever needed.
"""

from __future__ import annotations

import hashlib
import json
import logging
import secrets
import time
from threading import Lock
from typing import Any, Protocol

import redis

from affiliate_coupons.core.config import settings

logger = logging.getLogger(__name__)

GENERATION_KEY = "last_changed"


class CacheStore(Protocol):
    """Minimal key/value cache interface, grouped by namespace."""

    def get(self, key: str, namespace: str) -> Any | None: ...

    def set(self, key: str, value: Any, namespace: str, ttl: int) -> None: ...

    def add(self, key: str, value: Any, namespace: str, ttl: int) -> bool: ...

    def delete(self, key: str, namespace: str) -> None: ...


class MemoryCacheStore:
    """In-process cache store with per-entry expiry.

    A ``ttl`` of 0 or less stores the entry without expiry.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], tuple[Any, float | None]] = {}
        self._lock = Lock()

    def _live_entry(self, slot: tuple[str, str], now: float) -> tuple[Any, float | None] | None:
        entry = self._entries.get(slot)
        if entry is None:
            return None
        expires_at = entry[1]
        if expires_at is not None and expires_at <= now:
            del self._entries[slot]
            return None
        return entry

    @staticmethod
    def _expiry(ttl: int, now: float) -> float | None:
        return now + ttl if ttl > 0 else None

    def get(self, key: str, namespace: str) -> Any | None:
        with self._lock:
            entry = self._live_entry((namespace, key), time.monotonic())
            return entry[0] if entry else None

    def set(self, key: str, value: Any, namespace: str, ttl: int = 0) -> None:
        now = time.monotonic()
        with self._lock:
            self._entries[(namespace, key)] = (value, self._expiry(ttl, now))

    def add(self, key: str, value: Any, namespace: str, ttl: int = 0) -> bool:
        """Store ``value`` only if no live entry exists. Returns True if stored."""
        now = time.monotonic()
        with self._lock:
            slot = (namespace, key)
            if self._live_entry(slot, now) is not None:
                return False
            self._entries[slot] = (value, self._expiry(ttl, now))
            return True

    def delete(self, key: str, namespace: str) -> None:
        with self._lock:
            self._entries.pop((namespace, key), None)

    def clear(self) -> None:
        """Drop every entry (useful for testing)."""
        with self._lock:
            self._entries.clear()


class RedisCacheStore:
    """Cache store backed by Redis.

    Keys are prefixed with their namespace and values are JSON-encoded, so
    only JSON-serializable values can be cached.
    """

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> RedisCacheStore:
        return cls(redis.Redis.from_url(url))

    @staticmethod
    def _key(key: str, namespace: str) -> str:
        return f"{namespace}:{key}"

    def get(self, key: str, namespace: str) -> Any | None:
        raw = self.client.get(self._key(key, namespace))
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any, namespace: str, ttl: int = 0) -> None:
        self.client.set(self._key(key, namespace), json.dumps(value), ex=ttl if ttl > 0 else None)

    def add(self, key: str, value: Any, namespace: str, ttl: int = 0) -> bool:
        stored = self.client.set(
            self._key(key, namespace),
            json.dumps(value),
            ex=ttl if ttl > 0 else None,
            nx=True,
        )
        return bool(stored)

    def delete(self, key: str, namespace: str) -> None:
        self.client.delete(self._key(key, namespace))


def new_generation_token() -> str:
    """Return a fresh generation token (wall-clock time plus random bits)."""
    return f"{time.time():.6f}-{secrets.token_hex(4)}"


class VersionedCache:
    """Namespace generation tracking on top of a cache store.

    Query results are cached under keys that embed the namespace's current
    generation; ``bump`` makes every previously cached result unreachable in
    O(1).
    """

    def __init__(self, store: CacheStore, ttl: int | None = None) -> None:
        self.store = store
        self.ttl = settings.QUERY_CACHE_TTL if ttl is None else ttl

    def generation(self, namespace: str) -> str:
        token = self.store.get(GENERATION_KEY, namespace)
        if token:
            return str(token)

        # Another caller may initialize concurrently; whichever add wins is
        # the token everyone reads back.
        self.store.add(GENERATION_KEY, new_generation_token(), namespace, 0)
        token = self.store.get(GENERATION_KEY, namespace)
        return str(token)

    def bump(self, namespace: str) -> str:
        token = new_generation_token()
        self.store.set(GENERATION_KEY, token, namespace, 0)
        logger.debug("Bumped %s cache generation to %s", namespace, token)
        return token

    def current_key(self, namespace: str, fingerprint: str) -> str:
        return f"{fingerprint}:{self.generation(namespace)}"

    @staticmethod
    def fingerprint(namespace: str, payload: dict[str, Any], count: bool = False) -> str:
        """Stable hash of normalized query arguments.

        Count queries and list queries with the same arguments get distinct
        fingerprints.
        """
        prefix = f"{namespace}_count" if count else f"{namespace}_"
        canonical = json.dumps(payload, sort_keys=True, default=str, separators=(",", ":"))
        return hashlib.md5((prefix + canonical).encode("utf-8")).hexdigest()

    def get(self, namespace: str, key: str) -> Any | None:
        """Read a value stored under a key from ``current_key``."""
        return self.store.get(key, namespace)

    def add(self, namespace: str, key: str, value: Any) -> bool:
        """Store a value under a key resolved before the value was computed.

        A result fetched while a writer bumps the generation lands under the
        old generation and is never read.
        """
        return self.store.add(key, value, namespace, self.ttl)


_store: CacheStore | None = None
_versioned_cache: VersionedCache | None = None


def get_cache_store() -> CacheStore:
    """Get or create the process-wide cache store singleton.

    Uses Redis when ``CACHE_BACKEND`` is ``"redis"``, otherwise an in-process
    store.
    """
    global _store

    if _store is not None:
        return _store

    if settings.redis_cache_enabled:
        _store = RedisCacheStore.from_url(settings.REDIS_URL)
        logger.info("Using Redis query cache at %s", settings.REDIS_URL)
    else:
        _store = MemoryCacheStore()

    return _store


def get_versioned_cache() -> VersionedCache:
    """Get or create the process-wide versioned cache."""
    global _versioned_cache

    if _versioned_cache is None:
        _versioned_cache = VersionedCache(get_cache_store())
    return _versioned_cache


def reset_cache_store() -> None:
    """Reset the cached store. Used for testing."""
    global _store, _versioned_cache
    _store = None
    _versioned_cache = None
