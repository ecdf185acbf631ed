"""
Cache-aside accessor on top of the shared Redis client.

Values are stored as JSON text. Reads distinguish three states so that an
explicitly cached empty result is never confused with "not cached yet":

- MISS: nothing cached (or Redis unavailable, or the entry is unreadable)
- EMPTY: an empty collection (or null) was cached
- HIT: a non-empty value was cached

Nothing in this module raises to callers; failures are logged and degrade to
MISS on reads and a no-op on writes.
"""
import json
import logging
from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import Any

from fastapi.encoders import jsonable_encoder

from core.redis import RedisClient

logger = logging.getLogger(__name__)


class CacheKeys(StrEnum):
    """Cache key namespaces."""

    FETCH_ALL_USERS = "FETCH_ALL_USERS"
    FETCH_USER_POSTS = "FETCH_USER_POSTS"


def entity_key(namespace: CacheKeys, entity_id: int) -> str:
    """Build a per-entity key, e.g. `FETCH_USER_POSTS_42`."""
    return f"{namespace.value}_{entity_id}"


class CacheState(Enum):
    """Result state of a cache lookup."""

    MISS = "miss"
    EMPTY = "empty"
    HIT = "hit"


@dataclass(frozen=True)
class CacheLookup:
    """Outcome of a cache read: the state and the decoded value (if any)."""

    state: CacheState
    value: Any = None

    @property
    def found(self) -> bool:
        """True for EMPTY and HIT, i.e. the store need not be consulted."""
        return self.state is not CacheState.MISS


_MISS = CacheLookup(CacheState.MISS)


class Cache:
    """JSON cache-aside accessor with a process-wide default expiry."""

    def __init__(self, redis_client: RedisClient | None, default_ttl: int) -> None:
        self._redis = redis_client
        self._default_ttl = default_ttl

    @property
    def default_ttl(self) -> int:
        """Expiry in seconds used when `store` is called without one."""
        return self._default_ttl

    async def lookup(self, key: str) -> CacheLookup:
        """Read a key and classify it as MISS, EMPTY or HIT."""
        if self._redis is None:
            return _MISS
        raw = await self._redis.get(key)
        if raw is None:
            logger.info("Cache miss for %s", key)
            return _MISS
        try:
            value = json.loads(raw)
        except ValueError as e:
            logger.warning("Discarding unreadable cache entry %s: %s", key, e)
            return _MISS

        logger.info("Cache hit for %s", key)
        if value is None or value == [] or value == {}:
            return CacheLookup(CacheState.EMPTY, value)
        return CacheLookup(CacheState.HIT, value)

    async def fetch(self, key: str) -> Any | None:
        """Return the cached value, or None when absent."""
        return (await self.lookup(key)).value

    async def store(self, key: str, value: Any, ttl_seconds: int | None = None) -> bool:
        """
        Serialize and store a value with an expiry.

        Pydantic models (and lists of them) are dumped with their camelCase
        aliases. Returns True if the write reached Redis.
        """
        if self._redis is None:
            return False
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        try:
            payload = json.dumps(jsonable_encoder(value))
        except (TypeError, ValueError) as e:
            logger.warning("Could not serialize cache value for %s: %s", key, e)
            return False
        stored = await self._redis.setex(key, ttl, payload)
        if stored:
            logger.info("Successfully cached data for %s (expires in %ss)", key, ttl)
        return stored

    async def invalidate(self, *keys: str) -> bool:
        """Drop cached entries so the next read goes to the store."""
        if self._redis is None or not keys:
            return False
        return await self._redis.delete(*keys)
