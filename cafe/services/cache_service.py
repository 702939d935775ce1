# cafe/services/cache_service.py
import json
import time

import redis

from cafe.utils.logging import get_logger
from cafe.utils.retry import redis_retry
from cafe.utils.settings import ORDER_LISTING_CACHE_TTL_SECONDS

logger = get_logger(__name__)


class ListingCache:
    """Cache list zamowien panelu admina; kazda zmiana zamowien czysci caly prefiks."""

    def __init__(self, client: redis.Redis, ttl: int = ORDER_LISTING_CACHE_TTL_SECONDS, prefix: str = "orders:listing"):
        self.redis = client
        self.ttl = ttl
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    @redis_retry()
    def get(self, key: str):
        raw = self.redis.get(self._key(key))
        return json.loads(raw) if raw is not None else None

    @redis_retry()
    def set(self, key: str, value) -> None:
        self.redis.set(self._key(key), json.dumps(value), ex=self.ttl)

    @redis_retry()
    def invalidate(self) -> None:
        keys = list(self.redis.scan_iter(match=f"{self.prefix}:*"))
        if keys:
            self.redis.delete(*keys)
        logger.info(f"Order listing cache invalidated ({len(keys)} keys)")


class MemoryListingCache(ListingCache):
    def __init__(self, ttl: int = ORDER_LISTING_CACHE_TTL_SECONDS):
        self.ttl = ttl
        self._data: dict[str, tuple[str, float]] = {}

    def get(self, key: str):
        entry = self._data.get(key)
        if entry is None or entry[1] <= time.monotonic():
            return None
        return json.loads(entry[0])

    def set(self, key: str, value) -> None:
        self._data[key] = (json.dumps(value), time.monotonic() + self.ttl)

    def invalidate(self) -> None:
        self._data.clear()
