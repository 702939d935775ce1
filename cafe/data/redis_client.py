# cafe/data/redis_client.py
from functools import lru_cache

import redis

from cafe.utils.settings import REDIS_URL
from cafe.utils.logging import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_redis() -> redis.Redis | None:
    """
    Jeden klient redisa na proces.
    Pusty REDIS_URL zwraca None i aplikacja przechodzi na magazyny w pamieci.
    """
    if not REDIS_URL:
        logger.warning("REDIS_URL is empty, falling back to in-memory stores (dev mode)")
        return None

    return redis.Redis.from_url(REDIS_URL, decode_responses=True)
