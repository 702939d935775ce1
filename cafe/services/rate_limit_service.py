# cafe/services/rate_limit_service.py
import time
import uuid
from collections import deque

import redis

from cafe.domain.errors import RateLimitError
from cafe.utils.logging import get_logger
from cafe.utils.retry import redis_retry
from cafe.utils.settings import RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW_SECONDS

logger = get_logger(__name__)

#przesuwne okno na sorted secie: wyrzuc stare wpisy, policz, dopisz - atomowo w jednym skrypcie
_SLIDING_WINDOW_LUA = """
local key = KEYS[1]
local now = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local limit = tonumber(ARGV[3])
redis.call('ZREMRANGEBYSCORE', key, 0, now - window)
if redis.call('ZCARD', key) >= limit then
    return 0
end
redis.call('ZADD', key, now, ARGV[4])
redis.call('PEXPIRE', key, window)
return 1
"""


class RateLimiter:
    """Limit prob logowania: domyslnie 5 na 60 s na identyfikator (telefon albo 'admin_login')."""

    def __init__(
        self,
        client: redis.Redis,
        limit: int = RATE_LIMIT_REQUESTS,
        window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
        prefix: str = "cafe:ratelimit",
    ):
        self.redis = client
        self.limit = limit
        self.window_ms = window_seconds * 1000
        self.prefix = prefix

    @redis_retry()
    def allow(self, identifier: str) -> bool:
        now_ms = int(time.time() * 1000)
        res = self.redis.eval(
            _SLIDING_WINDOW_LUA,
            1,
            f"{self.prefix}:{identifier}",
            now_ms,
            self.window_ms,
            self.limit,
            f"{now_ms}-{uuid.uuid4().hex}",
        )
        return bool(res)

    def check(self, identifier: str) -> None:
        if not self.allow(identifier):
            logger.warning(f"Rate limit exceeded for {identifier}")
            raise RateLimitError("Too many attempts. Please try again later.")


class MemoryRateLimiter(RateLimiter):
    def __init__(
        self,
        limit: int = RATE_LIMIT_REQUESTS,
        window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
    ):
        self.limit = limit
        self.window = float(window_seconds)
        self._hits: dict[str, deque] = {}

    def allow(self, identifier: str) -> bool:
        now = time.monotonic()
        hits = self._hits.setdefault(identifier, deque())
        while hits and hits[0] <= now - self.window:
            hits.popleft()
        if len(hits) >= self.limit:
            return False
        hits.append(now)
        return True
