# cafe/services/lock_service.py
import time
import uuid
from contextlib import contextmanager

import redis

from cafe.domain.errors import SubmissionInProgressError
from cafe.utils.logging import get_logger
from cafe.utils.retry import redis_retry
from cafe.utils.settings import SUBMISSION_LOCK_TTL_SECONDS

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nikt nie wcisnie sie miedzy GET a DEL
#zwalniamy tylko wlasny lock (wartosc = owner)


class LockService:
    """
    Blokada na czas zewnetrznego wywolania w checkoucie (wysylka OTP, zapis zamowienia).
    Drugie klikniecie w tym oknie dostaje SubmissionInProgressError zamiast drugiego zamowienia.
    Lock wygasa sam po ttl, nawet jesli worker padnie w trakcie.
    """

    def __init__(self, client: redis.Redis, ttl: int = SUBMISSION_LOCK_TTL_SECONDS):
        self.redis = client
        self.ttl = ttl

    @staticmethod
    def _key(name: str) -> str:
        return f"lock:{name}"

    @redis_retry()
    def acquire(self, name: str, owner: str, ttl: int | None = None) -> bool:
        key = self._key(name)
        logger.debug(f"Acquire lock {key} for {owner}")
        #SET lock:checkout:abc "owner" NX EX 30
        return bool(
            self.redis.set(
                name=key,
                value=owner,
                nx=True,  #tylko jesli nie istnieje
                ex=ttl or self.ttl,  #wygasa sam
            )
        )

    @redis_retry()
    def release(self, name: str, owner: str) -> bool:
        key = self._key(name)
        logger.debug(f"Release lock {key} for {owner}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, owner)
        return bool(res)

    @contextmanager
    def hold(self, name: str):
        owner = uuid.uuid4().hex
        if not self.acquire(name, owner):
            raise SubmissionInProgressError("Your previous request is still being processed")
        try:
            yield
        finally:
            self.release(name, owner)


class MemoryLockService(LockService):
    """Ta sama semantyka (NX + wygasanie + zwalnianie tylko przez wlasciciela) w pamieci procesu."""

    def __init__(self, ttl: int = SUBMISSION_LOCK_TTL_SECONDS):
        self.ttl = ttl
        self._locks: dict[str, tuple[str, float]] = {}

    def acquire(self, name: str, owner: str, ttl: int | None = None) -> bool:
        now = time.monotonic()
        current = self._locks.get(name)
        if current is not None and current[1] > now:
            return False
        self._locks[name] = (owner, now + (ttl or self.ttl))
        return True

    def release(self, name: str, owner: str) -> bool:
        current = self._locks.get(name)
        if current is None or current[0] != owner:
            return False
        del self._locks[name]
        return True
