# cafe/repos/session_repo.py
from datetime import datetime, timezone

import redis

from cafe.domain.schemas import SessionRecord
from cafe.utils.retry import redis_retry


class RedisSessionStore:
    """Nieprzezroczyste tokeny sesji: session:{token} -> SessionRecord, wygasa razem z sesja."""

    def __init__(self, client: redis.Redis):
        self.redis = client

    @staticmethod
    def _key(token: str) -> str:
        return f"session:{token}"

    @redis_retry()
    def set(self, record: SessionRecord) -> None:
        ttl = int((record.expires_at - datetime.now(timezone.utc)).total_seconds())
        self.redis.set(self._key(record.token), record.model_dump_json(), ex=max(ttl, 1))

    @redis_retry()
    def get(self, token: str) -> SessionRecord | None:
        raw = self.redis.get(self._key(token))
        if raw is None:
            return None
        return SessionRecord.model_validate_json(raw)

    @redis_retry()
    def clear(self, token: str) -> None:
        self.redis.delete(self._key(token))


class MemorySessionStore:
    def __init__(self):
        self._data: dict[str, SessionRecord] = {}

    def set(self, record: SessionRecord) -> None:
        self._data[record.token] = record

    def get(self, token: str) -> SessionRecord | None:
        record = self._data.get(token)
        if record is not None and record.is_expired():
            self._data.pop(token, None)
            return None
        return record

    def clear(self, token: str) -> None:
        self._data.pop(token, None)
