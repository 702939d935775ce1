# cafe/repos/cart_repo.py
"""
Adaptery magazynu koszyka.

Koszyk nalezy do sesji klienta - zapisujemy caly snapshot (JSON) pod jednym
kluczem. Serializacja jest w CartStore, adapter tylko trzyma string.
"""
import os
import tempfile
from pathlib import Path
from typing import Protocol

import redis

from cafe.utils.retry import redis_retry
from cafe.utils.settings import CART_TTL_SECONDS


class CartStorage(Protocol):
    def load(self, cart_id: str) -> str | None: ...

    def save(self, cart_id: str, payload: str) -> None: ...


class RedisCartStorage:
    def __init__(self, client: redis.Redis, ttl: int = CART_TTL_SECONDS):
        self.redis = client
        self.ttl = ttl

    @staticmethod
    def _key(cart_id: str) -> str:
        return f"cart:{cart_id}"

    @redis_retry()
    def load(self, cart_id: str) -> str | None:
        return self.redis.get(self._key(cart_id))

    @redis_retry()
    def save(self, cart_id: str, payload: str) -> None:
        #kazdy zapis przedluza zycie koszyka
        self.redis.set(self._key(cart_id), payload, ex=self.ttl)


class MemoryCartStorage:
    def __init__(self):
        self._data: dict[str, str] = {}

    def load(self, cart_id: str) -> str | None:
        return self._data.get(cart_id)

    def save(self, cart_id: str, payload: str) -> None:
        self._data[cart_id] = payload


class FileCartStorage:
    """Jeden plik JSON na koszyk, zapis przez plik tymczasowy + replace."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, cart_id: str) -> Path:
        return self.directory / f"{cart_id}.json"

    def load(self, cart_id: str) -> str | None:
        path = self._path(cart_id)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save(self, cart_id: str, payload: str) -> None:
        fd, tmp = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp, self._path(cart_id))
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
