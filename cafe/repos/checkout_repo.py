# cafe/repos/checkout_repo.py
import redis

from cafe.domain.schemas import CheckoutState
from cafe.utils.retry import redis_retry
from cafe.utils.settings import CHECKOUT_TTL_SECONDS


class RedisCheckoutStateStore:
    def __init__(self, client: redis.Redis, ttl: int = CHECKOUT_TTL_SECONDS):
        self.redis = client
        self.ttl = ttl

    @staticmethod
    def _key(checkout_id: str) -> str:
        return f"checkout:{checkout_id}"

    @redis_retry()
    def load(self, checkout_id: str) -> CheckoutState | None:
        raw = self.redis.get(self._key(checkout_id))
        if raw is None:
            return None
        return CheckoutState.model_validate_json(raw)

    @redis_retry()
    def save(self, state: CheckoutState) -> None:
        self.redis.set(self._key(state.checkout_id), state.model_dump_json(), ex=self.ttl)

    @redis_retry()
    def delete(self, checkout_id: str) -> None:
        self.redis.delete(self._key(checkout_id))


class MemoryCheckoutStateStore:
    def __init__(self):
        self._data: dict[str, str] = {}

    def load(self, checkout_id: str) -> CheckoutState | None:
        raw = self._data.get(checkout_id)
        return CheckoutState.model_validate_json(raw) if raw is not None else None

    def save(self, state: CheckoutState) -> None:
        #trzymamy JSON, tak jak redis - brak wspoldzielonych referencji
        self._data[state.checkout_id] = state.model_dump_json()

    def delete(self, checkout_id: str) -> None:
        self._data.pop(checkout_id, None)
