# cafe/repos/otp_repo.py
from datetime import datetime, timezone

import redis

from cafe.domain.schemas import OtpChallenge
from cafe.utils.retry import redis_retry


class RedisOtpChallengeStore:
    """
    Jedno aktywne wyzwanie OTP na checkout, klucz otp:{checkout_id}.
    Klucz zyje 2x TTL kodu - przeterminowany kod zglaszamy jako wygasly, a nie jako brak kodu.
    """

    def __init__(self, client: redis.Redis):
        self.redis = client

    @staticmethod
    def _key(checkout_id: str) -> str:
        return f"otp:{checkout_id}"

    @redis_retry()
    def save(self, challenge: OtpChallenge) -> None:
        ttl = int((challenge.expires_at - challenge.issued_at).total_seconds())
        self.redis.set(
            self._key(challenge.checkout_id),
            challenge.model_dump_json(),
            ex=max(ttl, 1) * 2,
        )

    @redis_retry()
    def get(self, checkout_id: str) -> OtpChallenge | None:
        raw = self.redis.get(self._key(checkout_id))
        if raw is None:
            return None
        return OtpChallenge.model_validate_json(raw)

    @redis_retry()
    def delete(self, checkout_id: str) -> None:
        self.redis.delete(self._key(checkout_id))


class MemoryOtpChallengeStore:
    def __init__(self):
        self._data: dict[str, OtpChallenge] = {}

    def save(self, challenge: OtpChallenge) -> None:
        self._data[challenge.checkout_id] = challenge

    def get(self, checkout_id: str) -> OtpChallenge | None:
        challenge = self._data.get(checkout_id)
        if challenge is None:
            return None
        # to samo okno co w redisie
        if datetime.now(timezone.utc) >= challenge.expires_at + (challenge.expires_at - challenge.issued_at):
            self._data.pop(checkout_id, None)
            return None
        return challenge

    def delete(self, checkout_id: str) -> None:
        self._data.pop(checkout_id, None)
