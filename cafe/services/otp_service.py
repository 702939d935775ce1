# cafe/services/otp_service.py
import secrets
from datetime import datetime, timedelta, timezone
from typing import Protocol

from cafe.domain.errors import InvalidCodeError, OtpExpiredError
from cafe.domain.schemas import OtpChallenge
from cafe.services.notification_service import Notifier
from cafe.utils.logging import get_logger
from cafe.utils.settings import OTP_TTL_SECONDS

logger = get_logger(__name__)

CODE_MIN = 100000
CODE_MAX = 999999


class OtpChallengeStore(Protocol):
    def save(self, challenge: OtpChallenge) -> None: ...

    def get(self, checkout_id: str) -> OtpChallenge | None: ...

    def delete(self, checkout_id: str) -> None: ...


class OtpService:
    """
    Weryfikacja emaila kodem jednorazowym.

    Idle -> OtpSent (request_otp) -> Verified (verify_otp)
    OtpSent -> Idle (discard - zmiana emaila / porzucenie)

    Jedno wyzwanie na checkout; nowe request_otp nadpisuje poprzedni kod.
    Kod wazny OTP_TTL_SECONDS, potem verify_otp zglasza OtpExpiredError.
    """

    def __init__(
        self,
        store: OtpChallengeStore,
        notifier: Notifier,
        ttl: int = OTP_TTL_SECONDS,
        rng=None,
    ):
        self.store = store
        self.notifier = notifier
        self.ttl = ttl
        self.rng = rng or secrets.SystemRandom()

    def generate_code(self) -> str:
        return str(self.rng.randint(CODE_MIN, CODE_MAX))

    def dispatch_code(self, email: str, code: str) -> None:
        """Sama wysylka (endpoint /otp) - DispatchError z czytelnym powodem przy bledzie."""
        self.notifier.send_otp(email, code)

    def request_otp(self, checkout_id: str, email: str) -> OtpChallenge:
        code = self.generate_code()

        # najpierw wysylka - jesli sie nie uda, poprzedni stan zostaje nietkniety
        self.dispatch_code(email, code)

        now = datetime.now(timezone.utc)
        challenge = OtpChallenge(
            checkout_id=checkout_id,
            code=code,
            email=email,
            issued_at=now,
            expires_at=now + timedelta(seconds=self.ttl),
        )
        self.store.save(challenge)

        logger.info(f"Verification code sent for checkout {checkout_id} to {email}")
        return challenge

    def verify_otp(self, checkout_id: str, code: str, consume: bool = True) -> OtpChallenge:
        challenge = self.store.get(checkout_id)

        if challenge is None:
            raise InvalidCodeError("No active verification code, please request a new one")

        if challenge.is_expired():
            self.store.delete(checkout_id)
            logger.info(f"Expired verification code used for checkout {checkout_id}")
            raise OtpExpiredError("Verification code has expired, please request a new one")

        # dokladne porownanie stringow, bez limitu prob na tej warstwie
        if not secrets.compare_digest(challenge.code.encode(), (code or "").encode()):
            logger.info(f"Invalid verification code for checkout {checkout_id}")
            raise InvalidCodeError("Invalid OTP. Please check your email and try again.")

        if consume:
            self.store.delete(checkout_id)

        logger.info(f"Checkout {checkout_id} verified")
        return challenge

    def discard(self, checkout_id: str) -> None:
        self.store.delete(checkout_id)
