# cafe/services/auth_service.py
import hmac
import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Protocol

from cafe.domain.errors import ConfigurationError, UnauthorizedError, ValidationError
from cafe.domain.schemas import SessionRecord
from cafe.services.rate_limit_service import RateLimiter
from cafe.utils.logging import get_logger
from cafe.utils.settings import (
    ADMIN_PASSWORD,
    ADMIN_SESSION_TTL_SECONDS,
    USER_SESSION_TTL_SECONDS,
)

logger = get_logger(__name__)

ADMIN_LOGIN_RATE_KEY = "admin_login"
PHONE_RE = re.compile(r"^[0-9]{10}$")
MIN_PASSWORD_LEN = 6


class SessionStore(Protocol):
    def set(self, record: SessionRecord) -> None: ...

    def get(self, token: str) -> SessionRecord | None: ...

    def clear(self, token: str) -> None: ...


class CredentialVerifier(Protocol):
    def verify(self, secret: str) -> bool: ...


class SharedSecretVerifier:
    """Jedno wspolne haslo admina z konfiguracji, porownanie w stalym czasie."""

    def __init__(self, expected: str = ADMIN_PASSWORD):
        self.expected = expected

    def verify(self, secret: str) -> bool:
        if not self.expected:
            logger.error("ADMIN_PASSWORD is not set in environment variables")
            raise ConfigurationError("Server configuration error")
        return hmac.compare_digest(self.expected.encode(), secret.encode())


class AuthService:
    """
    Sesje admina (wspolne haslo, 24h) i klienta (sam numer telefonu, 30 dni).
    Token sesji jest nieprzezroczysty, dane sesji trzyma SessionStore.
    """

    def __init__(
        self,
        sessions: SessionStore,
        rate_limiter: RateLimiter,
        verifier: CredentialVerifier | None = None,
        admin_ttl: int = ADMIN_SESSION_TTL_SECONDS,
        user_ttl: int = USER_SESSION_TTL_SECONDS,
    ):
        self.sessions = sessions
        self.rate_limiter = rate_limiter
        self.verifier = verifier or SharedSecretVerifier()
        self.admin_ttl = admin_ttl
        self.user_ttl = user_ttl

    def _issue(self, kind: str, subject: str, ttl: int) -> SessionRecord:
        record = SessionRecord(
            token=secrets.token_urlsafe(32),
            kind=kind,
            subject=subject,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=ttl),
        )
        self.sessions.set(record)
        return record

    def _lookup(self, token: str | None, kind: str) -> SessionRecord | None:
        if not token:
            return None
        record = self.sessions.get(token)
        if record is None or record.kind != kind or record.is_expired():
            return None
        return record

    #admin
    def login_admin(self, password: str) -> SessionRecord:
        if not password or len(password) < MIN_PASSWORD_LEN:
            raise ValidationError("Invalid input", field="password")

        #jeden admin, wiec limit na wspolnym kluczu
        self.rate_limiter.check(ADMIN_LOGIN_RATE_KEY)

        if not self.verifier.verify(password):
            logger.warning("Failed admin login attempt")
            raise UnauthorizedError("Invalid password")

        logger.info("Admin logged in")
        return self._issue("admin", "admin", self.admin_ttl)

    def get_admin_session(self, token: str | None) -> SessionRecord | None:
        return self._lookup(token, "admin")

    #klient
    def login_user(self, phone: str) -> SessionRecord:
        phone = (phone or "").strip()
        if not PHONE_RE.match(phone):
            raise ValidationError("Phone number must be 10 digits", field="phone")

        self.rate_limiter.check(phone)

        logger.info(f"Customer session opened for {phone}")
        return self._issue("user", phone, self.user_ttl)

    def get_user_phone(self, token: str | None) -> str | None:
        record = self._lookup(token, "user")
        return record.subject if record else None

    def logout(self, token: str | None) -> None:
        if token:
            self.sessions.clear(token)
