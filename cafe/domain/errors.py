# cafe/domain/errors.py
"""
Bledy domenowe.

Kazdy blad niesie `category` (trafia do odpowiedzi HTTP, zeby klient odroznil
np. nieudany zapis zamowienia od blednego kodu OTP) i `status_code`.
Klasy dziedzicza tez po wbudowanych ValueError / PermissionError / LookupError,
wiec zwykle `except ValueError` dalej lapie bledy walidacji.
"""


class CafeError(Exception):
    category = "error"
    status_code = 500

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"category": self.category, "message": self.message, **self.details}


class ConfigurationError(CafeError):
    category = "configuration"
    status_code = 500


class ValidationError(CafeError, ValueError):
    category = "validation"
    status_code = 400


class EmptyCartError(ValidationError):
    category = "empty_cart"


class StoreClosedError(ValidationError):
    category = "store_closed"


class InvalidStatusError(ValidationError):
    category = "invalid_status"


class InvalidTransitionError(ValidationError):
    category = "invalid_transition"
    status_code = 409


class DispatchError(CafeError):
    """Nie udalo sie wyslac kodu OTP (adres odrzucony, blad transportu)."""

    category = "dispatch"
    status_code = 502


class InvalidCodeError(CafeError):
    category = "invalid_code"
    status_code = 400


class OtpExpiredError(InvalidCodeError):
    category = "otp_expired"


class PersistenceError(CafeError):
    category = "persistence"
    status_code = 500


class UnauthorizedError(CafeError, PermissionError):
    category = "unauthorized"
    status_code = 401


class RateLimitError(CafeError):
    category = "rate_limited"
    status_code = 429


class NotFoundError(CafeError, LookupError):
    category = "not_found"
    status_code = 404


class OrderNotFoundError(NotFoundError):
    pass


class WorkflowStateError(CafeError):
    category = "workflow_state"
    status_code = 409


class SubmissionInProgressError(WorkflowStateError):
    category = "submission_in_progress"
