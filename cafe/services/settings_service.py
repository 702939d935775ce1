# cafe/services/settings_service.py
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cafe.data.models.store_settings import StoreSettingsModel
from cafe.domain.errors import PersistenceError, StoreClosedError, ValidationError
from cafe.domain.order_status import PaymentMethod
from cafe.domain.schemas import StoreSettingsIn, StoreSettingsOut
from cafe.repos.settings_repo import SettingsRepo
from cafe.utils.logging import get_logger
from cafe.utils.settings import STORE_NAME

logger = get_logger(__name__)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

# kolumny NOT NULL - jawny null w PUT to blad walidacji, nie blad zapisu
REQUIRED_FIELDS = frozenset(c.name for c in StoreSettingsModel.__table__.columns if not c.nullable)


def default_timings() -> dict:
    return {day: {"open": "08:00", "close": "22:00", "is_closed": False} for day in WEEKDAYS}


class SettingsService:
    def __init__(self, db: Session):
        self.repo = SettingsRepo(db)

    def get_settings(self) -> StoreSettingsOut:
        """Odczyt nigdy nie tworzy wiersza - brak rekordu = wartosci domyslne."""
        row = self.repo.get()
        if row is None:
            return StoreSettingsOut(store_name=STORE_NAME, timings=default_timings())
        return StoreSettingsOut.model_validate(row)

    def update_settings(self, patch: StoreSettingsIn) -> StoreSettingsOut:
        values = patch.model_dump(exclude_unset=True)

        nulls = sorted(k for k, v in values.items() if v is None and k in REQUIRED_FIELDS)
        if nulls:
            raise ValidationError(f"Fields cannot be empty: {', '.join(nulls)}", fields=nulls)

        if "timings" in values and values["timings"] is not None:
            unknown = set(values["timings"]) - set(WEEKDAYS)
            if unknown:
                raise ValidationError(f"Unknown weekday(s): {', '.join(sorted(unknown))}")
            merged = self.get_settings().model_dump()["timings"] or default_timings()
            merged.update(values["timings"])
            values["timings"] = merged
        elif self.repo.get() is None:
            #pierwszy zapis - pelny tydzien, zeby wiersz nie mial pustych godzin
            values["timings"] = default_timings()

        try:
            row = self.repo.upsert(values)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Failed to save store settings: {e}")
            raise PersistenceError("Failed to save settings") from e

        logger.info(f"Store settings updated: {sorted(values)}")
        return StoreSettingsOut.model_validate(row)

    def ensure_accepting_orders(self, payment_method: PaymentMethod) -> None:
        settings = self.get_settings()

        if not settings.store_open:
            raise StoreClosedError("The store is currently closed and not accepting orders")

        enabled = {
            PaymentMethod.COD: settings.cod_enabled,
            PaymentMethod.UPI: settings.upi_enabled,
        }
        if not enabled[payment_method]:
            raise ValidationError(
                f"Payment method {payment_method.value} is not available",
                field="payment_method",
            )
