from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON

from cafe.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class StoreSettingsModel(Base):
    """Konfiguracja sklepu - tabela z maksymalnie jednym wierszem."""

    __tablename__ = "store_settings"

    id = Column(Integer, primary_key=True)

    store_name = Column(String, nullable=False, default="Monu Chai")
    description = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    google_maps_link = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)

    store_open = Column(Boolean, nullable=False, default=True)
    timings = Column(JSON, nullable=False, default=dict)  # {"monday": {"open": "08:00", "close": "22:00", "is_closed": false}, ...}

    cod_enabled = Column(Boolean, nullable=False, default=True)
    upi_enabled = Column(Boolean, nullable=False, default=False)
    upi_id = Column(String, nullable=True)
    upi_qr_code_url = Column(String, nullable=True)

    admin_name = Column(String, nullable=True)
    admin_email = Column(String, nullable=True)
    admin_photo_url = Column(String, nullable=True)

    order_notifications = Column(Boolean, nullable=False, default=True)
    email_notifications = Column(Boolean, nullable=False, default=False)
    sound_notifications = Column(Boolean, nullable=False, default=True)

    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
