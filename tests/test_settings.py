# tests/test_settings.py
import pytest
from sqlalchemy import func, select

from cafe.data.models.store_settings import StoreSettingsModel
from cafe.domain.errors import StoreClosedError, ValidationError
from cafe.domain.order_status import PaymentMethod
from cafe.domain.schemas import StoreSettingsIn
from cafe.services.settings_service import WEEKDAYS, SettingsService


def settings_rows(db) -> int:
    return db.execute(select(func.count()).select_from(StoreSettingsModel)).scalar_one()


@pytest.fixture
def svc(db):
    return SettingsService(db)


def test_defaults_without_row(svc, db):
    settings = svc.get_settings()

    assert settings.store_name == "Monu Chai"
    assert settings.store_open is True
    assert settings.cod_enabled is True
    assert settings.upi_enabled is False
    assert set(settings.timings) == set(WEEKDAYS)
    assert settings_rows(db) == 0


def test_update_keeps_single_row(svc, db):
    svc.update_settings(StoreSettingsIn(store_name="Monu Chai Corner"))
    svc.update_settings(StoreSettingsIn(upi_enabled=True, upi_id="monuchai@upi"))

    settings = svc.get_settings()
    assert settings_rows(db) == 1
    assert settings.store_name == "Monu Chai Corner"
    assert settings.upi_enabled is True
    assert settings.upi_id == "monuchai@upi"


def test_timings_are_merged_per_day(svc):
    svc.update_settings(StoreSettingsIn(timings={"sunday": {"open": "10:00", "close": "14:00"}}))

    timings = svc.get_settings().timings
    assert timings["sunday"].open == "10:00"
    assert timings["monday"].open == "08:00"
    assert len(timings) == 7


def test_unknown_weekday_is_rejected(svc):
    with pytest.raises(ValidationError):
        svc.update_settings(StoreSettingsIn(timings={"funday": {"open": "10:00", "close": "14:00"}}))


def test_closed_store_does_not_accept_orders(svc):
    svc.update_settings(StoreSettingsIn(store_open=False))

    with pytest.raises(StoreClosedError):
        svc.ensure_accepting_orders(PaymentMethod.COD)


def test_payment_method_toggles(svc):
    with pytest.raises(ValidationError):
        svc.ensure_accepting_orders(PaymentMethod.UPI)

    svc.update_settings(StoreSettingsIn(upi_enabled=True, cod_enabled=False))

    svc.ensure_accepting_orders(PaymentMethod.UPI)
    with pytest.raises(ValidationError):
        svc.ensure_accepting_orders(PaymentMethod.COD)


def test_public_settings_hide_admin_fields(admin_client):
    res = admin_client.put("/admin/settings", json={"admin_name": "Monu", "admin_email": "monu@monuchai.in", "phone": "9876543210"})
    assert res.status_code == 200
    assert res.json()["admin_name"] == "Monu"

    public = admin_client.get("/settings").json()
    assert public["phone"] == "9876543210"
    assert "admin_name" not in public
    assert "admin_email" not in public


def test_settings_update_requires_admin(client):
    assert client.put("/admin/settings", json={"store_open": False}).status_code == 401
    assert client.get("/admin/settings").status_code == 401


def test_closed_store_rejects_orders_endpoint(admin_client):
    admin_client.put("/admin/settings", json={"store_open": False})

    res = admin_client.post(
        "/orders/",
        json={
            "name": "Asha",
            "email": "a@b.com",
            "phone": "9876543210",
            "items": [{"id": "1", "name": "Masala Chai", "price": 25, "quantity": 1}],
        },
    )

    assert res.status_code == 400
    assert res.json()["detail"]["category"] == "store_closed"


@pytest.mark.parametrize("field", ["store_open", "store_name", "cod_enabled", "upi_enabled", "timings"])
def test_explicit_null_for_required_field_is_rejected(svc, db, field):
    svc.update_settings(StoreSettingsIn(store_name="Monu Chai"))

    with pytest.raises(ValidationError) as exc:
        svc.update_settings(StoreSettingsIn(**{field: None}))

    assert exc.value.details["fields"] == [field]
    db.expire_all()
    assert svc.get_settings().store_name == "Monu Chai"


def test_explicit_null_for_optional_field_clears_it(svc):
    svc.update_settings(StoreSettingsIn(upi_id="monuchai@upi"))

    settings = svc.update_settings(StoreSettingsIn(upi_id=None))

    assert settings.upi_id is None


def test_explicit_null_endpoint_is_bad_request(admin_client):
    admin_client.put("/admin/settings", json={"store_name": "Monu Chai"})

    res = admin_client.put("/admin/settings", json={"store_open": None})

    assert res.status_code == 400
    assert res.json()["detail"]["category"] == "validation"
    assert admin_client.get("/settings").json()["store_open"] is True
