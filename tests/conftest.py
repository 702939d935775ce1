# tests/conftest.py
import os

# przed importem cafe - settings czyta env przy imporcie
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""
os.environ["EMAIL_USER"] = ""
os.environ["ADMIN_PASSWORD"] = "chai-admin-secret"
os.environ["ORDER_STATUS_POLICY"] = "permissive"

import pytest
from fastapi.testclient import TestClient

from cafe.api.deps import build_stores, get_notifier, get_stores
from cafe.data.database import Base, SessionLocal, engine
from cafe.domain.errors import DispatchError
from cafe.main import app
from cafe.services.cart_service import CartStore
from cafe.services.checkout_service import CheckoutWorkflow
from cafe.services.order_service import OrderService
from cafe.services.otp_service import OtpService

ADMIN_PASSWORD = "chai-admin-secret"

CUSTOMER = {
    "name": "Asha Verma",
    "email": "a@b.com",
    "phone": "9876543210",
    "address": "12 Highway Road, Ghaziabad",
}

MASALA_CHAI = {"id": "1", "name": "Masala Chai", "price": 25, "image": "/images/masala-chai.jpg"}


class RecordingNotifier:
    def __init__(self):
        self.sent = []
        self.fail_with: DispatchError | None = None

    def send_otp(self, email, code):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append((email, code))

    @property
    def last_code(self):
        return self.sent[-1][1]


class FixedCodes:
    """Zamiast SystemRandom - kolejne kody z listy, ostatni powtarzany."""

    def __init__(self, *codes):
        self.codes = list(codes)

    def randint(self, a, b):
        if len(self.codes) > 1:
            return self.codes.pop(0)
        return self.codes[0]


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def stores():
    # REDIS_URL pusty -> magazyny w pamieci, swieze dla kazdego testu
    return build_stores()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_workflow(db, stores, notifier):
    def _make(cart_id="cart-0001", codes=(482913,), order_service=None):
        return CheckoutWorkflow(
            checkout_id=cart_id,
            cart=CartStore(stores.carts, cart_id),
            otp_service=OtpService(stores.otp, notifier, rng=FixedCodes(*codes)),
            order_service=order_service or OrderService(db, cache=stores.listing_cache),
            state_store=stores.checkouts,
            lock_service=stores.locks,
        )

    return _make


@pytest.fixture
def client(stores, notifier):
    app.dependency_overrides[get_stores] = lambda: stores
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    res = client.post("/admin/login", json={"password": ADMIN_PASSWORD})
    assert res.status_code == 200
    return client
