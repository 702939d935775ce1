# tests/test_api_checkout.py
from decimal import Decimal

from cafe.data.models.order import OrderModel
from cafe.domain.errors import DispatchError

from conftest import CUSTOMER, MASALA_CHAI

CART = "/carts/cart-0001"
CHECKOUT = "/checkout/cart-0001"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_cart_endpoints(client):
    assert client.get(CART).json()["items"] == []

    client.post(f"{CART}/items", json=MASALA_CHAI)
    body = client.post(f"{CART}/items", json=MASALA_CHAI).json()
    assert body["item_count"] == 2
    assert Decimal(body["total"]) == Decimal("50")
    assert body["is_open"] is True

    body = client.patch(f"{CART}/items/1", json={"delta": -1}).json()
    assert body["item_count"] == 1

    body = client.delete(f"{CART}/items/1").json()
    assert body["items"] == []

    client.post(f"{CART}/items", json=MASALA_CHAI)
    assert client.delete(CART).json()["item_count"] == 0


def test_cart_id_format_is_checked(client):
    assert client.get("/carts/short").status_code == 422
    assert client.get("/carts/bad id with spaces").status_code == 422


def test_invalid_cart_item_is_rejected(client):
    res = client.post(f"{CART}/items", json={**MASALA_CHAI, "price": -5})

    assert res.status_code == 422


def test_checkout_flow(client, notifier, db):
    client.post(f"{CART}/items", json=MASALA_CHAI)
    client.post(f"{CART}/items", json=MASALA_CHAI)

    assert client.get(CHECKOUT).json()["stage"] == "details"

    res = client.post(f"{CHECKOUT}/details", json=CUSTOMER)
    assert res.status_code == 200
    assert res.json()["stage"] == "otp"
    assert res.json()["email"] == "a@b.com"
    code = notifier.last_code

    wrong = "000000" if code != "000000" else "111111"
    res = client.post(f"{CHECKOUT}/verify", json={"code": wrong})
    assert res.status_code == 400
    assert res.json()["detail"]["category"] == "invalid_code"
    assert client.get(CART).json()["item_count"] == 2

    res = client.post(f"{CHECKOUT}/verify", json={"code": code})
    assert res.status_code == 200
    body = res.json()
    assert body["stage"] == "success"

    order = db.get(OrderModel, body["order_id"])
    assert order.total_amount == Decimal("50.00")
    assert client.get(CART).json()["items"] == []

    # ponowne wyslanie tego samego kodu nie tworzy drugiego zamowienia
    res = client.post(f"{CHECKOUT}/verify", json={"code": code})
    assert res.status_code == 409


def test_checkout_details_validation(client):
    client.post(f"{CART}/items", json=MASALA_CHAI)

    res = client.post(f"{CHECKOUT}/details", json={**CUSTOMER, "phone": "12345"})

    assert res.status_code == 400
    detail = res.json()["detail"]
    assert detail["category"] == "validation"
    assert "phone" in detail["fields"]


def test_checkout_with_empty_cart(client, notifier):
    res = client.post(f"{CHECKOUT}/details", json=CUSTOMER)

    assert res.status_code == 400
    assert res.json()["detail"]["category"] == "empty_cart"
    assert notifier.sent == []


def test_checkout_dispatch_failure(client, notifier):
    client.post(f"{CART}/items", json=MASALA_CHAI)
    notifier.fail_with = DispatchError("Email address a@b.com was rejected by the mail server")

    res = client.post(f"{CHECKOUT}/details", json=CUSTOMER)

    assert res.status_code == 502
    assert res.json()["detail"]["category"] == "dispatch"
    assert client.get(CHECKOUT).json()["stage"] == "details"


def test_checkout_change_email_and_reset(client):
    client.post(f"{CART}/items", json=MASALA_CHAI)
    client.post(f"{CHECKOUT}/details", json=CUSTOMER)

    assert client.post(f"{CHECKOUT}/change-email").json()["stage"] == "details"
    assert client.post(f"{CHECKOUT}/verify", json={"code": "123456"}).status_code == 409

    client.post(f"{CHECKOUT}/details", json=CUSTOMER)
    assert client.delete(CHECKOUT).json()["stage"] == "details"
    assert client.get(CART).json()["item_count"] == 1


def test_otp_dispatch_endpoint(client, notifier):
    res = client.post("/otp/", json={"email": "a@b.com", "otp": "123456"})

    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "OTP sent successfully"}
    assert notifier.sent == [("a@b.com", "123456")]


def test_otp_dispatch_endpoint_failure(client, notifier):
    notifier.fail_with = DispatchError("Failed to send email: connection timed out")

    res = client.post("/otp/", json={"email": "a@b.com", "otp": "123456"})

    assert res.status_code == 502
    assert res.json() == {
        "success": False,
        "category": "dispatch",
        "error": "Failed to send email: connection timed out",
    }


def test_otp_dispatch_endpoint_validation(client):
    assert client.post("/otp/", json={"email": "a@b.com", "otp": "12ab"}).status_code == 422
    assert client.post("/otp/", json={"email": "nope", "otp": "123456"}).status_code == 422


def test_non_numeric_product_id_is_rejected_by_cart(client, notifier):
    res = client.post(f"{CART}/items", json={**MASALA_CHAI, "id": "masala-chai"})

    assert res.status_code == 422
    assert client.post(f"{CHECKOUT}/details", json=CUSTOMER).json()["detail"]["category"] == "empty_cart"
    assert notifier.sent == []
