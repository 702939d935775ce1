# tests/test_checkout.py
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from cafe.data.models.order import OrderModel
from cafe.domain.errors import (
    DispatchError,
    EmptyCartError,
    InvalidCodeError,
    PersistenceError,
    StoreClosedError,
    SubmissionInProgressError,
    ValidationError,
    WorkflowStateError,
)
from cafe.domain.schemas import CheckoutStage, StoreSettingsIn
from cafe.services.cart_service import CartStore
from cafe.services.settings_service import SettingsService

from conftest import CUSTOMER, MASALA_CHAI


def order_count(db) -> int:
    db.expire_all()
    return db.execute(select(func.count()).select_from(OrderModel)).scalar_one()


@pytest.fixture
def workflow(make_workflow):
    wf = make_workflow()
    wf.cart.add_item(MASALA_CHAI)
    wf.cart.update_quantity("1", 1)
    return wf


def test_masala_chai_order_end_to_end(workflow, db, stores, notifier):
    state = workflow.submit_details(CUSTOMER)

    assert state.stage == CheckoutStage.OTP
    assert notifier.sent == [("a@b.com", "482913")]
    assert order_count(db) == 0

    with pytest.raises(InvalidCodeError):
        workflow.submit_code("000000")

    assert workflow.stage == CheckoutStage.OTP
    assert workflow.cart.item_count == 2
    assert workflow.cart.total == Decimal("50")
    assert order_count(db) == 0

    state = workflow.submit_code("482913")

    assert state.stage == CheckoutStage.SUCCESS
    order = db.get(OrderModel, state.order_id)
    assert order.total_amount == Decimal("50.00")
    assert order.status == "pending"
    assert order.customer_email == "a@b.com"
    assert order.customer_phone == "9876543210"
    assert [(i.product_id, i.product_name, i.quantity) for i in order.items] == [(1, "Masala Chai", 2)]

    assert workflow.cart.is_empty()
    assert CartStore(stores.carts, "cart-0001").is_empty()


def test_code_submitted_from_details_never_commits(workflow, db):
    with pytest.raises(WorkflowStateError):
        workflow.submit_code("482913")

    assert workflow.stage == CheckoutStage.DETAILS
    assert order_count(db) == 0


def test_invalid_details_stay_in_details(workflow, notifier):
    with pytest.raises(ValidationError) as exc:
        workflow.submit_details({**CUSTOMER, "phone": "12345", "email": "not-an-email"})

    assert set(exc.value.details["fields"]) == {"phone", "email"}
    assert workflow.stage == CheckoutStage.DETAILS
    assert notifier.sent == []


def test_missing_address_is_rejected(workflow):
    with pytest.raises(ValidationError):
        workflow.submit_details({k: v for k, v in CUSTOMER.items() if k != "address"})


def test_empty_cart_short_circuits_before_dispatch(make_workflow, notifier):
    wf = make_workflow()

    with pytest.raises(EmptyCartError):
        wf.submit_details(CUSTOMER)

    assert notifier.sent == []
    assert wf.stage == CheckoutStage.DETAILS


def test_dispatch_failure_keeps_details_stage(workflow, notifier, stores):
    notifier.fail_with = DispatchError("Email address a@b.com was rejected by the mail server")

    with pytest.raises(DispatchError):
        workflow.submit_details(CUSTOMER)

    assert workflow.stage == CheckoutStage.DETAILS
    assert stores.otp.get("cart-0001") is None
    assert workflow.cart.item_count == 2


def test_persistence_failure_keeps_cart_and_allows_retry(workflow, db, monkeypatch):
    workflow.submit_details(CUSTOMER)

    repo = workflow.order_service.repo
    original = repo.create_order

    def failing_create(order, items):
        raise OperationalError("INSERT INTO orders", {}, Exception("database is locked"))

    monkeypatch.setattr(repo, "create_order", failing_create)
    with pytest.raises(PersistenceError):
        workflow.submit_code("482913")

    assert workflow.stage == CheckoutStage.OTP
    assert workflow.cart.item_count == 2
    assert order_count(db) == 0

    monkeypatch.setattr(repo, "create_order", original)
    state = workflow.submit_code("482913")

    assert state.stage == CheckoutStage.SUCCESS
    assert order_count(db) == 1
    assert workflow.cart.is_empty()


def test_second_submission_while_first_in_flight_is_rejected(workflow, stores, db):
    workflow.submit_details(CUSTOMER)
    assert stores.locks.acquire("checkout:cart-0001", "other-request")

    with pytest.raises(SubmissionInProgressError):
        workflow.submit_code("482913")

    assert order_count(db) == 0
    assert workflow.stage == CheckoutStage.OTP

    stores.locks.release("checkout:cart-0001", "other-request")
    assert workflow.submit_code("482913").stage == CheckoutStage.SUCCESS


def test_completed_checkout_cannot_commit_again(workflow, db):
    workflow.submit_details(CUSTOMER)
    workflow.submit_code("482913")

    with pytest.raises(WorkflowStateError):
        workflow.submit_code("482913")
    with pytest.raises(WorkflowStateError):
        workflow.submit_details(CUSTOMER)

    assert order_count(db) == 1


def test_state_survives_new_workflow_instance(workflow, make_workflow):
    workflow.submit_details(CUSTOMER)

    # kolejny request - nowy obiekt, ten sam magazyn
    again = make_workflow()

    assert again.stage == CheckoutStage.OTP
    assert again.submit_code("482913").stage == CheckoutStage.SUCCESS


def test_change_email_discards_code(workflow, stores):
    workflow.submit_details(CUSTOMER)

    state = workflow.change_email()

    assert state.stage == CheckoutStage.DETAILS
    assert stores.otp.get("cart-0001") is None
    with pytest.raises(WorkflowStateError):
        workflow.submit_code("482913")


def test_change_email_outside_otp_stage_fails(workflow):
    with pytest.raises(WorkflowStateError):
        workflow.change_email()


def test_resubmitting_details_replaces_code(make_workflow, db):
    wf = make_workflow(codes=(111111, 222222))
    wf.cart.add_item(MASALA_CHAI)
    wf.submit_details(CUSTOMER)
    wf.submit_details({**CUSTOMER, "email": "asha@monuchai.in"})

    with pytest.raises(InvalidCodeError):
        wf.submit_code("111111")

    state = wf.submit_code("222222")
    assert db.get(OrderModel, state.order_id).customer_email == "asha@monuchai.in"


def test_cart_emptied_elsewhere_sends_back_to_details(workflow, db):
    workflow.submit_details(CUSTOMER)
    workflow.cart.clear()

    with pytest.raises(EmptyCartError):
        workflow.submit_code("482913")

    assert workflow.stage == CheckoutStage.DETAILS
    assert order_count(db) == 0


def test_order_uses_cart_contents_at_commit(workflow, db):
    workflow.submit_details(CUSTOMER)
    workflow.cart.add_item({"id": "5", "name": "Veg Samosa", "price": "15.00", "image": None})

    state = workflow.submit_code("482913")

    assert db.get(OrderModel, state.order_id).total_amount == Decimal("65.00")


def test_closed_store_rejects_details(workflow, db, notifier):
    SettingsService(db).update_settings(StoreSettingsIn(store_open=False))

    with pytest.raises(StoreClosedError):
        workflow.submit_details(CUSTOMER)

    assert notifier.sent == []


def test_disabled_payment_method_rejects_details(workflow, notifier):
    # UPI domyslnie wylaczone
    with pytest.raises(ValidationError):
        workflow.submit_details({**CUSTOMER, "payment_method": "UPI"})

    assert notifier.sent == []


def test_reset_starts_fresh_checkout(workflow, stores):
    workflow.submit_details(CUSTOMER)

    state = workflow.reset()

    assert state.stage == CheckoutStage.DETAILS
    assert stores.otp.get("cart-0001") is None
    assert stores.checkouts.load("cart-0001") is None


def test_non_numeric_product_id_never_enters_the_cart(make_workflow, notifier, db):
    wf = make_workflow()

    with pytest.raises(PydanticValidationError):
        wf.cart.add_item({"id": "masala-chai", "name": "Masala Chai", "price": 25, "image": None})

    with pytest.raises(EmptyCartError):
        wf.submit_details(CUSTOMER)

    assert notifier.sent == []
    assert order_count(db) == 0


def test_stale_snapshot_with_non_numeric_id_loads_empty(make_workflow, stores, notifier):
    stores.carts.save(
        "cart-0001",
        '[{"id": "masala-chai", "name": "Masala Chai", "price": "25", "image": null, "quantity": 1}]',
    )
    wf = make_workflow()

    assert wf.cart.is_empty()
    with pytest.raises(EmptyCartError):
        wf.submit_details(CUSTOMER)
    assert notifier.sent == []


def test_cart_cleanup_failure_after_commit_still_records_success(workflow, db, stores, monkeypatch, make_workflow):
    workflow.submit_details(CUSTOMER)

    def broken_clear():
        raise RedisConnectionError("connection reset by peer")

    monkeypatch.setattr(workflow.cart, "clear", broken_clear)
    state = workflow.submit_code("482913")

    assert state.stage == CheckoutStage.SUCCESS
    assert state.order_id is not None
    assert order_count(db) == 1

    # kolejny request widzi zakonczony checkout, drugie zamowienie niemozliwe
    again = make_workflow()
    assert again.stage == CheckoutStage.SUCCESS
    assert again.state.order_id == state.order_id
    with pytest.raises(WorkflowStateError):
        again.submit_code("482913")
    assert order_count(db) == 1
