# cafe/api/routers/checkout.py
from fastapi import APIRouter, Depends

from cafe.api import http_error
from cafe.api.deps import get_checkout
from cafe.domain.errors import CafeError
from cafe.domain.schemas import CheckoutDetailsIn, CheckoutOut, OtpVerifyIn
from cafe.services.checkout_service import CheckoutWorkflow

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.get("/{cart_id}", response_model=CheckoutOut)
def get_checkout_view(workflow: CheckoutWorkflow = Depends(get_checkout)):
    return workflow.snapshot()


@router.post("/{cart_id}/details", response_model=CheckoutOut)
def submit_details(payload: CheckoutDetailsIn, workflow: CheckoutWorkflow = Depends(get_checkout)):
    """
    Etap details: walidacja + wysylka kodu OTP na podany email.
    Blad wysylki (502, category=dispatch) - etap sie nie zmienia.
    """
    try:
        workflow.submit_details(payload)
    except CafeError as e:
        raise http_error(e)
    return workflow.snapshot()


@router.post("/{cart_id}/verify", response_model=CheckoutOut)
def verify_code(payload: OtpVerifyIn, workflow: CheckoutWorkflow = Depends(get_checkout)):
    """
    Etap otp: poprawny kod zapisuje zamowienie i czysci koszyk.
    Bledny kod - 400 (invalid_code), nieudany zapis - 500 (persistence), koszyk zostaje.
    """
    try:
        workflow.submit_code(payload.code)
    except CafeError as e:
        raise http_error(e)
    return workflow.snapshot()


@router.post("/{cart_id}/change-email", response_model=CheckoutOut)
def change_email(workflow: CheckoutWorkflow = Depends(get_checkout)):
    try:
        workflow.change_email()
    except CafeError as e:
        raise http_error(e)
    return workflow.snapshot()


@router.delete("/{cart_id}", response_model=CheckoutOut)
def reset_checkout(workflow: CheckoutWorkflow = Depends(get_checkout)):
    workflow.reset()
    return workflow.snapshot()
