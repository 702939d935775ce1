# cafe/api/routers/users.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from cafe.api import http_error
from cafe.api.deps import USER_COOKIE, get_auth_service, get_order_service, get_user_phone
from cafe.domain.errors import CafeError
from cafe.domain.schemas import OrderOut, UserLoginIn
from cafe.services.auth_service import AuthService
from cafe.services.order_service import OrderService
from cafe.utils.settings import COOKIE_SECURE, USER_SESSION_TTL_SECONDS

router = APIRouter(prefix="/user", tags=["user"])


@router.post("/login")
def login(payload: UserLoginIn, response: Response, auth: AuthService = Depends(get_auth_service)):
    """Sesja "moje zamowienia" po samym numerze telefonu (bez hasla), limitowana per numer."""
    try:
        session = auth.login_user(payload.phone)
    except CafeError as e:
        raise http_error(e)

    response.set_cookie(
        USER_COOKIE,
        session.token,
        max_age=USER_SESSION_TTL_SECONDS,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="strict",
        path="/",
    )
    return {"success": True, "phone": session.subject}


@router.post("/logout")
def logout(request: Request, response: Response, auth: AuthService = Depends(get_auth_service)):
    auth.logout(request.cookies.get(USER_COOKIE))
    response.delete_cookie(USER_COOKIE, path="/")
    return {"success": True}


@router.get("/session")
def session(phone: str | None = Depends(get_user_phone)):
    return {"phone": phone}


@router.get("/orders", response_model=List[OrderOut])
def my_orders(
    phone: str | None = Depends(get_user_phone),
    svc: OrderService = Depends(get_order_service),
):
    if phone is None:
        raise HTTPException(status_code=401, detail={"category": "unauthorized", "message": "Please log in with your phone number"})
    return svc.orders_for_phone(phone)
