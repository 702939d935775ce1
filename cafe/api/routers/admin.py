# cafe/api/routers/admin.py
from typing import List

from fastapi import APIRouter, Depends, Query, Request, Response

from cafe.api import http_error
from cafe.api.deps import (
    ADMIN_COOKIE,
    get_admin_session,
    get_auth_service,
    get_order_service,
    get_settings_service,
    require_admin,
)
from cafe.domain.errors import CafeError
from cafe.domain.schemas import (
    AdminLoginIn,
    DashboardStatsOut,
    OrderOut,
    OrderSummaryOut,
    SessionRecord,
    StatusUpdateIn,
    StoreSettingsIn,
    StoreSettingsOut,
)
from cafe.services.auth_service import AuthService
from cafe.services.order_service import OrderService
from cafe.services.settings_service import SettingsService
from cafe.utils.settings import ADMIN_SESSION_TTL_SECONDS, COOKIE_SECURE

# logowanie - jedyne trasy /admin bez sesji
auth_router = APIRouter(prefix="/admin", tags=["admin-auth"])

# reszta panelu - kazda trasa wymaga sesji admina
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@auth_router.post("/login")
def login(payload: AdminLoginIn, response: Response, auth: AuthService = Depends(get_auth_service)):
    try:
        session = auth.login_admin(payload.password)
    except CafeError as e:
        raise http_error(e)

    response.set_cookie(
        ADMIN_COOKIE,
        session.token,
        max_age=ADMIN_SESSION_TTL_SECONDS,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="strict",
        path="/",
    )
    return {"success": True}


@auth_router.post("/logout")
def logout(request: Request, response: Response, auth: AuthService = Depends(get_auth_service)):
    auth.logout(request.cookies.get(ADMIN_COOKIE))
    response.delete_cookie(ADMIN_COOKIE, path="/")
    return {"success": True}


#zamowienia
@router.get("/orders", response_model=List[OrderSummaryOut])
def list_orders(
    status: str = Query("all"),
    search: str = Query(""),
    limit: int = Query(50, gt=0, le=200),
    svc: OrderService = Depends(get_order_service),
):
    try:
        return svc.list_orders(status=status, search=search, limit=limit)
    except CafeError as e:
        raise http_error(e)


@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order(order_id: int, svc: OrderService = Depends(get_order_service)):
    try:
        return svc.get_order(order_id)
    except CafeError as e:
        raise http_error(e)


@router.patch("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: StatusUpdateIn,
    session: SessionRecord | None = Depends(get_admin_session),
    svc: OrderService = Depends(get_order_service),
):
    try:
        return svc.update_status(order_id, payload.status, session)
    except CafeError as e:
        raise http_error(e)


@router.get("/stats", response_model=DashboardStatsOut)
def dashboard_stats(svc: OrderService = Depends(get_order_service)):
    return svc.dashboard_stats()


#ustawienia sklepu
@router.get("/settings", response_model=StoreSettingsOut)
def get_settings(svc: SettingsService = Depends(get_settings_service)):
    return svc.get_settings()


@router.put("/settings", response_model=StoreSettingsOut)
def update_settings(payload: StoreSettingsIn, svc: SettingsService = Depends(get_settings_service)):
    try:
        return svc.update_settings(payload)
    except CafeError as e:
        raise http_error(e)
