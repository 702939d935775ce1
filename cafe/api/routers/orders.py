# cafe/api/routers/orders.py
from fastapi import APIRouter, Depends

from cafe.api import http_error
from cafe.api.deps import get_order_service
from cafe.domain.errors import CafeError
from cafe.domain.schemas import OrderCreate, OrderCreatedOut
from cafe.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/", response_model=OrderCreatedOut, status_code=201)
def create_order(
    payload: OrderCreate,
    svc: OrderService = Depends(get_order_service),
):
    """
    Zapis zamowienia z pozycjami (snapshot nazwy i ceny).
    Brak name / email / phone / items - 400.
    """
    try:
        order = svc.create_order(payload)
    except CafeError as e:
        raise http_error(e)
    return {"success": True, "order_id": order.id}
