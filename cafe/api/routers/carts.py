# cafe/api/routers/carts.py
from fastapi import APIRouter, Depends

from cafe.api.deps import get_cart
from cafe.domain.schemas import CartItemIn, CartOut, QuantityDeltaIn
from cafe.services.cart_service import CartStore

router = APIRouter(prefix="/carts", tags=["carts"])


@router.get("/{cart_id}", response_model=CartOut)
def get_cart_view(cart: CartStore = Depends(get_cart)):
    return cart.snapshot()


@router.post("/{cart_id}/items", response_model=CartOut)
def add_item(payload: CartItemIn, cart: CartStore = Depends(get_cart)):
    """Ten sam produkt drugi raz = quantity + 1. Koszyk otwiera sie po dodaniu (is_open)."""
    cart.add_item(payload)
    return cart.snapshot()


@router.patch("/{cart_id}/items/{item_id}", response_model=CartOut)
def update_quantity(item_id: str, payload: QuantityDeltaIn, cart: CartStore = Depends(get_cart)):
    cart.update_quantity(item_id, payload.delta)
    return cart.snapshot()


@router.delete("/{cart_id}/items/{item_id}", response_model=CartOut)
def remove_item(item_id: str, cart: CartStore = Depends(get_cart)):
    cart.remove_item(item_id)
    return cart.snapshot()


@router.delete("/{cart_id}", response_model=CartOut)
def clear_cart(cart: CartStore = Depends(get_cart)):
    cart.clear()
    return cart.snapshot()
