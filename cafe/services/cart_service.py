# cafe/services/cart_service.py
import json
from decimal import Decimal
from typing import List

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from cafe.domain.schemas import CartItem, CartItemIn
from cafe.repos.cart_repo import CartStorage
from cafe.utils.logging import get_logger

logger = get_logger(__name__)

_ITEMS = TypeAdapter(List[CartItem])


class CartStore:
    """
    Koszyk jednej sesji klienta.

    commands (add, update, remove, clear) - kazda od razu zapisuje caly snapshot
    query (items, total, item_count) - total i item_count liczone przy odczycie, nigdy nie zapisywane

    Serializacja jest tylko tutaj, magazyn (redis / pamiec / plik) dostaje gotowy string.
    """

    def __init__(self, storage: CartStorage, cart_id: str):
        self.storage = storage
        self.cart_id = cart_id
        self.is_open = False
        self._items: list[CartItem] = self._load()

    # serializacja
    @staticmethod
    def _serialize(items: list[CartItem]) -> str:
        return json.dumps([i.model_dump(mode="json") for i in items])

    @staticmethod
    def _deserialize(raw: str) -> list[CartItem]:
        return _ITEMS.validate_json(raw)

    def _load(self) -> list[CartItem]:
        #uszkodzony albo niedostepny snapshot = pusty koszyk, nigdy wyjatek
        try:
            raw = self.storage.load(self.cart_id)
        except (RedisError, OSError) as e:
            logger.warning(f"Could not read cart {self.cart_id}, starting empty: {e}")
            return []

        if not raw:
            return []

        try:
            return self._deserialize(raw)
        except (PydanticValidationError, ValueError) as e:
            logger.warning(f"Failed to parse cart {self.cart_id}, starting empty: {e}")
            return []

    def _commit(self, items: list[CartItem]) -> None:
        self._items = items
        self.storage.save(self.cart_id, self._serialize(items))

    #query
    @property
    def items(self) -> list[CartItem]:
        return list(self._items)

    @property
    def total(self) -> Decimal:
        return sum((i.price * i.quantity for i in self._items), Decimal("0.00"))

    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self._items)

    def is_empty(self) -> bool:
        return not self._items

    def get_item(self, item_id: str) -> CartItem | None:
        return next((i for i in self._items if i.id == item_id), None)

    #commands
    def add_item(self, item: CartItemIn | dict) -> None:
        if isinstance(item, dict):
            item = CartItemIn.model_validate(item)

        if self.get_item(item.id):
            items = [
                i.model_copy(update={"quantity": i.quantity + 1}) if i.id == item.id else i
                for i in self._items
            ]
        else:
            items = [*self._items, CartItem(**item.model_dump(), quantity=1)]

        self._commit(items)
        self.is_open = True
        logger.info(f"Item {item.id} added to cart {self.cart_id}")

    def update_quantity(self, item_id: str, delta: int) -> None:
        items = []
        for i in self._items:
            if i.id == item_id:
                qty = max(0, i.quantity + delta)
                if qty == 0:
                    logger.info(f"Item {item_id} dropped from cart {self.cart_id} (quantity 0)")
                    continue
                i = i.model_copy(update={"quantity": qty})
            items.append(i)

        self._commit(items)

    def remove_item(self, item_id: str) -> None:
        self._commit([i for i in self._items if i.id != item_id])

    def clear(self) -> None:
        self._commit([])
        logger.info(f"Cart {self.cart_id} cleared")

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def snapshot(self) -> dict:
        return {
            "cart_id": self.cart_id,
            "items": self.items,
            "total": self.total,
            "item_count": self.item_count,
            "is_open": self.is_open,
        }
