# cafe/domain/order_status.py
from enum import Enum

from cafe.domain.errors import InvalidStatusError, ValidationError


class OrderStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    COD = "COD"
    UPI = "UPI"


TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

# docelowy cykl zycia zamowienia
LINEAR_TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# panel admina pozwala wybrac dowolny status z selecta, takze cofnac zamowienie
PERMISSIVE_TRANSITIONS = {
    status: frozenset(OrderStatus) - {status}
    for status in OrderStatus
}

TRANSITION_POLICIES = {
    "linear": LINEAR_TRANSITIONS,
    "permissive": PERMISSIVE_TRANSITIONS,
}


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise InvalidStatusError(
            f"Unknown order status '{value}'",
            allowed=allowed,
        ) from None


def parse_payment_method(value) -> PaymentMethod:
    if value is None or value == "":
        return PaymentMethod.COD
    try:
        return PaymentMethod(str(value).upper())
    except ValueError:
        raise ValidationError(f"Unknown payment method '{value}'") from None


def transitions_for(policy: str) -> dict:
    try:
        return TRANSITION_POLICIES[policy]
    except KeyError:
        raise ValueError(f"Unknown order status policy '{policy}'") from None


def can_transition(current: OrderStatus, new: OrderStatus, policy: str = "permissive") -> bool:
    #ustawienie tego samego statusu to no-op, zawsze dozwolone
    if current == new:
        return True
    return new in transitions_for(policy)[current]
