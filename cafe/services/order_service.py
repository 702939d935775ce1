# cafe/services/order_service.py
from decimal import Decimal

from pydantic import TypeAdapter
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cafe.data.models.order import OrderModel
from cafe.data.models.order_item import OrderItemModel
from cafe.domain.errors import (
    InvalidTransitionError,
    OrderNotFoundError,
    PersistenceError,
    UnauthorizedError,
    ValidationError,
)
from cafe.domain.order_status import (
    OrderStatus,
    can_transition,
    parse_payment_method,
    parse_status,
)
from cafe.domain.schemas import (
    DashboardStatsOut,
    OrderCreate,
    OrderSummaryOut,
    SessionRecord,
)
from cafe.repos.order_repo import OrderRepo
from cafe.services.cache_service import ListingCache
from cafe.services.settings_service import SettingsService
from cafe.utils.logging import get_logger
from cafe.utils.settings import ORDER_STATUS_POLICY

logger = get_logger(__name__)

_SUMMARIES = TypeAdapter(list[OrderSummaryOut])
SUMMARY_MAX_LEN = 50
DASHBOARD_WINDOW = 50


def item_summary(order: OrderModel) -> str:
    summary = ", ".join(f"{i.product_name} ({i.quantity})" for i in order.items)
    if len(summary) > SUMMARY_MAX_LEN:
        return summary[:SUMMARY_MAX_LEN] + "..."
    return summary


class OrderService:
    """
    Domena zamowien.

    commands: create_order (gateway zapisu zamowienia + pozycji), update_status (panel admina)
    query: get_order, list_orders, dashboard_stats, orders_for_phone
    """

    def __init__(
        self,
        db: Session,
        cache: ListingCache | None = None,
        status_policy: str = ORDER_STATUS_POLICY,
    ):
        self.repo = OrderRepo(db)
        self.settings = SettingsService(db)
        self.cache = cache
        self.status_policy = status_policy

    def _invalidate_listings(self):
        if self.cache is not None:
            self.cache.invalidate()

    #commands
    def create_order(self, payload: OrderCreate) -> OrderModel:
        """
        Use Case: zapis zamowienia.

        1. Walidacja wymaganych pol (name, email, phone, items)
        2. Pozycje ze snapshotem nazwy i ceny z koszyka - nigdy z katalogu
        3. Zamowienie + pozycje w jednej transakcji, status pending
        """
        if not payload.name or not payload.email or not payload.phone or not payload.items:
            raise ValidationError("Missing required fields")

        payment_method = parse_payment_method(payload.payment_method)
        self.settings.ensure_accepting_orders(payment_method)

        items = []
        for line in payload.items:
            try:
                product_id = int(line.id)
            except ValueError:
                raise ValidationError(f"Invalid product id '{line.id}'") from None

            items.append(
                OrderItemModel(
                    product_id=product_id,
                    product_name=line.name,
                    price=line.price,
                    quantity=line.quantity,
                )
            )

        total = sum((line.price * line.quantity for line in payload.items), Decimal("0.00"))
        if payload.total is not None and payload.total != total:
            logger.warning(f"Client total {payload.total} differs from computed total {total}, using computed")

        order = OrderModel(
            customer_name=payload.name,
            customer_email=payload.email,
            customer_phone=payload.phone,
            customer_address=payload.address or "",
            total_amount=total,
            status=OrderStatus.PENDING.value,
            payment_method=payment_method.value,
        )

        try:
            created = self.repo.create_order(order, items)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Order creation failed: {e}")
            raise PersistenceError("Order failed to save, please try again") from e

        logger.info(f"Order {created.id} created for {created.customer_phone}, total {created.total_amount}")
        self._invalidate_listings()
        return created

    def update_status(self, order_id: int, new_status, admin_session: SessionRecord | None) -> OrderModel:
        """
        Use Case: zmiana statusu zamowienia przez admina.
        Bez aktywnej sesji admina - UnauthorizedError i zadnej zmiany.
        """
        if admin_session is None or admin_session.kind != "admin" or admin_session.is_expired():
            raise UnauthorizedError("Admin session required")

        status = parse_status(new_status)

        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFoundError(f"Order {order_id} not found")

        current = parse_status(order.status)
        if not can_transition(current, status, self.status_policy):
            raise InvalidTransitionError(
                f"Cannot change order status from {current.value} to {status.value}",
                current=current.value,
                requested=status.value,
            )

        try:
            rowcount = self.repo.update_order_status(order_id, status.value, expected_status=current.value)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Failed to update status of order {order_id}: {e}")
            raise PersistenceError("Failed to update status") from e

        #optimistic locking na statusie - ktos inny zmienil zamowienie w miedzyczasie
        if rowcount == 0:
            raise InvalidTransitionError(
                f"Order {order_id} was modified concurrently, reload and try again",
                current=current.value,
                requested=status.value,
            )

        logger.info(f"Order {order_id} status {current.value} -> {status.value}")
        self._invalidate_listings()
        return self.repo.get_order(order_id)

    #query
    def get_order(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFoundError(f"Order {order_id} not found")
        return order

    def list_orders(self, status: str = "all", search: str = "", limit: int = 50) -> list[OrderSummaryOut]:
        status_filter = None if status in ("", "all") else parse_status(status).value
        search = (search or "").strip()

        cache_key = f"{status_filter or 'all'}:{search.lower()}:{limit}"
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return _SUMMARIES.validate_python(cached)

        summaries = [
            OrderSummaryOut(
                id=o.id,
                customer_name=o.customer_name,
                customer_phone=o.customer_phone,
                total_amount=o.total_amount,
                status=o.status,
                payment_method=o.payment_method,
                item_summary=item_summary(o),
                created_at=o.created_at,
            )
            for o in self.repo.list_orders(status=status_filter, search=search, limit=limit)
        ]

        if self.cache is not None:
            self.cache.set(cache_key, _SUMMARIES.dump_python(summaries, mode="json"))
        return summaries

    def dashboard_stats(self) -> DashboardStatsOut:
        orders = self.repo.list_orders(limit=DASHBOARD_WINDOW)
        revenue = sum((Decimal(o.total_amount) for o in orders), Decimal("0.00"))
        return DashboardStatsOut(
            total_orders=len(orders),
            pending_count=sum(1 for o in orders if o.status == OrderStatus.PENDING.value),
            revenue=revenue,
        )

    def orders_for_phone(self, phone: str) -> list[OrderModel]:
        return self.repo.list_orders_by_phone(phone)
