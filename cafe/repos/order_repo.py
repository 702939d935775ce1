# cafe/repos/order_repo.py
from sqlalchemy import select, update, or_, cast, String
from sqlalchemy.orm import Session, selectinload

from cafe.data.models.order import OrderModel
from cafe.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel, items: list[OrderItemModel]) -> OrderModel:
        """Zamowienie i pozycje w jednej transakcji - albo wszystko, albo nic."""
        self.db.add(order)
        self.db.flush()  # potrzebujemy order.id dla pozycji

        for item in items:
            item.order_id = order.id
        self.db.add_all(items)

        self.db.commit()
        self.db.refresh(order)
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        stmt = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == order_id)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_orders(
        self,
        status: str | None = None,
        search: str | None = None,
        limit: int = 50,
    ) -> list[OrderModel]:
        stmt = select(OrderModel).options(selectinload(OrderModel.items))

        if status:
            stmt = stmt.where(OrderModel.status == status)

        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    cast(OrderModel.id, String).like(f"%{search}%"),
                    OrderModel.customer_name.ilike(pattern),
                    OrderModel.customer_phone.like(f"%{search}%"),
                )
            )

        stmt = stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def list_orders_by_phone(self, phone: str) -> list[OrderModel]:
        stmt = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.customer_phone == phone)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def update_order_status(self, order_id: int, status: str, expected_status: str | None = None) -> int:
        """
        Celowany update jednego pola po id - bez read-modify-write calego rekordu.
        expected_status: update tylko jesli status sie nie zmienil (optimistic locking).
        Zwraca rowcount (0 = brak zamowienia albo konflikt).
        """
        stmt = update(OrderModel).where(OrderModel.id == order_id)
        if expected_status is not None:
            stmt = stmt.where(OrderModel.status == expected_status)

        result = self.db.execute(stmt.values(status=status))
        self.db.commit()
        return result.rowcount

    def rollback(self):
        self.db.rollback()
