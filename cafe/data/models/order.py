from sqlalchemy import Column, Integer, String, Text, DateTime, Numeric
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from cafe.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)

    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False, default="")
    customer_phone = Column(String, nullable=False, index=True)
    customer_address = Column(Text, nullable=False)

    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending, preparing, ready, completed, cancelled
    payment_method = Column(String, nullable=False, default="COD")  # COD, UPI
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        order_by="OrderItemModel.id",
    )
