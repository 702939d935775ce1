from sqlalchemy import Column, Integer, String, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from cafe.data.database import Base


class OrderItemModel(Base):
    """
    Pozycja zamowienia.
    product_name i price to snapshot z momentu zamowienia - nigdy nie liczymy
    ich ponownie z katalogu. product_id bez FK, usuniecie produktu nie rusza historii.
    """

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)

    product_name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("OrderModel", back_populates="items")
