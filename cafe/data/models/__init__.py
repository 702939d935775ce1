#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from cafe.data.models.category import CategoryModel
from cafe.data.models.product import ProductModel
from cafe.data.models.order import OrderModel
from cafe.data.models.order_item import OrderItemModel
from cafe.data.models.store_settings import StoreSettingsModel

__all__ = [
    "CategoryModel",
    "ProductModel",
    "OrderModel",
    "OrderItemModel",
    "StoreSettingsModel",
]
