#import all models so SQLAlchemy registers them on Base.metadata

from backoffice.data.models.user import UserModel
from backoffice.data.models.product import ProductModel
from backoffice.data.models.cart_item import CartItemModel
from backoffice.data.models.order import OrderModel, OrderStatus
from backoffice.data.models.order_item import OrderItemModel
from backoffice.data.models.document import DocumentModel, DocumentType

__all__ = [
    "UserModel",
    "ProductModel",
    "CartItemModel",
    "OrderModel",
    "OrderStatus",
    "OrderItemModel",
    "DocumentModel",
    "DocumentType",
]
