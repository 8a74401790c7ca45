# backoffice/services/checkout_service.py
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from sqlalchemy.orm import Session

from backoffice.data.models.order import OrderModel, OrderStatus
from backoffice.data.models.order_item import OrderItemModel
from backoffice.domain.errors import (
    EmptyCart,
    EmptyItems,
    InsufficientStock,
    InvalidState,
    NotFoundOrForbidden,
    ProductNotFound,
)
from backoffice.repos.cart_repo import CartRepo
from backoffice.repos.order_repo import OrderRepo
from backoffice.repos.product_repo import ProductRepo
from backoffice.services.notification_service import (
    NotificationService,
    ORDER_CANCELLED,
    ORDER_CREATED,
)
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SourceLine:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class PricedLine:
    product_id: int
    product_name: str
    price: Decimal
    quantity: int
    subtotal: Decimal


@dataclass
class CheckoutResult:
    id_order: int
    total: Decimal
    payment_method: str
    status: OrderStatus
    items: list[PricedLine] = field(default_factory=list)

    @property
    def items_count(self) -> int:
        return len(self.items)


@dataclass
class CancelResult:
    id_order: int
    items_restored: int


class CheckoutService:
    """
    Turns a cart (or an explicit item list) into an order and reverses
    pending orders.

    - every public operation is one unit of work on the session it was given
    - any failure rolls the whole unit back and is re-raised
    - prices and totals are always computed from the catalog, never taken from the caller
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.db = db
        self.products = ProductRepo(db)
        self.carts = CartRepo(db)
        self.orders = OrderRepo(db)
        self.notification_service = notification_service or NotificationService()

    # =====================================================
    # CHECKOUT
    # =====================================================
    def checkout(self, user_id: int, payment_method: str, items: Iterable[SourceLine] | None = None) -> CheckoutResult:
        """
        Use Case: checkout.

        Without `items` the user's cart is the source and is emptied on
        success. With `items` the cart is left alone.
        """
        from_cart = items is None

        try:
            if from_cart:
                lines = [SourceLine(i.product_id, i.quantity) for i in self.carts.get_lines_for_user(user_id)]
                if not lines:
                    raise EmptyCart()
            else:
                lines = list(items)
                if not lines:
                    raise EmptyItems()

            priced = self._price_lines(lines)
            total = sum((p.subtotal for p in priced), Decimal("0.00"))

            order = self.orders.add_order(
                OrderModel(
                    user_id=user_id,
                    total=total,
                    payment_method=payment_method,
                    status=OrderStatus.COMPLETED.value,
                )
            )

            for line in priced:
                self.orders.add_item(
                    OrderItemModel(
                        order_id=order.id,
                        product_id=line.product_id,
                        quantity=line.quantity,
                        subtotal=line.subtotal,
                    )
                )
                if not self.products.decrement_stock(line.product_id, line.quantity):
                    # another unit of work took the stock after our pre-check
                    raise InsufficientStock(
                        line.product_id,
                        line.product_name,
                        self.products.current_stock(line.product_id),
                        line.quantity,
                    )

            if from_cart:
                removed = self.carts.clear_for_user(user_id)
                logger.info(f"Cleared {removed} cart lines for user {user_id}")

            order_id = order.id
            self.db.commit()
        except (EmptyCart, EmptyItems, ProductNotFound, InsufficientStock) as e:
            self.db.rollback()
            logger.info(f"Checkout rejected for user {user_id}: {e.message}")
            raise
        except Exception:
            self.db.rollback()
            logger.exception(f"Checkout failed for user {user_id}")
            raise

        logger.info(f"Order {order_id} created for user {user_id}: {len(priced)} lines, total {total}")
        self.notification_service.send_order_notification(user_id, order_id, ORDER_CREATED)

        return CheckoutResult(
            id_order=order_id,
            total=total,
            payment_method=payment_method,
            status=OrderStatus.COMPLETED,
            items=priced,
        )

    def direct_checkout(self, user_id: int, payment_method: str, items: Iterable[SourceLine]) -> CheckoutResult:
        """Use Case: checkout of an explicit item list, bypassing the cart."""
        return self.checkout(user_id, payment_method, items=list(items))

    def _price_lines(self, lines: list[SourceLine]) -> list[PricedLine]:
        """
        Validates every line against the catalog and snapshots its price.
        Quantities of lines naming the same product are summed for the stock
        check. Raises before anything is written.
        """
        products = self.products.get_products_for_update(i.product_id for i in lines)

        requested: dict[int, int] = {}
        for line in lines:
            if line.product_id not in products:
                raise ProductNotFound(line.product_id)
            requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity

        for product_id, qty in requested.items():
            product = products[product_id]
            if product.stock < qty:
                raise InsufficientStock(product.id, product.name, product.stock, qty)

        priced = []
        for line in lines:
            product = products[line.product_id]
            price = Decimal(product.price)
            priced.append(
                PricedLine(
                    product_id=product.id,
                    product_name=product.name,
                    price=price,
                    quantity=line.quantity,
                    subtotal=price * line.quantity,
                )
            )
        return priced

    # =====================================================
    # CANCEL
    # =====================================================
    def cancel(self, order_id: int, caller_id: int, is_admin: bool) -> CancelResult:
        """
        Use Case: cancel a pending order and put its stock back.

        Only `pending` orders qualify, so a second cancel of the same order
        is rejected instead of restoring stock twice. The status flip is a
        conditional update done before any stock moves: of two concurrent
        cancels only one can win it.
        """
        try:
            order = self.orders.get_order_for_caller(order_id, caller_id, is_admin, for_update=True)
            if not order:
                raise NotFoundOrForbidden()

            if order.status != OrderStatus.PENDING.value:
                raise InvalidState(order.status)

            if not self.orders.transition_status(order.id, OrderStatus.PENDING.value, OrderStatus.FAILED.value):
                raise InvalidState(self.orders.current_status(order.id))

            items = self.orders.get_items(order.id)
            for item in items:
                if not self.products.increment_stock(item.product_id, item.quantity):
                    raise ProductNotFound(item.product_id)

            owner_id = order.user_id
            self.db.commit()
        except (NotFoundOrForbidden, InvalidState, ProductNotFound) as e:
            self.db.rollback()
            logger.info(f"Cancel of order {order_id} rejected: {e.message}")
            raise
        except Exception:
            self.db.rollback()
            logger.exception(f"Cancel of order {order_id} failed")
            raise

        logger.info(f"Order {order_id} cancelled, {len(items)} lines restored")
        self.notification_service.send_order_notification(owner_id, order_id, ORDER_CANCELLED)

        return CancelResult(id_order=order_id, items_restored=len(items))
