# backoffice/services/order_service.py
import math

from sqlalchemy.orm import Session

from backoffice.data.models.order import OrderModel, OrderStatus
from backoffice.domain.errors import NotFoundOrForbidden
from backoffice.domain.schemas import (
    OrderDetailOut,
    OrderItemOut,
    OrderListOut,
    OrderOut,
    Pagination,
    StatusUpdateOut,
)
from backoffice.repos.order_repo import OrderRepo
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Read side of orders plus the admin status override.
    Creation and cancellation live in CheckoutService.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)

    @staticmethod
    def _to_out(order: OrderModel, items_count: int) -> OrderOut:
        return OrderOut(
            id_order=order.id,
            user_id=order.user_id,
            total=order.total,
            payment_method=order.payment_method,
            status=order.status,
            created_at=order.created_at,
            items_count=items_count,
        )

    def _page(self, user_id: int | None, status: str | None, page: int, limit: int) -> OrderListOut:
        rows = self.repo.list_orders(user_id=user_id, status=status, skip=(page - 1) * limit, limit=limit)
        total = self.repo.count_orders(user_id=user_id, status=status)
        total_pages = math.ceil(total / limit) if limit else 0

        return OrderListOut(
            transactions=[self._to_out(order, count) for order, count in rows],
            pagination=Pagination(
                current_page=page,
                total_pages=total_pages,
                total_transactions=total,
                has_next_page=page < total_pages,
                has_prev_page=page > 1,
            ),
        )

    def list_for_user(self, user_id: int, status: str | None = None, page: int = 1, limit: int = 10) -> OrderListOut:
        return self._page(user_id, status, page, limit)

    def list_all(
        self,
        status: str | None = None,
        user_id: int | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> OrderListOut:
        return self._page(user_id, status, page, limit)

    def get_details(self, order_id: int, caller_id: int, is_admin: bool) -> OrderDetailOut:
        """
        Order with its lines. `subtotal` is what was paid; `current_price`
        is today's catalog price, shown for comparison only.
        """
        order = self.repo.get_order_for_caller(order_id, caller_id, is_admin)
        if not order:
            raise NotFoundOrForbidden()

        items = self.repo.get_items(order.id)
        base = self._to_out(order, len(items))

        return OrderDetailOut(
            **base.model_dump(),
            items=[
                OrderItemOut(
                    id=i.id,
                    product_id=i.product_id,
                    product_name=i.product.name if i.product else None,
                    quantity=i.quantity,
                    subtotal=i.subtotal,
                    current_price=i.product.price if i.product else None,
                )
                for i in items
            ],
        )

    def update_status(self, order_id: int, new_status: OrderStatus) -> StatusUpdateOut:
        """
        Use Case: admin status override. Stock is not touched.
        """
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundOrForbidden()

        previous = order.status
        try:
            self.repo.set_status(order, new_status.value)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {order_id} status {previous} -> {new_status.value}")

        return StatusUpdateOut(id_order=order_id, previous_status=previous, new_status=new_status)
