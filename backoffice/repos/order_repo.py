# backoffice/repos/order_repo.py
from sqlalchemy import select, func, update
from sqlalchemy.orm import Session

from backoffice.data.models.order import OrderModel
from backoffice.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def add_item(self, item: OrderItemModel) -> OrderItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_order_for_caller(
        self, order_id: int, user_id: int, is_admin: bool, for_update: bool = False
    ) -> OrderModel | None:
        stmt = select(OrderModel).where(OrderModel.id == order_id)
        if not is_admin:
            stmt = stmt.where(OrderModel.user_id == user_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def get_items(self, order_id: int) -> list[OrderItemModel]:
        return list(
            self.db.execute(
                select(OrderItemModel)
                .where(OrderItemModel.order_id == order_id)
                .order_by(OrderItemModel.id)
            ).scalars().all()
        )

    def _filtered(self, stmt, user_id: int | None, status: str | None):
        if user_id is not None:
            stmt = stmt.where(OrderModel.user_id == user_id)
        if status:
            stmt = stmt.where(OrderModel.status == status)
        return stmt

    def list_orders(
        self,
        user_id: int | None = None,
        status: str | None = None,
        skip: int = 0,
        limit: int = 10,
    ) -> list[tuple[OrderModel, int]]:
        """Orders newest first, each paired with its line count."""
        items_count = (
            select(func.count(OrderItemModel.id))
            .where(OrderItemModel.order_id == OrderModel.id)
            .correlate(OrderModel)
            .scalar_subquery()
        )
        stmt = self._filtered(select(OrderModel, items_count), user_id, status)
        stmt = stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).offset(skip).limit(limit)
        return [(order, count) for order, count in self.db.execute(stmt).all()]

    def count_orders(self, user_id: int | None = None, status: str | None = None) -> int:
        stmt = self._filtered(select(func.count(OrderModel.id)), user_id, status)
        return self.db.execute(stmt).scalar_one()

    def set_status(self, order: OrderModel, status: str) -> OrderModel:
        order.status = status
        self.db.flush()
        return order

    def transition_status(self, order_id: int, expected: str, new: str) -> bool:
        """
        Moves the order from `expected` to `new` in one conditional UPDATE.
        Returns False when the order is no longer in `expected`.
        """
        res = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status == expected)
            .values(status=new)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount == 1

    def current_status(self, order_id: int) -> str | None:
        return self.db.execute(
            select(OrderModel.status).where(OrderModel.id == order_id)
        ).scalar_one_or_none()
