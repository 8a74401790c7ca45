# backoffice/repos/cart_repo.py
from sqlalchemy import select, delete
from sqlalchemy.orm import Session, joinedload

from backoffice.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_lines_for_user(self, user_id: int) -> list[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .options(joinedload(CartItemModel.product))
                .where(CartItemModel.user_id == user_id)
                .order_by(CartItemModel.created_at.desc(), CartItemModel.id.desc())
            ).scalars().all()
        )

    def get_line(self, user_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def get_line_by_id(self, line_id: int, user_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel)
            .options(joinedload(CartItemModel.product))
            .where(CartItemModel.id == line_id, CartItemModel.user_id == user_id)
        ).scalar_one_or_none()

    def add_line(self, line: CartItemModel) -> CartItemModel:
        self.db.add(line)
        self.db.flush()
        return line

    def delete_line(self, line: CartItemModel) -> None:
        self.db.delete(line)
        self.db.flush()

    def clear_for_user(self, user_id: int) -> int:
        res = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount or 0

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
