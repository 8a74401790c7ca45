# backoffice/repos/product_repo.py
from sqlalchemy import select, update, func, or_
from sqlalchemy.orm import Session

from backoffice.data.models.product import ProductModel
from backoffice.data.models.cart_item import CartItemModel
from backoffice.data.models.order_item import OrderItemModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    # =====================================================
    # QUERY
    # =====================================================
    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_products_for_update(self, product_ids) -> dict[int, ProductModel]:
        """
        Loads products with row locks, always in ascending id order so two
        checkouts touching the same products cannot deadlock.
        """
        ids = sorted(set(product_ids))
        rows = self.db.execute(
            select(ProductModel)
            .where(ProductModel.id.in_(ids))
            .order_by(ProductModel.id)
            .with_for_update()
        ).scalars().all()
        return {p.id: p for p in rows}

    def get_by_name(self, name: str, exclude_id: int | None = None) -> ProductModel | None:
        stmt = select(ProductModel).where(func.lower(ProductModel.name) == name.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(ProductModel.id != exclude_id)
        return self.db.execute(stmt).scalars().first()

    def _search(self, stmt, search: str | None):
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    ProductModel.name.ilike(pattern),
                    ProductModel.description.ilike(pattern),
                )
            )
        return stmt

    def list_products(self, search: str | None = None, skip: int = 0, limit: int = 10) -> list[ProductModel]:
        stmt = self._search(select(ProductModel), search)
        stmt = stmt.order_by(ProductModel.created_at.desc(), ProductModel.id.desc()).offset(skip).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def count_products(self, search: str | None = None) -> int:
        stmt = self._search(select(func.count(ProductModel.id)), search)
        return self.db.execute(stmt).scalar_one()

    def low_stock(self, threshold: int) -> list[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.stock <= threshold)
                .order_by(ProductModel.stock.asc(), ProductModel.id)
            ).scalars().all()
        )

    def is_in_any_cart(self, product_id: int) -> bool:
        return self.db.execute(
            select(CartItemModel.id).where(CartItemModel.product_id == product_id).limit(1)
        ).first() is not None

    def has_order_history(self, product_id: int) -> bool:
        return self.db.execute(
            select(OrderItemModel.id).where(OrderItemModel.product_id == product_id).limit(1)
        ).first() is not None

    # =====================================================
    # COMMANDS
    # =====================================================
    def add(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def delete(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.flush()

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Conditional decrement. Returns False when the row is missing or the
        stock would go negative; nothing is written in that case.
        """
        res = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(stock=ProductModel.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount == 1

    def increment_stock(self, product_id: int, quantity: int) -> bool:
        res = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock=ProductModel.stock + quantity)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount == 1

    def current_stock(self, product_id: int) -> int:
        stock = self.db.execute(
            select(ProductModel.stock).where(ProductModel.id == product_id)
        ).scalar_one_or_none()
        return stock or 0
