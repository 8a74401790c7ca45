# backoffice/services/product_service.py
from sqlalchemy.orm import Session

from backoffice.data.models.product import ProductModel
from backoffice.domain.errors import Conflict, NotFound
from backoffice.domain.schemas import (
    LowStockOut,
    ProductCreate,
    ProductListOut,
    ProductOut,
    ProductUpdate,
    StockUpdateIn,
    StockUpdateOut,
)
from backoffice.repos.product_repo import ProductRepo
from backoffice.utils.settings import LOW_STOCK_THRESHOLD
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    """
    Catalog management: CRUD, admin stock adjustments, low-stock listing.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepo(db)

    def _get_or_404(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound("Product not found")
        return product

    def _commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # =====================================================
    # QUERY
    # =====================================================
    def list_products(self, search: str | None = None, page: int = 1, limit: int = 10) -> ProductListOut:
        products = self.repo.list_products(search=search, skip=(page - 1) * limit, limit=limit)
        return ProductListOut(
            products=[ProductOut.model_validate(p) for p in products],
            total=self.repo.count_products(search=search),
            page=page,
            limit=limit,
        )

    def get_product(self, product_id: int) -> ProductOut:
        return ProductOut.model_validate(self._get_or_404(product_id))

    def low_stock(self, threshold: int = LOW_STOCK_THRESHOLD) -> LowStockOut:
        products = self.repo.low_stock(threshold)
        return LowStockOut(
            products=[ProductOut.model_validate(p) for p in products],
            threshold=threshold,
            count=len(products),
        )

    # =====================================================
    # COMMANDS
    # =====================================================
    def create_product(self, payload: ProductCreate) -> ProductOut:
        name = payload.name.strip()
        if self.repo.get_by_name(name):
            raise Conflict("Product name already exists")

        product = self.repo.add(
            ProductModel(
                name=name,
                description=payload.description,
                price=payload.price,
                stock=payload.stock,
            )
        )
        self._commit()
        self.db.refresh(product)

        logger.info(f"Product {product.id} ({product.name}) created with stock {product.stock}")
        return ProductOut.model_validate(product)

    def update_product(self, product_id: int, payload: ProductUpdate) -> ProductOut:
        product = self._get_or_404(product_id)

        changes = payload.model_dump(exclude_unset=True)
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            raise Conflict("No fields to update")

        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if self.repo.get_by_name(changes["name"], exclude_id=product_id):
                raise Conflict("Product name already exists")

        for key, value in changes.items():
            setattr(product, key, value)
        self._commit()
        self.db.refresh(product)

        return ProductOut.model_validate(product)

    def delete_product(self, product_id: int) -> None:
        product = self._get_or_404(product_id)

        if self.repo.is_in_any_cart(product_id):
            raise Conflict("Cannot delete product that is in shopping carts")

        if self.repo.has_order_history(product_id):
            raise Conflict("Cannot delete product that has transaction history")

        self.repo.delete(product)
        self._commit()
        logger.info(f"Product {product_id} deleted")

    def update_stock(self, product_id: int, payload: StockUpdateIn) -> StockUpdateOut:
        """
        Use Case: admin stock adjustment.

        - set: stock becomes the given value
        - add: stock grows by the given value
        - subtract: stock shrinks, never below zero
        """
        product = self.repo.get_products_for_update([product_id]).get(product_id)
        if not product:
            raise NotFound("Product not found")

        previous = product.stock
        if payload.operation == "add":
            new_stock = previous + payload.stock
        elif payload.operation == "subtract":
            new_stock = max(0, previous - payload.stock)
        else:
            new_stock = payload.stock

        product.stock = new_stock
        self._commit()

        logger.info(f"Product {product_id} stock {previous} -> {new_stock} ({payload.operation})")

        return StockUpdateOut(
            id_product=product_id,
            previous_stock=previous,
            new_stock=new_stock,
            operation=payload.operation,
        )
