# backoffice/services/cart_service.py
from decimal import Decimal

from sqlalchemy.orm import Session

from backoffice.data.models.cart_item import CartItemModel
from backoffice.domain.errors import CartStockError, EmptyCart, NotFound
from backoffice.domain.schemas import (
    CartChangeOut,
    CartClearOut,
    CartLineOut,
    CartOut,
    CartSummaryOut,
    CartValidationOut,
)
from backoffice.repos.cart_repo import CartRepo
from backoffice.repos.product_repo import ProductRepo
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use cases of the per-user cart (one line per product).
    Carts hold live prices; prices are frozen only at checkout.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    @staticmethod
    def _line_out(line: CartItemModel) -> CartLineOut:
        price = Decimal(line.product.price)
        return CartLineOut(
            id_cart=line.id,
            product_id=line.product_id,
            product_name=line.product.name,
            price=price,
            stock=line.product.stock,
            quantity=line.quantity,
            subtotal=price * line.quantity,
        )

    # =====================================================
    # QUERY
    # =====================================================
    def get_cart(self, user_id: int) -> CartOut:
        lines = [self._line_out(i) for i in self.repo.get_lines_for_user(user_id)]
        return CartOut(
            items=lines,
            total_items=len(lines),
            total_amount=sum((i.subtotal for i in lines), Decimal("0.00")),
        )

    def summary(self, user_id: int) -> CartSummaryOut:
        cart = self.get_cart(user_id)
        return CartSummaryOut(
            total_items=cart.total_items,
            total_quantity=sum(i.quantity for i in cart.items),
            total_amount=cart.total_amount,
        )

    def validate(self, user_id: int) -> CartValidationOut:
        """
        Use Case: dry run of the checkout stock check. Writes nothing.
        """
        cart = self.get_cart(user_id)
        if not cart.items:
            raise EmptyCart()

        unavailable = [i for i in cart.items if i.stock < i.quantity]
        is_valid = not unavailable

        return CartValidationOut(
            is_valid=is_valid,
            total_items=cart.total_items,
            unavailable_items=unavailable,
            validation_message="Cart is ready for checkout" if is_valid else "Some items have insufficient stock",
        )

    # =====================================================
    # COMMANDS
    # =====================================================
    def add_item(self, user_id: int, product_id: int, quantity: int) -> CartChangeOut:
        """
        Use Case: add a product to the cart, merging with an existing line.
        """
        product = self.products.get_product(product_id)
        if not product:
            raise NotFound("Product not found")

        if product.stock < quantity:
            raise CartStockError("Insufficient stock available", product.stock)

        existing = self.repo.get_line(user_id, product_id)
        try:
            if existing:
                new_quantity = existing.quantity + quantity
                if product.stock < new_quantity:
                    raise CartStockError("Insufficient stock for total quantity", product.stock, existing.quantity)
                existing.quantity = new_quantity
                line, action = existing, "updated"
            else:
                line = self.repo.add_line(CartItemModel(user_id=user_id, product_id=product_id, quantity=quantity))
                action = "added"
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Cart of user {user_id}: product {product_id} {action}, quantity {line.quantity}")
        return CartChangeOut(id_cart=line.id, product_id=product_id, quantity=line.quantity, action=action)

    def update_item(self, user_id: int, line_id: int, quantity: int) -> dict:
        line = self.repo.get_line_by_id(line_id, user_id)
        if not line:
            raise NotFound("Cart item not found")

        if line.product.stock < quantity:
            raise CartStockError("Insufficient stock available", line.product.stock)

        previous = line.quantity
        line.quantity = quantity
        try:
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        return {"id_cart": line_id, "previous_quantity": previous, "new_quantity": quantity}

    def remove_item(self, user_id: int, line_id: int) -> None:
        line = self.repo.get_line_by_id(line_id, user_id)
        if not line:
            raise NotFound("Cart item not found")

        try:
            self.repo.delete_line(line)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

    def clear(self, user_id: int) -> CartClearOut:
        try:
            removed = self.repo.clear_for_user(user_id)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Cart of user {user_id} cleared ({removed} lines)")
        return CartClearOut(items_removed=removed)
