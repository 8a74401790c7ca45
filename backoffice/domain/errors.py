# backoffice/domain/errors.py


class BackofficeError(Exception):
    """
    Base class for errors surfaced to API callers.

    - status_code: HTTP status the API answers with
    - message: human readable reason
    - extra: structured fields merged into the response body
    """

    status_code = 400

    def __init__(self, message: str, extra: dict | None = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}


class EmptyCart(BackofficeError):
    def __init__(self):
        super().__init__("Cart is empty")


class EmptyItems(BackofficeError):
    def __init__(self):
        super().__init__("Items are required for checkout")


class ProductNotFound(BackofficeError):
    status_code = 404

    def __init__(self, product_id: int):
        super().__init__(f"Product with ID {product_id} not found", {"id_product": product_id})
        self.product_id = product_id


class InsufficientStock(BackofficeError):
    def __init__(self, product_id: int, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for {product_name}",
            {
                "id_product": product_id,
                "available_stock": available,
                "requested_quantity": requested,
            },
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class InvalidState(BackofficeError):
    def __init__(self, current_status: str):
        super().__init__("Only pending transactions can be canceled", {"current_status": current_status})
        self.current_status = current_status


class NotFoundOrForbidden(BackofficeError):
    status_code = 404

    def __init__(self, message: str = "Transaction not found"):
        super().__init__(message)


class NotFound(BackofficeError):
    status_code = 404


class Conflict(BackofficeError):
    status_code = 400


class Unauthorized(BackofficeError):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class Forbidden(BackofficeError):
    status_code = 403

    def __init__(self, message: str = "Admin access required"):
        super().__init__(message)


class CartStockError(BackofficeError):
    """Adding to or resizing a cart line would exceed the product's stock."""

    def __init__(self, message: str, available: int, current_quantity: int | None = None):
        extra = {"available_stock": available}
        if current_quantity is not None:
            extra["current_cart_quantity"] = current_quantity
        super().__init__(message, extra)
