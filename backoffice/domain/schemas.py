# backoffice/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import List, Literal
from decimal import Decimal
from datetime import datetime

from backoffice.data.models.document import DocumentType
from backoffice.data.models.order import OrderStatus
from backoffice.utils.settings import PAYMENT_METHOD_MIN_LENGTH, PAYMENT_METHOD_MAX_LENGTH


class ApiModel(BaseModel):
    """Wire field names (id_product, jumlah, ...) map onto Python names via aliases."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# =====================================================
# CHECKOUT / TRANSACTIONS
# =====================================================
class CheckoutItemIn(ApiModel):
    """A single line of a direct checkout."""

    product_id: int = Field(..., gt=0, alias="id_product", description="Product ID (> 0)")
    quantity: int = Field(..., gt=0, alias="jumlah", description="Quantity (> 0)")


class CheckoutIn(ApiModel):
    """Checkout of the caller's cart."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True, str_strip_whitespace=True)

    payment_method: str = Field(
        ...,
        alias="metode_pembayaran",
        min_length=PAYMENT_METHOD_MIN_LENGTH,
        max_length=PAYMENT_METHOD_MAX_LENGTH,
    )


class DirectCheckoutIn(CheckoutIn):
    """Checkout of an explicit item list, bypassing the cart."""

    items: List[CheckoutItemIn] = Field(..., min_length=1)


class CheckoutLineOut(ApiModel):
    product_id: int = Field(..., alias="id_product")
    product_name: str = Field(..., alias="nama_product")
    price: Decimal = Field(..., alias="harga")
    quantity: int = Field(..., alias="jumlah")
    subtotal: Decimal


class CheckoutOut(ApiModel):
    id_order: int
    total: Decimal
    payment_method: str = Field(..., alias="metode_pembayaran")
    status: OrderStatus
    items_count: int


class DirectCheckoutOut(CheckoutOut):
    items: List[CheckoutLineOut]


class CancelOut(ApiModel):
    id_order: int
    items_restored: int


class StatusUpdateIn(ApiModel):
    status: OrderStatus = Field(..., alias="status_pembayaran")


class StatusUpdateOut(ApiModel):
    id_order: int
    previous_status: OrderStatus
    new_status: OrderStatus


class OrderItemOut(ApiModel):
    id: int
    product_id: int = Field(..., alias="id_product")
    product_name: str | None = Field(None, alias="nama_product")
    quantity: int = Field(..., alias="jumlah")
    subtotal: Decimal
    current_price: Decimal | None = None


class OrderOut(ApiModel):
    id_order: int
    user_id: int = Field(..., alias="id_user")
    total: Decimal
    payment_method: str = Field(..., alias="metode_pembayaran")
    status: OrderStatus
    created_at: datetime
    items_count: int


class OrderDetailOut(OrderOut):
    items: List[OrderItemOut]


class Pagination(ApiModel):
    current_page: int
    total_pages: int
    total_transactions: int
    has_next_page: bool
    has_prev_page: bool


class OrderListOut(ApiModel):
    transactions: List[OrderOut]
    pagination: Pagination


# =====================================================
# PRODUCTS
# =====================================================
class ProductCreate(ApiModel):
    name: str = Field(..., min_length=2, max_length=100, alias="nama_product")
    description: str | None = Field(None, max_length=1000, alias="deskripsi")
    price: Decimal = Field(..., ge=0, alias="harga")
    stock: int = Field(..., ge=0)


class ProductUpdate(ApiModel):
    name: str | None = Field(None, min_length=2, max_length=100, alias="nama_product")
    description: str | None = Field(None, max_length=1000, alias="deskripsi")
    price: Decimal | None = Field(None, ge=0, alias="harga")
    stock: int | None = Field(None, ge=0)


class ProductOut(ApiModel):
    id: int = Field(..., alias="id_product")
    name: str = Field(..., alias="nama_product")
    description: str | None = Field(None, alias="deskripsi")
    price: Decimal = Field(..., alias="harga")
    stock: int


class ProductListOut(ApiModel):
    products: List[ProductOut]
    total: int
    page: int
    limit: int


class StockUpdateIn(ApiModel):
    stock: int = Field(..., ge=0)
    operation: Literal["set", "add", "subtract"] = "set"


class StockUpdateOut(ApiModel):
    id_product: int
    previous_stock: int
    new_stock: int
    operation: str


class LowStockOut(ApiModel):
    products: List[ProductOut]
    threshold: int
    count: int


# =====================================================
# CART
# =====================================================
class CartAddIn(ApiModel):
    product_id: int = Field(..., gt=0, alias="id_product")
    quantity: int = Field(..., gt=0, alias="jumlah")


class CartUpdateIn(ApiModel):
    quantity: int = Field(..., gt=0, alias="jumlah")


class CartLineOut(ApiModel):
    id_cart: int
    product_id: int = Field(..., alias="id_product")
    product_name: str = Field(..., alias="nama_product")
    price: Decimal = Field(..., alias="harga")
    stock: int
    quantity: int = Field(..., alias="jumlah")
    subtotal: Decimal


class CartOut(ApiModel):
    items: List[CartLineOut]
    total_items: int
    total_amount: Decimal


class CartChangeOut(ApiModel):
    id_cart: int
    product_id: int = Field(..., alias="id_product")
    quantity: int = Field(..., alias="jumlah")
    action: Literal["added", "updated"]


class CartSummaryOut(ApiModel):
    total_items: int
    total_quantity: int
    total_amount: Decimal


class CartValidationOut(ApiModel):
    is_valid: bool
    total_items: int
    unavailable_items: List[CartLineOut]
    validation_message: str


class CartClearOut(ApiModel):
    items_removed: int


# =====================================================
# USERS
# =====================================================
class UserCreate(ApiModel):
    name: str = Field(..., min_length=2, max_length=100, alias="nama")
    email: EmailStr
    role: Literal["admin", "employee"] = "employee"


class ProfileUpdate(ApiModel):
    name: str | None = Field(None, min_length=2, max_length=100, alias="nama")
    email: EmailStr | None = None


class UserUpdate(ProfileUpdate):
    role: Literal["admin", "employee"] | None = None


class UserRead(ApiModel):
    id: int = Field(..., alias="id_user")
    name: str = Field(..., alias="nama")
    email: str
    role: str


# =====================================================
# DOCUMENTS
# =====================================================
class DocumentGenerateIn(ApiModel):
    doc_type: DocumentType = Field(..., alias="tipe_dokumen")


class DocumentOut(ApiModel):
    id: int = Field(..., alias="id_dokumen")
    order_id: int = Field(..., alias="id_transaksi")
    doc_type: DocumentType = Field(..., alias="tipe_dokumen")
    created_at: datetime = Field(..., alias="tanggal_pembuatan")


class DocumentSummaryOut(DocumentOut):
    """Document joined with the order it was issued for."""

    total: Decimal = Field(..., alias="total_harga")
    order_status: OrderStatus = Field(..., alias="status_pembayaran")
    order_created_at: datetime = Field(..., alias="tanggal_transaksi")
    user_name: str = Field(..., alias="user_nama")
    user_email: str


class DocumentDetailOut(DocumentSummaryOut):
    payment_method: str = Field(..., alias="metode_pembayaran")
    items: List[OrderItemOut] = Field(..., alias="transaction_items")


class DocumentPagination(ApiModel):
    current_page: int
    total_pages: int
    total_documents: int
    has_next_page: bool
    has_prev_page: bool


class DocumentListOut(ApiModel):
    documents: List[DocumentSummaryOut]
    pagination: DocumentPagination


class OrderDocumentsOut(ApiModel):
    order_id: int = Field(..., alias="id_transaksi")
    documents: List[DocumentOut]
    count: int
