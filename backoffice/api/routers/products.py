# backoffice/api/routers/products.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backoffice.api.deps import get_current_admin
from backoffice.data.database import get_db
from backoffice.data.models.user import UserModel
from backoffice.domain.schemas import (
    LowStockOut,
    ProductCreate,
    ProductListOut,
    ProductOut,
    ProductUpdate,
    StockUpdateIn,
    StockUpdateOut,
)
from backoffice.services.product_service import ProductService
from backoffice.utils.settings import LOW_STOCK_THRESHOLD

router = APIRouter(prefix="/api/products", tags=["products"])


def get_service(db: Session):
    return ProductService(db)


@router.get("/", response_model=ProductListOut)
def list_products(
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return get_service(db).list_products(search=search, page=page, limit=limit)


@router.get("/admin/low-stock", response_model=LowStockOut)
def low_stock(
    threshold: int = Query(LOW_STOCK_THRESHOLD, ge=0),
    admin: UserModel = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).low_stock(threshold)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return get_service(db).get_product(product_id)


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    admin: UserModel = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).create_product(payload)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    admin: UserModel = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).update_product(product_id, payload)


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    admin: UserModel = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    get_service(db).delete_product(product_id)
    return {"success": True, "message": "Product deleted successfully"}


@router.patch("/{product_id}/stock", response_model=StockUpdateOut)
def update_stock(
    product_id: int,
    payload: StockUpdateIn,
    admin: UserModel = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).update_stock(product_id, payload)
