# backoffice/api/routers/cart.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from backoffice.api.deps import get_current_user
from backoffice.data.database import get_db
from backoffice.data.models.user import UserModel
from backoffice.domain.schemas import (
    CartAddIn,
    CartClearOut,
    CartOut,
    CartSummaryOut,
    CartUpdateIn,
    CartValidationOut,
)
from backoffice.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("/", response_model=CartOut)
def get_cart(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_service(db).get_cart(user.id)


@router.get("/summary", response_model=CartSummaryOut)
def cart_summary(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_service(db).summary(user.id)


@router.get("/validate", response_model=CartValidationOut)
def validate_cart(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_service(db).validate(user.id)


@router.post("/add")
def add_item(
    payload: CartAddIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = get_service(db).add_item(user.id, payload.product_id, payload.quantity)
    # a new line is a created resource, a merged one is not
    return JSONResponse(
        status_code=201 if result.action == "added" else 200,
        content=result.model_dump(mode="json", by_alias=True),
    )


@router.put("/{line_id}")
def update_item(
    line_id: int,
    payload: CartUpdateIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_service(db).update_item(user.id, line_id, payload.quantity)


@router.delete("/{line_id}")
def remove_item(
    line_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    get_service(db).remove_item(user.id, line_id)
    return {"success": True, "message": "Item removed from cart successfully"}


@router.delete("/", response_model=CartClearOut)
def clear_cart(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_service(db).clear(user.id)
