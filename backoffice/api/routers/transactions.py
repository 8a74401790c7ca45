# backoffice/api/routers/transactions.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backoffice.api.deps import get_current_admin, get_current_user
from backoffice.data.database import get_db
from backoffice.data.models.order import OrderStatus
from backoffice.data.models.user import UserModel
from backoffice.domain.schemas import (
    CancelOut,
    CheckoutIn,
    CheckoutOut,
    DirectCheckoutIn,
    DirectCheckoutOut,
    OrderDetailOut,
    OrderListOut,
    StatusUpdateIn,
    StatusUpdateOut,
)
from backoffice.services.checkout_service import CheckoutService, SourceLine
from backoffice.services.order_service import OrderService

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.post("/checkout", response_model=CheckoutOut, status_code=201)
def checkout(
    payload: CheckoutIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Turns the caller's cart into a completed order and empties the cart.
    """
    result = CheckoutService(db).checkout(user.id, payload.payment_method)
    return CheckoutOut.model_validate(result)


@router.post("/direct-checkout", response_model=DirectCheckoutOut, status_code=201)
def direct_checkout(
    payload: DirectCheckoutIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    items = [SourceLine(i.product_id, i.quantity) for i in payload.items]
    result = CheckoutService(db).direct_checkout(user.id, payload.payment_method, items)
    return DirectCheckoutOut.model_validate(result)


@router.get("/my-transactions", response_model=OrderListOut)
def my_transactions(
    status: OrderStatus | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return OrderService(db).list_for_user(user.id, status=status.value if status else None, page=page, limit=limit)


@router.get("/", response_model=OrderListOut)
def all_transactions(
    status: OrderStatus | None = Query(None),
    user_id: int | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: UserModel = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return OrderService(db).list_all(
        status=status.value if status else None,
        user_id=user_id,
        page=page,
        limit=limit,
    )


@router.get("/{order_id}", response_model=OrderDetailOut)
def transaction_details(
    order_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return OrderService(db).get_details(order_id, user.id, user.is_admin)


@router.patch("/{order_id}/cancel", response_model=CancelOut)
def cancel_transaction(
    order_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Cancels a pending order and restores its stock. Other statuses are rejected.
    """
    result = CheckoutService(db).cancel(order_id, user.id, user.is_admin)
    return CancelOut.model_validate(result)


@router.patch("/{order_id}/status", response_model=StatusUpdateOut)
def update_transaction_status(
    order_id: int,
    payload: StatusUpdateIn,
    admin: UserModel = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return OrderService(db).update_status(order_id, payload.status)
