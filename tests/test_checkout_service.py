from decimal import Decimal

import pytest
from sqlalchemy import select, update

from backoffice.data.models import CartItemModel, OrderItemModel, OrderModel, OrderStatus, ProductModel
from backoffice.domain.errors import (
    EmptyCart,
    EmptyItems,
    InsufficientStock,
    InvalidState,
    NotFoundOrForbidden,
    ProductNotFound,
)
from backoffice.services.checkout_service import CheckoutService, SourceLine

from conftest import stock_of


def count(db, model):
    db.expire_all()
    return len(db.execute(select(model)).scalars().all())


@pytest.fixture
def service(db, notifications):
    return CheckoutService(db, notification_service=notifications)


# =====================================================
# CHECKOUT FROM CART
# =====================================================
def test_checkout_from_cart_creates_order_and_empties_cart(db, service, employee, make_product, add_to_cart, notifications):
    product = make_product("Product A", "100000", 5)
    add_to_cart(employee, product, 2)

    result = service.checkout(employee.id, "cash")

    assert result.total == Decimal("200000")
    assert result.status == OrderStatus.COMPLETED
    assert result.payment_method == "cash"
    assert result.items_count == 1
    assert stock_of(db, product.id) == 3
    assert count(db, CartItemModel) == 0

    order = db.get(OrderModel, result.id_order)
    assert order.status == "completed"
    assert order.user_id == employee.id
    assert [(i.product_id, i.quantity, i.subtotal) for i in order.items] == [(product.id, 2, Decimal("200000.00"))]
    assert notifications.sent == [(employee.id, result.id_order, "created")]


def test_checkout_total_is_sum_of_line_subtotals(db, service, employee, make_product, add_to_cart):
    a = make_product("A", "12.50", 10)
    b = make_product("B", "3.99", 10)
    add_to_cart(employee, a, 3)
    add_to_cart(employee, b, 4)

    result = service.checkout(employee.id, "card")

    order = db.get(OrderModel, result.id_order)
    assert order.total == sum(i.subtotal for i in order.items)
    assert order.total == Decimal("53.46")
    assert result.items_count == 2


def test_checkout_insufficient_stock_changes_nothing(db, service, employee, make_product, add_to_cart):
    product = make_product("Product B", "10", 1)
    add_to_cart(employee, product, 2)

    with pytest.raises(InsufficientStock) as exc:
        service.checkout(employee.id, "cash")

    assert exc.value.product_id == product.id
    assert exc.value.available == 1
    assert exc.value.requested == 2
    assert stock_of(db, product.id) == 1
    assert count(db, CartItemModel) == 1
    assert count(db, OrderModel) == 0


def test_checkout_empty_cart(db, service, employee):
    with pytest.raises(EmptyCart):
        service.checkout(employee.id, "cash")

    assert count(db, OrderModel) == 0


def test_one_short_line_blocks_whole_checkout(db, service, employee, make_product, add_to_cart):
    plenty = make_product("Plenty", "5", 100)
    scarce = make_product("Scarce", "5", 1)
    add_to_cart(employee, plenty, 10)
    add_to_cart(employee, scarce, 3)

    with pytest.raises(InsufficientStock):
        service.checkout(employee.id, "cash")

    assert stock_of(db, plenty.id) == 100
    assert stock_of(db, scarce.id) == 1
    assert count(db, OrderModel) == 0
    assert count(db, OrderItemModel) == 0
    assert count(db, CartItemModel) == 2


def test_stock_taken_between_check_and_write_rolls_back(db, service, employee, make_product, add_to_cart):
    first = make_product("First", "1", 5)
    contended = make_product("Contended", "1", 3)
    add_to_cart(employee, first, 2)
    add_to_cart(employee, contended, 3)

    original = service.products.decrement_stock

    def racing_decrement(product_id, quantity):
        if product_id == contended.id:
            # a concurrent checkout got there first
            db.execute(update(ProductModel).where(ProductModel.id == contended.id).values(stock=1))
        return original(product_id, quantity)

    service.products.decrement_stock = racing_decrement

    with pytest.raises(InsufficientStock) as exc:
        service.checkout(employee.id, "cash")

    assert exc.value.product_id == contended.id
    assert exc.value.requested == 3
    assert count(db, OrderModel) == 0
    assert count(db, OrderItemModel) == 0
    assert stock_of(db, first.id) == 5
    assert count(db, CartItemModel) == 2


def test_checkout_after_sold_out_is_rejected(db, service, employee, other_employee, make_product):
    product = make_product("Last units", "20", 4)

    service.direct_checkout(employee.id, "cash", [SourceLine(product.id, 4)])
    with pytest.raises(InsufficientStock):
        service.direct_checkout(other_employee.id, "cash", [SourceLine(product.id, 4)])

    assert stock_of(db, product.id) == 0
    assert count(db, OrderModel) == 1


def test_interleaved_checkouts_for_last_units_only_one_wins(
    db, session_factory, service, employee, other_employee, make_product, notifications
):
    product = make_product("Last units", "20", 4)

    late_db = session_factory()
    late = CheckoutService(late_db, notification_service=notifications)
    original = late.products.get_products_for_update

    def read_then_lose_race(product_ids):
        # the late checkout has seen stock 4; the other one commits before it writes
        products = original(product_ids)
        service.direct_checkout(employee.id, "cash", [SourceLine(product.id, 4)])
        return products

    late.products.get_products_for_update = read_then_lose_race

    try:
        with pytest.raises(InsufficientStock) as exc:
            late.direct_checkout(other_employee.id, "cash", [SourceLine(product.id, 4)])
    finally:
        late_db.close()

    assert exc.value.available == 0
    assert stock_of(db, product.id) == 0
    assert count(db, OrderModel) == 1
    assert db.execute(select(OrderModel.user_id)).scalars().all() == [employee.id]


# =====================================================
# DIRECT CHECKOUT
# =====================================================
def test_direct_checkout_leaves_cart_alone(db, service, employee, make_product, add_to_cart):
    in_cart = make_product("In cart", "1", 10)
    bought = make_product("Bought", "7.25", 10)
    add_to_cart(employee, in_cart, 1)

    result = service.direct_checkout(employee.id, "transfer", [SourceLine(bought.id, 2)])

    assert result.total == Decimal("14.50")
    assert [(i.product_id, i.quantity, i.subtotal) for i in result.items] == [(bought.id, 2, Decimal("14.50"))]
    assert stock_of(db, bought.id) == 8
    assert count(db, CartItemModel) == 1


def test_direct_checkout_unknown_product(db, service, employee, make_product):
    product = make_product("Known", "1", 10)

    with pytest.raises(ProductNotFound) as exc:
        service.direct_checkout(employee.id, "cash", [SourceLine(product.id, 1), SourceLine(999, 1)])

    assert exc.value.product_id == 999
    assert stock_of(db, product.id) == 10
    assert count(db, OrderModel) == 0


def test_direct_checkout_repeated_product_checks_combined_quantity(db, service, employee, make_product):
    product = make_product("Twice", "2", 3)

    with pytest.raises(InsufficientStock) as exc:
        service.direct_checkout(employee.id, "cash", [SourceLine(product.id, 2), SourceLine(product.id, 2)])

    assert exc.value.available == 3
    assert exc.value.requested == 4
    assert stock_of(db, product.id) == 3


def test_direct_checkout_without_items(service, employee):
    with pytest.raises(EmptyItems):
        service.direct_checkout(employee.id, "cash", [])


def test_order_lines_keep_purchase_price(db, service, employee, make_product):
    product = make_product("Repriced", "10.00", 10)
    result = service.direct_checkout(employee.id, "cash", [SourceLine(product.id, 3)])

    product = db.get(ProductModel, product.id)
    product.price = Decimal("99.00")
    db.commit()

    db.expire_all()
    order = db.get(OrderModel, result.id_order)
    assert order.items[0].subtotal == Decimal("30.00")
    assert order.total == Decimal("30.00")


# =====================================================
# CANCEL
# =====================================================
def test_cancel_pending_order_restores_every_line(db, service, employee, make_product, make_pending_order, notifications):
    p = make_product("P", "1", 10)
    q = make_product("Q", "1", 10)
    order = make_pending_order(employee, [(p, 2), (q, 5)])
    assert stock_of(db, p.id) == 8

    result = service.cancel(order.id, employee.id, is_admin=False)

    assert result.items_restored == 2
    assert stock_of(db, p.id) == 10
    assert stock_of(db, q.id) == 10
    assert db.get(OrderModel, order.id).status == OrderStatus.FAILED.value
    assert notifications.sent[-1] == (employee.id, order.id, "cancelled")


def test_cancel_twice_does_not_restore_twice(db, service, employee, make_product, make_pending_order):
    p = make_product("P", "1", 10)
    order = make_pending_order(employee, [(p, 4)])

    service.cancel(order.id, employee.id, is_admin=False)
    with pytest.raises(InvalidState) as exc:
        service.cancel(order.id, employee.id, is_admin=False)

    assert exc.value.current_status == "failed"
    assert stock_of(db, p.id) == 10


def test_interleaved_cancels_restore_stock_once(
    db, session_factory, service, employee, make_product, make_pending_order, notifications
):
    p = make_product("P", "1", 10)
    order = make_pending_order(employee, [(p, 4)])
    assert stock_of(db, p.id) == 6

    late_db = session_factory()
    late = CheckoutService(late_db, notification_service=notifications)
    original = late.orders.get_order_for_caller

    def read_then_lose_race(*args, **kwargs):
        # the late cancel has seen `pending`; the other one commits before it writes
        found = original(*args, **kwargs)
        service.cancel(order.id, employee.id, is_admin=False)
        return found

    late.orders.get_order_for_caller = read_then_lose_race

    try:
        with pytest.raises(InvalidState) as exc:
            late.cancel(order.id, employee.id, is_admin=False)
    finally:
        late_db.close()

    assert exc.value.current_status == "failed"
    assert stock_of(db, p.id) == 10
    assert db.get(OrderModel, order.id).status == "failed"
    assert [e for _, _, e in notifications.sent] == ["cancelled"]


def test_cancel_completed_order_rejected(db, service, employee, make_product):
    p = make_product("P", "1", 10)
    result = service.direct_checkout(employee.id, "cash", [SourceLine(p.id, 2)])

    with pytest.raises(InvalidState):
        service.cancel(result.id_order, employee.id, is_admin=False)

    assert stock_of(db, p.id) == 8
    assert db.get(OrderModel, result.id_order).status == "completed"


def test_cancel_someone_elses_order_looks_missing(db, service, employee, other_employee, make_product, make_pending_order):
    p = make_product("P", "1", 10)
    order = make_pending_order(employee, [(p, 1)])

    with pytest.raises(NotFoundOrForbidden):
        service.cancel(order.id, other_employee.id, is_admin=False)
    with pytest.raises(NotFoundOrForbidden):
        service.cancel(12345, employee.id, is_admin=False)

    assert db.get(OrderModel, order.id).status == "pending"


def test_admin_can_cancel_any_pending_order(db, service, admin, employee, make_product, make_pending_order):
    p = make_product("P", "1", 10)
    order = make_pending_order(employee, [(p, 3)])

    result = service.cancel(order.id, admin.id, is_admin=True)

    assert result.items_restored == 1
    assert stock_of(db, p.id) == 10


def test_failed_restore_leaves_order_untouched(db, service, employee, make_product, make_pending_order):
    p = make_product("P", "1", 10)
    q = make_product("Q", "1", 10)
    order = make_pending_order(employee, [(p, 2), (q, 2)])

    original = service.products.increment_stock

    def failing_increment(product_id, quantity):
        if product_id == q.id:
            return False
        return original(product_id, quantity)

    service.products.increment_stock = failing_increment

    with pytest.raises(ProductNotFound):
        service.cancel(order.id, employee.id, is_admin=False)

    assert stock_of(db, p.id) == 8
    assert db.get(OrderModel, order.id).status == "pending"
