import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import backoffice.data.models  # noqa: F401
from backoffice.api import create_app
from backoffice.data.database import Base, get_db
from backoffice.data.models import (
    CartItemModel,
    OrderItemModel,
    OrderModel,
    OrderStatus,
    ProductModel,
    UserModel,
)


class RecordingNotifications:
    def __init__(self):
        self.sent = []

    def send_order_notification(self, user_id, order_id, event="created"):
        self.sent.append((user_id, order_id, event))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enforce_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def client(session_factory):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c


# =====================================================
# DATA HELPERS
# =====================================================
@pytest.fixture
def admin(db):
    user = UserModel(name="Admin", email="admin@example.com", role="admin")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def employee(db):
    user = UserModel(name="Employee", email="employee@example.com", role="employee")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def other_employee(db):
    user = UserModel(name="Other", email="other@example.com", role="employee")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def make_product(db):
    def _make(name, price, stock):
        product = ProductModel(name=name, price=Decimal(str(price)), stock=stock)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def add_to_cart(db):
    def _add(user, product, quantity):
        line = CartItemModel(user_id=user.id, product_id=product.id, quantity=quantity)
        db.add(line)
        db.commit()
        return line

    return _add


@pytest.fixture
def make_pending_order(db):
    """An order in `pending` with the given (product, quantity) lines, stock already taken."""

    def _make(user, lines, payment_method="transfer"):
        total = sum((Decimal(p.price) * q for p, q in lines), Decimal("0.00"))
        order = OrderModel(
            user_id=user.id,
            total=total,
            payment_method=payment_method,
            status=OrderStatus.PENDING.value,
        )
        db.add(order)
        db.flush()
        for product, quantity in lines:
            db.add(
                OrderItemModel(
                    order_id=order.id,
                    product_id=product.id,
                    quantity=quantity,
                    subtotal=Decimal(product.price) * quantity,
                )
            )
            product.stock -= quantity
        db.commit()
        db.refresh(order)
        return order

    return _make


def auth(user):
    return {"X-User-Id": str(user.id)}


def stock_of(db, product_id):
    db.expire_all()
    return db.get(ProductModel, product_id).stock
