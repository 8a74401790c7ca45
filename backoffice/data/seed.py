# backoffice/data/seed.py
from decimal import Decimal

from backoffice.data.database import SessionLocal, init_db
from backoffice.data.models.product import ProductModel
from backoffice.data.models.user import UserModel, ROLE_ADMIN, ROLE_EMPLOYEE


def seed():
    init_db()
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(UserModel).first():
            return
        db.add_all(
            [
                UserModel(name="Administrator", email="admin@example.com", role=ROLE_ADMIN),
                UserModel(name="Employee", email="employee@example.com", role=ROLE_EMPLOYEE),
                ProductModel(name="Keyboard", description="Mechanical keyboard", price=Decimal("199.99"), stock=25),
                ProductModel(name="Mouse", description="Wireless mouse", price=Decimal("49.50"), stock=40),
                ProductModel(name="Monitor", description="27 inch monitor", price=Decimal("899.00"), stock=5),
            ]
        )
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
