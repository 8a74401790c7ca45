from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.data.models.order import OrderModel
from backoffice.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_email(self, email: str, exclude_id: int | None = None) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.email == email.lower())
        if exclude_id is not None:
            stmt = stmt.where(UserModel.id != exclude_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def list_users(self) -> list[UserModel]:
        return list(
            self.db.execute(select(UserModel).order_by(UserModel.created_at.desc(), UserModel.id.desc())).scalars().all()
        )

    def has_orders(self, user_id: int) -> bool:
        return self.db.execute(
            select(OrderModel.id).where(OrderModel.user_id == user_id).limit(1)
        ).first() is not None

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def save(self, user: UserModel) -> UserModel:
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete_user(self, user: UserModel) -> None:
        self.db.delete(user)
        self.db.commit()
