from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime

from backoffice.data.database import Base

ROLE_ADMIN = "admin"
ROLE_EMPLOYEE = "employee"


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(String(20), nullable=False, default=ROLE_EMPLOYEE)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
