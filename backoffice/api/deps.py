# backoffice/api/deps.py
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from backoffice.data.database import get_db
from backoffice.data.models.user import UserModel
from backoffice.domain.errors import Forbidden, Unauthorized
from backoffice.repos.user_repo import UserRepo


def get_current_user(
    x_user_id: int | None = Header(default=None),
    db: Session = Depends(get_db),
) -> UserModel:
    """
    Resolves the caller from the X-User-Id header set by the upstream
    gateway. The role comes from the users table, never from the request.
    """
    if x_user_id is None:
        raise Unauthorized()

    user = UserRepo(db).get_user(x_user_id)
    if not user:
        raise Unauthorized("Unknown user")
    return user


def get_current_admin(current_user: UserModel = Depends(get_current_user)) -> UserModel:
    if not current_user.is_admin:
        raise Forbidden()
    return current_user
