from sqlalchemy.orm import Session

from backoffice.data.models.user import UserModel
from backoffice.domain.errors import Conflict, NotFound
from backoffice.domain.schemas import ProfileUpdate, UserCreate, UserRead, UserUpdate
from backoffice.repos.user_repo import UserRepo
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def _get_or_404(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("User not found")
        return user

    def create_user(self, payload: UserCreate) -> UserRead:
        email = payload.email.lower()
        if self.repo.get_by_email(email):
            raise Conflict("Email already registered")

        user = UserModel(name=payload.name.strip(), email=email, role=payload.role)
        created = self.repo.create_user(user)
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        return UserRead.model_validate(self._get_or_404(user_id))

    def list_users(self) -> list[UserRead]:
        return [UserRead.model_validate(u) for u in self.repo.list_users()]

    def update_user(self, user_id: int, payload: UserUpdate) -> UserRead:
        """
        Use Case: admin edits a user. Only the fields sent are changed;
        the email must stay unique.
        """
        user = self._get_or_404(user_id)
        return self._apply(user, payload.model_dump(exclude_none=True))

    def update_profile(self, user: UserModel, payload: ProfileUpdate) -> UserRead:
        """Use Case: a user edits their own name or email. The role is not editable here."""
        return self._apply(user, payload.model_dump(exclude_none=True))

    def _apply(self, user: UserModel, changes: dict) -> UserRead:
        if not changes:
            raise Conflict("No fields to update")

        if "email" in changes:
            changes["email"] = changes["email"].lower()
            if self.repo.get_by_email(changes["email"], exclude_id=user.id):
                raise Conflict("Email already registered")
        if "name" in changes:
            changes["name"] = changes["name"].strip()

        for key, value in changes.items():
            setattr(user, key, value)
        saved = self.repo.save(user)

        logger.info(f"User {user.id} updated: {sorted(changes)}")
        return UserRead.model_validate(saved)

    def delete_user(self, user_id: int, caller_id: int) -> None:
        user = self._get_or_404(user_id)

        if user.id == caller_id:
            raise Conflict("Cannot delete your own account")
        if self.repo.has_orders(user.id):
            raise Conflict("Cannot delete user with transaction history")

        self.repo.delete_user(user)
        logger.info(f"User {user_id} deleted by {caller_id}")
