from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backoffice.api.deps import get_current_admin, get_current_user
from backoffice.data.database import get_db
from backoffice.data.models.user import UserModel
from backoffice.services.user_service import UserService
from backoffice.domain.schemas import ProfileUpdate, UserCreate, UserRead, UserUpdate

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/profile", response_model=UserRead)
def get_profile(user: UserModel = Depends(get_current_user)):
    return UserRead.model_validate(user)


@router.put("/profile", response_model=UserRead)
def update_profile(
    payload: ProfileUpdate,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return UserService(db).update_profile(user, payload)


@router.get("/", response_model=list[UserRead])
def list_users(admin: UserModel = Depends(get_current_admin), db: Session = Depends(get_db)):
    return UserService(db).list_users()


@router.post("/", response_model=UserRead, status_code=201)
def create_user(
    payload: UserCreate,
    admin: UserModel = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return UserService(db).create_user(payload)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, admin: UserModel = Depends(get_current_admin), db: Session = Depends(get_db)):
    return UserService(db).get_user(user_id)


@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    payload: UserUpdate,
    admin: UserModel = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return UserService(db).update_user(user_id, payload)


@router.delete("/{user_id}")
def delete_user(user_id: int, admin: UserModel = Depends(get_current_admin), db: Session = Depends(get_db)):
    UserService(db).delete_user(user_id, admin.id)
    return {"success": True, "message": "User deleted successfully"}
