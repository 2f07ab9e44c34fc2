# app/routers/users.py
import uuid

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.core.auth import require_auth, require_admin
from app.database import get_session
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import (
    Role,
    UserAdminUpdate,
    UserCreate,
    UserRead,
    UserRoleUpdate,
    UserUpdate,
)
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


# -------- Self profile --------


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.
    """
    return current_user


@router.post("/me", response_model=UserRead)
def complete_me(
    payload: UserCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    First-time profile completion.

    The profile row is auto-created on first request (auth dependency)
    with a name derived from email and role="user". This route sets
    `name` and `phone`.
    """
    return service.create_me(session, current_user, payload)


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Update the authenticated user's profile (name, phone).
    """
    return service.update_me(session, current_user, payload)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[UserRead],
    dependencies=[Depends(require_admin)],
)
def list_users(
    session: Session = Depends(get_session),
    role: Role | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=50),
):
    """
    List users, newest first (admin only).
    """
    return service.list_users(session, skip, limit, role=role)


@router.get(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def get_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a specific user by id (admin only).
    """
    return service.get_user(session, user_id)


@router.patch("/{user_id}", response_model=UserRead)
def update_user(
    user_id: uuid.UUID,
    payload: UserAdminUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    Edit a user's name, phone, role or active flag (admin only).

    `{"is_active": true}` reactivates a deactivated account.
    """
    return service.update_user(session, admin, user_id, payload)


@router.patch("/{user_id}/role", response_model=UserRead)
def change_role(
    user_id: uuid.UUID,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    Update a user's role (admin only). Admins cannot demote themselves.
    """
    return service.update_role(session, admin, user_id, payload)


@router.delete("/{user_id}")
def deactivate_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
) -> dict[str, str]:
    """
    Deactivate a user account (admin only, soft delete).
    """
    service.deactivate_user(session, admin, user_id)
    return {"message": "User deleted successfully"}
