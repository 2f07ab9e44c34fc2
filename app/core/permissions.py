# app/core/permissions.py
import uuid

from app.core.errors import AuthorizationError
from app.models.user import User

ADMIN_ROLE = "admin"


def is_admin(identity: User) -> bool:
    return identity.role == ADMIN_ROLE


def is_authorized(
    identity: User,
    owner_id: uuid.UUID | None = None,
    required_role: str | None = None,
) -> bool:
    """
    Single "admin or owner" policy shared by booking operations.

    Rules:
      - admins are always allowed
      - if required_role is set, identity.role must match it
      - if owner_id is set, identity must own the resource
    """
    if is_admin(identity):
        return True
    if required_role is not None and identity.role != required_role:
        return False
    if owner_id is not None and identity.id != owner_id:
        return False
    return True


def authorize(
    identity: User,
    owner_id: uuid.UUID | None = None,
    required_role: str | None = None,
    message: str = "Not authorized to access this resource",
) -> None:
    """
    Raise AuthorizationError unless `is_authorized` allows the request.
    """
    if not is_authorized(identity, owner_id=owner_id, required_role=required_role):
        raise AuthorizationError(message)
