# app/services/user_service.py
import logging
import uuid

from sqlmodel import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import UserAdminUpdate, UserCreate, UserUpdate, UserRoleUpdate

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - enforce app rules (no email change, unique phone, admin self-protection)
      - orchestrate repository operations
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def _ensure_phone_free(self, session: Session, user: User, phone: str) -> None:
        other = self.repo.get_by_phone(session, phone)
        if other is not None and other.id != user.id:
            raise ConflictError("Phone number already in use")

    def _apply_profile(self, session: Session, user: User, name: str | None, phone: str | None) -> User:
        if name is not None:
            user.name = name
        if phone is not None:
            self._ensure_phone_free(session, user, phone)
            user.phone = phone
        return self.repo.update(session, user)

    # ----- Self profile -----

    def create_me(
        self,
        session: Session,
        current_user: User,
        payload: UserCreate,
    ) -> User:
        """
        First-time profile completion.

        The profile row is auto-provisioned in `get_current_user`.
        This method only fills editable fields; email cannot change.
        """
        if payload.email and payload.email != current_user.email:
            raise ValidationError("Email cannot be changed")

        return self._apply_profile(session, current_user, payload.name, payload.phone)

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """Partial update for profile edits (name, phone)."""
        return self._apply_profile(session, current_user, payload.name, payload.phone)

    # ----- Admin operations -----

    def list_users(
        self,
        session: Session,
        skip: int,
        limit: int,
        role: str | None = None,
    ) -> list[User]:
        return self.repo.list(session, skip=skip, limit=limit, role=role)

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def _guard_self(
        admin: User,
        user: User,
        role: str | None = None,
        deactivate: bool = False,
    ) -> None:
        """An admin can neither demote nor deactivate their own account."""
        if user.id != admin.id:
            return
        if role is not None and role != "admin":
            raise ValidationError("Cannot demote yourself from admin role")
        if deactivate:
            raise ValidationError("Cannot delete your own account")

    def update_role(
        self,
        session: Session,
        admin: User,
        user_id: uuid.UUID,
        payload: UserRoleUpdate,
    ) -> User:
        """
        Change a user's role. An admin cannot demote themselves, so the
        store always keeps at least the acting admin.
        """
        user = self.get_user(session, user_id)
        self._guard_self(admin, user, role=payload.role)

        user.role = payload.role
        logger.info("User %s role set to %s by %s", user.id, payload.role, admin.id)
        return self.repo.update(session, user)

    def update_user(
        self,
        session: Session,
        admin: User,
        user_id: uuid.UUID,
        payload: UserAdminUpdate,
    ) -> User:
        """
        Admin edit of an account: name, phone, role and is_active.

        Setting is_active=True reactivates a deactivated account. The
        self-demote and self-deactivate guards apply here too.
        """
        user = self.get_user(session, user_id)
        self._guard_self(
            admin,
            user,
            role=payload.role,
            deactivate=payload.is_active is False,
        )

        if payload.role is not None:
            user.role = payload.role
        if payload.is_active is not None:
            user.is_active = payload.is_active

        user = self._apply_profile(session, user, payload.name, payload.phone)
        logger.info("User %s updated by %s", user.id, admin.id)
        return user

    def deactivate_user(
        self,
        session: Session,
        admin: User,
        user_id: uuid.UUID,
    ) -> None:
        """Soft delete: the row stays so bookings keep their owner."""
        user = self.get_user(session, user_id)
        self._guard_self(admin, user, deactivate=True)

        user.is_active = False
        self.repo.update(session, user)
        logger.info("User %s deactivated by %s", user.id, admin.id)
