import uuid

import pytest

from app.core.errors import AuthorizationError
from app.core.permissions import authorize, is_authorized
from app.models.user import User


def _user(role: str) -> User:
    return User(id=uuid.uuid4(), email=f"{role}@example.com", name=role, role=role)


def test_owner_is_allowed():
    user = _user("user")
    assert is_authorized(user, owner_id=user.id)


def test_non_owner_is_denied():
    assert not is_authorized(_user("user"), owner_id=uuid.uuid4())


def test_admin_is_allowed_for_any_owner():
    assert is_authorized(_user("admin"), owner_id=uuid.uuid4())


def test_required_admin_role_denies_owner():
    user = _user("user")
    assert not is_authorized(user, owner_id=user.id, required_role="admin")
    assert is_authorized(_user("admin"), required_role="admin")


def test_no_constraints_allows_any_identity():
    assert is_authorized(_user("user"))


def test_authorize_raises_with_message():
    with pytest.raises(AuthorizationError) as exc:
        authorize(_user("user"), owner_id=uuid.uuid4(), message="Not yours")
    assert exc.value.status_code == 403
    assert exc.value.detail == "Not yours"
