# tests/conftest.py
import os

# Settings are read at import time, so the environment must be ready first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-secret")
os.environ.pop("SUPABASE_SERVICE_ROLE_KEY", None)

import uuid  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from app.core.auth import get_current_user  # noqa: E402
from app.database import engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models.booking import Booking  # noqa: E402
from app.models.product import Product  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services import product_service  # noqa: E402

API = "/api/v1"


@pytest.fixture(autouse=True)
def reset_db():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


def _persist(obj):
    # expire_on_commit=False keeps attributes loaded after the session closes
    with Session(engine, expire_on_commit=False) as s:
        s.add(obj)
        s.commit()
    return obj


@pytest.fixture
def make_user():
    def _make(role: str = "user", **overrides) -> User:
        uid = uuid.uuid4()
        fields = {
            "id": uid,
            "email": f"{role}-{uid.hex[:8]}@example.com",
            "name": f"{role} {uid.hex[:4]}",
            "role": role,
        }
        fields.update(overrides)
        return _persist(User(**fields))

    return _make


@pytest.fixture
def customer(make_user) -> User:
    return make_user("user")


@pytest.fixture
def other_customer(make_user) -> User:
    return make_user("user")


@pytest.fixture
def admin(make_user) -> User:
    return make_user("admin")


@pytest.fixture
def make_product(admin):
    def _make(**overrides) -> Product:
        pid = uuid.uuid4()
        fields = {
            "id": pid,
            "name": "ThinkPad X1 Carbon",
            "description": "Lightweight business laptop, 16GB RAM.",
            "category": "Laptops",
            "condition": "Excellent",
            "type": "Second Hand",
            "availability": "Available",
            "images": [
                f"https://cdn.test/products/{pid}/a.png",
                f"https://cdn.test/products/{pid}/b.png",
            ],
            "image_public_ids": [f"products/{pid}/a.png", f"products/{pid}/b.png"],
            "price": 45000.0,
            "created_by": admin.id,
        }
        fields.update(overrides)
        return _persist(Product(**fields))

    return _make


@pytest.fixture
def make_booking(customer, make_product):
    """Insert a booking row directly, bypassing the service."""
    counter = {"n": 0}

    def _make(owner: User | None = None, product: Product | None = None, **overrides) -> Booking:
        owner = owner or customer
        product = product or make_product()
        counter["n"] += 1
        fields = {
            "product_id": product.id,
            "product_name": product.name,
            "product_image": product.images[0],
            "product_category": product.category,
            "user_id": owner.id,
            "customer_name": owner.name,
            "customer_phone": "9876543210",
            "customer_address": "12 MG Road, Bengaluru",
            "quantity": 1,
            "booking_date": datetime(2024, 1, 1).date(),
            "order_date": datetime.now(timezone.utc) + timedelta(seconds=counter["n"]),
            "coupon_code": f"GIT-TEST{counter['n']:04d}-ABCD",
        }
        fields.update(overrides)
        return _persist(Booking(**fields))

    return _make


class AuthState:
    def __init__(self):
        self.user: User | None = None

    def login(self, user: User | None) -> None:
        self.user = user


@pytest.fixture
def auth():
    state = AuthState()
    app.dependency_overrides[get_current_user] = lambda: state.user
    yield state
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
def client(auth):
    return TestClient(app)


class FakeStorage:
    def __init__(self):
        self.uploaded: list[str] = []
        self.deleted: list[str] = []
        self.fail_upload_after: int | None = None
        self.fail_delete = False

    def upload(self, path: str, file_bytes: bytes, content_type: str) -> tuple[str, str]:
        if self.fail_upload_after is not None and len(self.uploaded) >= self.fail_upload_after:
            raise RuntimeError("storage down")
        self.uploaded.append(path)
        return f"https://cdn.test/{path}", path

    def delete(self, public_id: str) -> None:
        if self.fail_delete:
            raise RuntimeError("storage down")
        self.deleted.append(public_id)


@pytest.fixture
def storage(monkeypatch) -> FakeStorage:
    fake = FakeStorage()
    monkeypatch.setattr(product_service, "upload_image", fake.upload)
    monkeypatch.setattr(product_service, "delete_image", fake.delete)
    return fake
