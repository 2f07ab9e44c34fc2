from datetime import date

import pytest
from sqlmodel import Session, select

from app.core.errors import ConflictError, NotFoundError
from app.database import engine
from app.models.booking import Booking, Cancelled, Completed
from app.repositories.booking_repo import BookingRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.booking import BookingCreate
from app.services import booking_service
from app.services.booking_service import BookingService


@pytest.fixture
def service() -> BookingService:
    return BookingService(BookingRepository(), ProductRepository())


def _payload(product_id, **overrides) -> BookingCreate:
    fields = dict(
        product_id=product_id,
        customer_name="Ravi Kumar",
        customer_phone="9876543210",
        customer_address="44 Park Street, Kolkata",
        quantity=2,
        booking_date=date(2024, 1, 1),
    )
    fields.update(overrides)
    return BookingCreate(**fields)


def _codes(*codes):
    it = iter(codes)
    return lambda prefix="GIT": next(it)


def test_create_snapshots_product_and_defaults_pricing(session, service, customer, make_product):
    product = make_product()

    booking = service.create_booking(session, customer, _payload(product.id))

    assert booking.status == "confirmed"
    assert booking.product_name == product.name
    assert booking.product_image == product.images[0]
    assert booking.product_category == "Laptops"
    assert booking.user_id == customer.id
    assert booking.actual_price == 0
    assert booking.total_amount == 0
    assert booking.discount_percentage == 0


def test_create_leaves_product_stock_untouched(session, service, customer, make_product):
    product = make_product(stock=3)
    service.create_booking(session, customer, _payload(product.id, quantity=2))

    with Session(engine) as s:
        assert ProductRepository().get_by_id(s, product.id).stock == 3


def test_create_retries_on_coupon_collision(session, service, customer, make_product, monkeypatch):
    product = make_product()
    monkeypatch.setattr(booking_service, "generate_coupon_code", _codes("GIT-DUP-0001"))
    first = service.create_booking(session, customer, _payload(product.id))
    assert first.coupon_code == "GIT-DUP-0001"

    monkeypatch.setattr(
        booking_service,
        "generate_coupon_code",
        _codes("GIT-DUP-0001", "GIT-NEW-0002"),
    )
    second = service.create_booking(session, customer, _payload(product.id))

    assert second.coupon_code == "GIT-NEW-0002"
    assert len(session.exec(select(Booking)).all()) == 2


def test_create_gives_up_after_max_attempts(session, service, customer, make_product, monkeypatch):
    product = make_product()
    monkeypatch.setattr(booking_service, "generate_coupon_code", lambda prefix="GIT": "GIT-DUP-0001")
    service.create_booking(session, customer, _payload(product.id))

    with pytest.raises(ConflictError):
        service.create_booking(session, customer, _payload(product.id))

    assert len(session.exec(select(Booking)).all()) == 1


@pytest.mark.parametrize("availability", ["Out of Stock", "Discontinued"])
def test_create_rejects_unavailable_product(session, service, customer, make_product, availability):
    product = make_product(availability=availability)

    with pytest.raises(ConflictError):
        service.create_booking(session, customer, _payload(product.id))

    assert session.exec(select(Booking)).all() == []


def test_create_rejects_soft_deleted_product(session, service, customer, make_product):
    product = make_product(is_active=False)

    with pytest.raises(NotFoundError):
        service.create_booking(session, customer, _payload(product.id))


def test_transition_loses_race_against_concurrent_update(session, make_booking):
    repo = BookingRepository()
    stale = make_booking()
    booking = repo.get_by_id(session, stale.id)

    # Another request completes the booking after we loaded it.
    with Session(engine) as other:
        concurrent = repo.get_by_id(other, stale.id)
        assert repo.transition(other, concurrent, concurrent.completion())

    applied = repo.transition(session, booking, Cancelled(at=booking.order_date, reason="x"))

    assert applied is False
    assert booking.status == "completed"
    assert booking.cancelled_at is None
    assert booking.cancellation_reason is None


def test_transition_writes_state_columns(session, make_booking):
    repo = BookingRepository()
    booking = repo.get_by_id(session, make_booking().id)
    state = booking.completion()

    assert repo.transition(session, booking, state)
    assert booking.status == "completed"
    assert booking.completed_at is not None
    assert booking.state == Completed(at=booking.completed_at)


@pytest.mark.parametrize(
    "overrides, bookable",
    [
        ({}, True),
        ({"availability": "Out of Stock"}, False),
        ({"is_active": False}, False),
    ],
)
def test_product_is_bookable(make_product, overrides, bookable):
    assert make_product(**overrides).is_bookable is bookable
