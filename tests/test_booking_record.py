from datetime import date, datetime, timezone

import pytest

from app.core.errors import ConflictError
from app.models.booking import (
    Booking,
    BookingStatus,
    Cancelled,
    Completed,
    Confirmed,
    state_values,
)

NOW = datetime(2024, 1, 2, 10, 30, tzinfo=timezone.utc)


def _booking(**overrides) -> Booking:
    fields = dict(
        product_id="8a0e5cbe-0f8a-4cc4-9a39-5d0b8f5b1a11",
        product_name="Dell Monitor",
        product_image="https://cdn.test/monitor.png",
        product_category="Monitors",
        user_id="0b7b1a0e-7c7a-4a55-9f0d-2d3a7d8f6e21",
        customer_name="Asha",
        customer_phone="9876543210",
        customer_address="Pune",
        booking_date=date(2024, 1, 1),
        coupon_code="GIT-ABC-1234",
    )
    fields.update(overrides)
    return Booking(**fields)


def test_new_booking_is_confirmed():
    booking = _booking()
    assert booking.status == BookingStatus.CONFIRMED
    assert booking.state == Confirmed()
    assert booking.cancelled_at is None
    assert booking.completed_at is None


def test_state_reads_cancelled_variant():
    booking = _booking(
        status="cancelled", cancelled_at=NOW, cancellation_reason="Changed mind"
    )
    assert booking.state == Cancelled(at=NOW, reason="Changed mind")


def test_state_reads_completed_variant():
    booking = _booking(status="completed", completed_at=NOW)
    assert booking.state == Completed(at=NOW)


def test_cancellation_from_confirmed_returns_target_state_without_mutating():
    booking = _booking()
    state = booking.cancellation("Cancelled by customer", at=NOW)

    assert state == Cancelled(at=NOW, reason="Cancelled by customer")
    assert booking.status == "confirmed"
    assert booking.cancelled_at is None


def test_completion_from_confirmed():
    booking = _booking()
    assert booking.completion(at=NOW) == Completed(at=NOW)


@pytest.mark.parametrize(
    "status, message",
    [
        ("cancelled", "already cancelled"),
        ("completed", "Cannot cancel a completed booking"),
    ],
)
def test_cancellation_rejected_from_terminal_states(status, message):
    booking = _booking(status=status)
    with pytest.raises(ConflictError) as exc:
        booking.cancellation("any")
    assert message in exc.value.detail


@pytest.mark.parametrize(
    "status, message",
    [
        ("completed", "already marked as completed"),
        ("cancelled", "Cannot complete a cancelled booking"),
    ],
)
def test_completion_rejected_from_terminal_states(status, message):
    booking = _booking(status=status)
    with pytest.raises(ConflictError) as exc:
        booking.completion()
    assert message in exc.value.detail


def test_state_values_set_exactly_one_timestamp():
    cancelled = state_values(Cancelled(at=NOW, reason="r"))
    assert cancelled == {
        "status": "cancelled",
        "cancelled_at": NOW,
        "cancellation_reason": "r",
        "completed_at": None,
    }

    completed = state_values(Completed(at=NOW))
    assert completed["status"] == "completed"
    assert completed["completed_at"] == NOW
    assert completed["cancelled_at"] is None
    assert completed["cancellation_reason"] is None

    assert state_values(Confirmed()) == {
        "status": "confirmed",
        "cancelled_at": None,
        "cancellation_reason": None,
        "completed_at": None,
    }
