# app/models/booking.py
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Union

from sqlmodel import SQLModel, Field

from app.core.errors import ConflictError


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# ---------------------------------------------------------------------------
# Booking state as a tagged variant.
#
# The table stores status + cancelled_at + cancellation_reason + completed_at
# as flat columns; `Booking.state` reads them back as exactly one of these,
# and `state_values()` is the only way new column values are produced.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Confirmed:
    status = BookingStatus.CONFIRMED


@dataclass(frozen=True)
class Cancelled:
    at: datetime
    reason: str | None = None
    status = BookingStatus.CANCELLED


@dataclass(frozen=True)
class Completed:
    at: datetime
    status = BookingStatus.COMPLETED


BookingState = Union[Confirmed, Cancelled, Completed]


def state_values(state: BookingState) -> dict[str, Any]:
    """
    Column values for a state. Every transition writes all four columns
    together so no stale timestamp survives.
    """
    values: dict[str, Any] = {
        "status": state.status.value,
        "cancelled_at": None,
        "cancellation_reason": None,
        "completed_at": None,
    }
    if isinstance(state, Cancelled):
        values["cancelled_at"] = state.at
        values["cancellation_reason"] = state.reason
    elif isinstance(state, Completed):
        values["completed_at"] = state.at
    return values


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Booking(SQLModel, table=True):
    """
    A customer booking (order) for a single product.

    Product snapshot:
      - product_name / product_image / product_category are copied from the
        product when the booking is created and never re-synced.

    Status lifecycle:
      confirmed -> cancelled   (owner or admin)
      confirmed -> completed   (admin)
      cancelled, completed are terminal.
    """

    __tablename__ = "bookings"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    # Product reference + snapshot
    product_id: uuid.UUID = Field(foreign_key="products.id", index=True)
    product_name: str
    product_image: str
    product_category: str

    # Owner + contact details
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    customer_name: str
    customer_phone: str
    customer_address: str

    quantity: int = Field(default=1, ge=1)
    booking_date: date = Field(description="Date requested by the customer")
    order_date: datetime = Field(
        default_factory=_utcnow,
        index=True,
        description="When the booking was placed (UTC)",
    )

    # Pricing breakdown
    actual_price: float = Field(default=0, ge=0)
    strike_price: float = Field(default=0, ge=0)
    selling_price: float = Field(default=0, ge=0)
    total_amount: float = Field(default=0, ge=0)
    discount_percentage: float = Field(default=0, ge=0, le=100)

    coupon_code: str = Field(
        unique=True,
        index=True,
        max_length=40,
        description="Unique uppercase order code, immutable",
    )

    status: str = Field(
        default=BookingStatus.CONFIRMED.value,
        index=True,
        description="confirmed | cancelled | completed",
    )

    notes: str | None = None

    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    completed_at: datetime | None = None

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    # ----- State machine -----

    @property
    def state(self) -> BookingState:
        if self.status == BookingStatus.CANCELLED:
            return Cancelled(at=self.cancelled_at, reason=self.cancellation_reason)
        if self.status == BookingStatus.COMPLETED:
            return Completed(at=self.completed_at)
        return Confirmed()

    def cancellation(self, reason: str | None, at: datetime | None = None) -> Cancelled:
        """
        Validate confirmed -> cancelled and return the target state.

        Does not mutate the record; the repository applies the state with a
        conditional update.
        """
        if self.status == BookingStatus.CANCELLED:
            raise ConflictError("Booking is already cancelled")
        if self.status == BookingStatus.COMPLETED:
            raise ConflictError("Cannot cancel a completed booking")
        return Cancelled(at=at or _utcnow(), reason=reason)

    def completion(self, at: datetime | None = None) -> Completed:
        """Validate confirmed -> completed and return the target state."""
        if self.status == BookingStatus.COMPLETED:
            raise ConflictError("Booking is already marked as completed")
        if self.status == BookingStatus.CANCELLED:
            raise ConflictError("Cannot complete a cancelled booking")
        return Completed(at=at or _utcnow())
