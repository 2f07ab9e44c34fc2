# app/schemas/booking.py
import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

BookingStatusLiteral = Literal["confirmed", "cancelled", "completed"]


class BookingCreate(SQLModel):
    """
    Payload for placing a booking.

    User provides:
      - product_id
      - customer contact details
      - quantity, booking_date
      - optional pricing breakdown (defaults to 0) and notes

    Backend derives:
      - user_id from token
      - product snapshot (name, image, category)
      - coupon_code
      - status = 'confirmed'
    """

    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    customer_name: str = Field(max_length=100)
    customer_phone: str = Field(max_length=20)
    customer_address: str = Field(max_length=500)
    quantity: int = Field(default=1, ge=1)
    booking_date: date

    actual_price: float = Field(default=0, ge=0)
    strike_price: float = Field(default=0, ge=0)
    selling_price: float = Field(default=0, ge=0)
    total_amount: float = Field(default=0, ge=0)
    discount_percentage: float = Field(default=0, ge=0, le=100)

    notes: str | None = Field(default=None, max_length=1000)

    @field_validator("customer_name", "customer_phone", "customer_address")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator(
        "actual_price",
        "strike_price",
        "selling_price",
        "total_amount",
        "discount_percentage",
        mode="before",
    )
    @classmethod
    def default_missing_price(cls, v):
        return 0 if v is None else v

    @field_validator("notes", mode="before")
    @classmethod
    def normalize_notes(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class BookingCancel(SQLModel):
    """
    Optional body for cancellation. Without a reason, a role-based default
    is recorded.
    """

    model_config = ConfigDict(extra="forbid")

    reason: str | None = Field(default=None, max_length=500)

    @field_validator("reason", mode="before")
    @classmethod
    def normalize_reason(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class BookingRead(SQLModel):
    """
    Booking as returned to clients, including the product snapshot.
    """

    id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    product_image: str
    product_category: str
    user_id: uuid.UUID
    customer_name: str
    customer_phone: str
    customer_address: str
    quantity: int
    booking_date: date
    order_date: datetime
    actual_price: float
    strike_price: float
    selling_price: float
    total_amount: float
    discount_percentage: float
    coupon_code: str
    status: BookingStatusLiteral
    notes: str | None
    cancelled_at: datetime | None
    cancellation_reason: str | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime
