# app/schemas/stats.py
import uuid
from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel

from app.schemas.booking import BookingStatusLiteral


class ProductOverview(SQLModel):
    model_config = ConfigDict(extra="forbid")

    total_products: int
    active_products: int
    total_views: int
    total_likes: int
    avg_price: float


class CategoryStat(SQLModel):
    """
    Active products in one category.
    """
    model_config = ConfigDict(extra="forbid")

    category: str
    count: int
    avg_price: float


class UserOverview(SQLModel):
    model_config = ConfigDict(extra="forbid")

    total_users: int
    active_users: int
    admin_users: int
    regular_users: int


class LatestBookingSummary(SQLModel):
    """
    Lightweight info for last N bookings.
    """
    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID
    coupon_code: str
    order_date: datetime
    user_id: uuid.UUID
    product_name: str
    total_amount: float
    status: BookingStatusLiteral


class AdminDashboardStats(SQLModel):
    """
    Full payload for admin dashboard.
    """
    model_config = ConfigDict(extra="forbid")

    products: ProductOverview
    categories: list[CategoryStat]
    bookings_by_status: dict[str, int]
    booking_revenue: float
    users: UserOverview
    latest_bookings: list[LatestBookingSummary]
