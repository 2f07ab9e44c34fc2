# app/repositories/stats_repo.py
from sqlalchemy import case, func
from sqlmodel import Session, select

from app.models.booking import Booking, BookingStatus
from app.models.product import Product
from app.models.user import User


class StatsRepository:
    """
    Read-only aggregated queries for admin dashboard.
    """

    def product_overview(self, session: Session) -> tuple:
        """
        (total_products, active_products, total_views, total_likes, avg_price)
        across all products, including soft-deleted ones.
        """
        stmt = select(
            func.count(Product.id),
            func.coalesce(func.sum(case((Product.is_active == True, 1), else_=0)), 0),  # noqa: E712
            func.coalesce(func.sum(Product.views), 0),
            func.coalesce(func.sum(Product.likes), 0),
            func.coalesce(func.avg(Product.price), 0.0),
        )
        return session.exec(stmt).one()

    def category_breakdown(self, session: Session) -> list[tuple]:
        """
        Active products grouped by category, largest first.
        """
        count_expr = func.count(Product.id)
        stmt = (
            select(
                Product.category,
                count_expr.label("count"),
                func.coalesce(func.avg(Product.price), 0.0).label("avg_price"),
            )
            .where(Product.is_active == True)  # noqa: E712
            .group_by(Product.category)
            .order_by(count_expr.desc())
        )
        return list(session.exec(stmt).all())

    def bookings_by_status(self, session: Session) -> list[tuple]:
        stmt = select(Booking.status, func.count(Booking.id)).group_by(Booking.status)
        return list(session.exec(stmt).all())

    def booking_revenue(self, session: Session) -> float:
        """
        Sum of total_amount for all non-cancelled bookings.
        """
        stmt = (
            select(func.coalesce(func.sum(Booking.total_amount), 0.0))
            .where(Booking.status != BookingStatus.CANCELLED.value)
        )
        value = session.exec(stmt).one()
        return float(value or 0.0)

    def user_overview(self, session: Session) -> tuple:
        """(total_users, active_users, admin_users, regular_users)"""
        stmt = select(
            func.count(User.id),
            func.coalesce(func.sum(case((User.is_active == True, 1), else_=0)), 0),  # noqa: E712
            func.coalesce(func.sum(case((User.role == "admin", 1), else_=0)), 0),
            func.coalesce(func.sum(case((User.role == "user", 1), else_=0)), 0),
        )
        return session.exec(stmt).one()

    def latest_bookings(
        self,
        session: Session,
        limit: int = 5,
    ) -> list[Booking]:
        """
        Latest N bookings by order_date (any status).
        """
        stmt = (
            select(Booking)
            .order_by(Booking.order_date.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())
