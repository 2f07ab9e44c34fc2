# app/services/stats_service.py
from sqlmodel import Session

from app.models.booking import BookingStatus
from app.repositories.stats_repo import StatsRepository
from app.schemas.stats import (
    AdminDashboardStats,
    CategoryStat,
    LatestBookingSummary,
    ProductOverview,
    UserOverview,
)


class StatsService:
    """
    Orchestrates aggregated admin dashboard statistics.
    """

    def __init__(self, repo: StatsRepository):
        self.repo = repo

    def get_admin_dashboard_stats(
        self,
        session: Session,
        latest_n_bookings: int = 5,
    ) -> AdminDashboardStats:
        total, active, views, likes, avg_price = self.repo.product_overview(session)
        products = ProductOverview(
            total_products=int(total or 0),
            active_products=int(active or 0),
            total_views=int(views or 0),
            total_likes=int(likes or 0),
            avg_price=round(float(avg_price or 0.0), 2),
        )

        categories: list[CategoryStat] = []
        for category, count, cat_avg in self.repo.category_breakdown(session):
            categories.append(
                CategoryStat(
                    category=category,
                    count=int(count or 0),
                    avg_price=round(float(cat_avg or 0.0), 2),
                )
            )

        # Every status appears, even with zero bookings
        bookings_by_status = {s.value: 0 for s in BookingStatus}
        for status_value, count in self.repo.bookings_by_status(session):
            bookings_by_status[status_value] = int(count or 0)

        total_users, active_users, admins, regular = self.repo.user_overview(session)
        users = UserOverview(
            total_users=int(total_users or 0),
            active_users=int(active_users or 0),
            admin_users=int(admins or 0),
            regular_users=int(regular or 0),
        )

        latest_bookings: list[LatestBookingSummary] = []
        for b in self.repo.latest_bookings(session, limit=latest_n_bookings):
            latest_bookings.append(
                LatestBookingSummary(
                    id=b.id,
                    coupon_code=b.coupon_code,
                    order_date=b.order_date,
                    user_id=b.user_id,
                    product_name=b.product_name,
                    total_amount=b.total_amount,
                    status=b.status,
                )
            )

        return AdminDashboardStats(
            products=products,
            categories=categories,
            bookings_by_status=bookings_by_status,
            booking_revenue=self.repo.booking_revenue(session),
            users=users,
            latest_bookings=latest_bookings,
        )
