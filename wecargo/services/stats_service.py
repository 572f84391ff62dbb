# wecargo/services/stats_service.py
from collections import Counter

from sqlmodel import Session

from wecargo.core.clock import utcnow
from wecargo.core.errors import ValidationError
from wecargo.models.enums import IN_TRANSIT_STATUSES, OrderStatus
from wecargo.repositories.stats_repo import StatsRepository
from wecargo.schemas.stats import (
    AdminDashboardStats,
    LatestOrderSummary,
    MonthlyOrders,
    StatusCount,
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
        year: int | None = None,
        latest_n_orders: int = 5,
    ) -> AdminDashboardStats:
        # Default to current year if not provided
        if year is None:
            year = utcnow().year

        if not 2000 <= year <= 9999:
            raise ValidationError("year must be between 2000 and 9999")

        # Legacy rows come back as a second IN_WAREHOUSE group
        counts: Counter[OrderStatus] = Counter()
        for status_value, count in self.repo.count_by_status(session):
            counts[status_value] += int(count or 0)

        status_counts = [
            StatusCount(status=s, count=counts.get(s, 0)) for s in OrderStatus
        ]

        monthly_rows = self.repo.monthly_order_counts(session, year=year)
        monthly_orders: list[MonthlyOrders] = []
        for month, order_count in monthly_rows:
            monthly_orders.append(
                MonthlyOrders(month=int(month), order_count=int(order_count or 0))
            )

        latest_orders = [
            LatestOrderSummary.model_validate(o)
            for o in self.repo.latest_orders(session, limit=latest_n_orders)
        ]

        return AdminDashboardStats(
            total_orders=self.repo.count_orders(session),
            warehouse_orders=counts.get(OrderStatus.IN_WAREHOUSE, 0),
            in_transit_orders=self.repo.count_in_statuses(session, *IN_TRANSIT_STATUSES),
            delivered_orders=counts.get(OrderStatus.DELIVERED, 0),
            cancelled_orders=counts.get(OrderStatus.CANCELLED, 0),
            total_revenue=self.repo.total_revenue(session),
            status_counts=status_counts,
            monthly_orders=monthly_orders,
            latest_orders=latest_orders,
        )
