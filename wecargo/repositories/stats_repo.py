# wecargo/repositories/stats_repo.py
from sqlalchemy import extract, func
from sqlmodel import Session, select

from wecargo.models.enums import OrderStatus
from wecargo.models.order import Order
from wecargo.repositories.order_repo import status_in


class StatsRepository:
    """
    Read-only aggregated queries for admin dashboard.
    """

    def count_orders(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Order)
        value = session.exec(stmt).one()
        return int(value or 0)

    def count_in_statuses(self, session: Session, *statuses: OrderStatus) -> int:
        """Orders currently in any of `statuses` (legacy aliases included)."""
        stmt = select(func.count()).select_from(Order).where(status_in(*statuses))
        value = session.exec(stmt).one()
        return int(value or 0)

    def count_by_status(self, session: Session) -> list[tuple]:
        """
        (status, count) per stored status value.

        Status values come back normalized, so a legacy PENDING group shows up
        as a second IN_WAREHOUSE row; callers sum them.
        """
        stmt = select(Order.status, func.count(Order.id)).group_by(Order.status)
        return list(session.exec(stmt).all())

    def total_revenue(self, session: Session) -> float:
        """
        Sum of delivery_cost for all non-cancelled orders.
        """
        stmt = select(func.coalesce(func.sum(Order.delivery_cost), 0.0)).where(
            ~status_in(OrderStatus.CANCELLED)
        )
        value = session.exec(stmt).one()
        return float(value or 0.0)

    def monthly_order_counts(self, session: Session, year: int) -> list[tuple]:
        """
        (month, order_count) for a given year using Order.created_at.
        Months without orders are absent.
        """
        month_expr = extract("month", Order.created_at)

        stmt = (
            select(
                month_expr.label("month"),
                func.count(Order.id).label("order_count"),
            )
            .where(extract("year", Order.created_at) == year)
            .group_by(month_expr)
            .order_by(month_expr)
        )

        return list(session.exec(stmt).all())

    def latest_orders(
        self,
        session: Session,
        limit: int = 5,
    ) -> list[Order]:
        """
        Latest N orders by created_at (any status).
        """
        stmt = select(Order).order_by(Order.created_at.desc()).limit(limit)
        return list(session.exec(stmt).all())
