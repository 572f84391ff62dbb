# wecargo/schemas/stats.py
import uuid
from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel

from wecargo.models.enums import OrderStatus


class StatusCount(SQLModel):
    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
    count: int


class MonthlyOrders(SQLModel):
    """
    Orders created per month (1-12) for the requested year.
    """
    model_config = ConfigDict(extra="forbid")

    month: int
    order_count: int


class LatestOrderSummary(SQLModel):
    """
    Lightweight info for last N orders.
    """
    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID
    package_id: str
    phone_number: str | None
    status: OrderStatus
    delivery_cost: float | None
    created_at: datetime


class AdminDashboardStats(SQLModel):
    """
    Full payload for admin dashboard.

    warehouse_orders counts IN_WAREHOUSE (and legacy PENDING) rows;
    in_transit_orders counts IN_TRANSIT, IN_UB and OUT_FOR_DELIVERY.
    """
    model_config = ConfigDict(extra="forbid")

    total_orders: int
    warehouse_orders: int
    in_transit_orders: int
    delivered_orders: int
    cancelled_orders: int
    total_revenue: float
    status_counts: list[StatusCount]
    monthly_orders: list[MonthlyOrders]
    latest_orders: list[LatestOrderSummary]
