# wecargo/models/order.py
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, UniqueConstraint
from sqlmodel import SQLModel, Field

from wecargo.core.clock import utcnow
from wecargo.models.enums import OrderSize, OrderStatus
from wecargo.models.types import OrderStatusType


class Order(SQLModel, table=True):
    """
    A tracked shipment.

    - package_id: customer-facing tracking code (unique)
    - phone_number: customer lookup key, NOT unique (one customer, many parcels)
    - status: current lifecycle state; always equals the status of the most
      recently touched StatusHistoryEntry for this order
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    package_id: str = Field(
        unique=True,
        index=True,
        description="Customer-facing tracking code",
    )

    product_id: str | None = Field(
        default=None,
        description="Supplier / marketplace product code",
    )

    phone_number: str | None = Field(
        default=None,
        index=True,
        description="Customer phone number used for lookup",
    )

    size: OrderSize = Field(default=OrderSize.UNDEFINED)

    status: OrderStatus = Field(
        default=OrderStatus.IN_WAREHOUSE,
        sa_column=Column(OrderStatusType(), nullable=False, index=True),
    )

    note: str | None = Field(default=None)

    is_damaged: bool = Field(default=False)
    damage_description: str | None = Field(default=None)

    delivery_address: str | None = Field(default=None)
    delivery_cost: float | None = Field(default=None)
    is_paid: bool = Field(default=False)

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime,
        index=True,
        description="Creation timestamp (UTC)",
    )


class StatusHistoryEntry(SQLModel, table=True):
    """
    Status ledger row: when an order (last) reached a status.

    At most one row per (order_id, status). Re-entering a status refreshes
    `timestamp` instead of inserting a duplicate.
    """

    __tablename__ = "status_history"
    __table_args__ = (
        UniqueConstraint("order_id", "status", name="uq_status_history_order_status"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    status: OrderStatus = Field(
        sa_column=Column(OrderStatusType(), nullable=False),
    )

    timestamp: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    # Staff member who triggered the transition, when known.
    # Plain reference: history outlives deleted employee accounts.
    employee_id: uuid.UUID | None = Field(default=None, index=True)
