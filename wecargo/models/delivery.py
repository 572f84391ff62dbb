# wecargo/models/delivery.py
import uuid
from datetime import date, datetime

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from wecargo.core.clock import utcnow
from wecargo.models.enums import DeliveryStatus


class DeliveryRequest(SQLModel, table=True):
    """
    Customer request for home delivery of an order that reached the city.

    One per order (order_id is unique). Its status drives the order status:
      REQUESTED / IN_PROGRESS -> order OUT_FOR_DELIVERY
      COMPLETED               -> order DELIVERED
    """

    __tablename__ = "delivery_requests"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        unique=True,
        index=True,
    )

    address: str = Field(description="Full delivery address")
    district: str = Field(description="City district")
    notes: str | None = Field(default=None)

    delivery_fee: float | None = Field(default=None)
    scheduled_date: date | None = Field(default=None)

    status: DeliveryStatus = Field(
        default=DeliveryStatus.REQUESTED,
        index=True,
    )

    requested_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    completed_at: datetime | None = Field(default=None, sa_type=DateTime)
