# wecargo/schemas/delivery.py
import uuid
from datetime import date, datetime
from typing import Any

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from wecargo.models.enums import DeliveryStatus, OrderStatus, normalize_status
from wecargo.schemas.order import OrderSummary


class DeliveryRequestCreate(SQLModel):
    """
    Customer payload asking for home delivery.

    Re-submitting for the same order overwrites the previous request and
    resets it to REQUESTED.
    """

    model_config = ConfigDict(extra="forbid")

    order_id: uuid.UUID
    address: str = Field(max_length=500)
    district: str = Field(max_length=100)
    notes: str | None = None

    @field_validator("address", "district")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("notes")
    @classmethod
    def normalize_notes(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class DeliveryUpdate(SQLModel):
    """
    Admin/staff partial update of a delivery request.

    Status changes cascade to the order:
      IN_PROGRESS -> order OUT_FOR_DELIVERY
      COMPLETED   -> order DELIVERED (completed_at set)
    """

    model_config = ConfigDict(extra="forbid")

    status: DeliveryStatus | None = None
    delivery_fee: float | None = Field(default=None, ge=0)
    scheduled_date: date | None = None
    notes: str | None = None


class CourierStatusUpdate(SQLModel):
    """
    Delivery staff payload: move the order behind a delivery to a status,
    optionally appending a note to the delivery.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
    note: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> Any:
        return normalize_status(v)


class DeliveryRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    address: str
    district: str
    notes: str | None
    delivery_fee: float | None
    scheduled_date: date | None
    status: DeliveryStatus
    requested_at: datetime
    updated_at: datetime
    completed_at: datetime | None


class DeliveryWithOrderRead(DeliveryRead):
    order: OrderSummary
