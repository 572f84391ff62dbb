# wecargo/schemas/order.py
import uuid
from datetime import datetime
from typing import Any

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from wecargo.models.enums import OrderSize, OrderStatus, normalize_status


def _strip_or_none(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    return v or None


class _StatusInput(SQLModel):
    """Mixin: accept any spelling of a status, including legacy PENDING."""

    @field_validator("status", mode="before", check_fields=False)
    @classmethod
    def normalize(cls, v: Any) -> Any:
        if v is None:
            return v
        return normalize_status(v)


class OrderCreate(_StatusInput):
    """
    Payload for registering a parcel (single create and bulk import rows).

    Backend derives:
      - id
      - created_at (unless given: imports may carry the original date)
      - the initial status ledger entry
    """

    model_config = ConfigDict(extra="forbid")

    package_id: str = Field(max_length=100)
    product_id: str | None = None
    phone_number: str | None = Field(default=None, max_length=32)
    size: OrderSize = OrderSize.UNDEFINED
    status: OrderStatus = OrderStatus.IN_WAREHOUSE
    note: str | None = None
    is_damaged: bool = False
    damage_description: str | None = None
    delivery_address: str | None = None
    delivery_cost: float | None = Field(default=None, ge=0)
    is_paid: bool = False
    created_at: datetime | None = None

    @field_validator("package_id", "product_id", mode="before")
    @classmethod
    def stringify_codes(cls, v: Any) -> Any:
        # Spreadsheet imports send numeric codes
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(v)) if float(v).is_integer() else str(v)
        return v

    @field_validator("package_id")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("package_id cannot be empty")
        return v

    @field_validator(
        "product_id",
        "phone_number",
        "note",
        "damage_description",
        "delivery_address",
    )
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        return _strip_or_none(v)


class OrderUpdate(_StatusInput):
    """
    Admin partial update. Only provided fields change.

    `status`, when present, goes through the same ledger path as
    PATCH /orders/{id}/status. `created_at` is an administrative override.
    """

    model_config = ConfigDict(extra="forbid")

    package_id: str | None = Field(default=None, max_length=100)
    product_id: str | None = None
    phone_number: str | None = Field(default=None, max_length=32)
    size: OrderSize | None = None
    status: OrderStatus | None = None
    note: str | None = None
    is_damaged: bool | None = None
    damage_description: str | None = None
    delivery_address: str | None = None
    delivery_cost: float | None = Field(default=None, ge=0)
    is_paid: bool | None = None
    created_at: datetime | None = None

    @field_validator("package_id")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("package_id cannot be empty")
        return v


class OrderStatusUpdate(_StatusInput):
    """
    Staff/admin payload to change order status.

    Any status may follow any other; there is no transition table.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
    note: str | None = None

    @field_validator("note")
    @classmethod
    def normalize_note(cls, v: str | None) -> str | None:
        return _strip_or_none(v)


class StatusHistoryRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    status: OrderStatus
    timestamp: datetime
    employee_id: uuid.UUID | None = None


class OrderRead(SQLModel):
    """
    Order without its ledger.
    """

    id: uuid.UUID
    package_id: str
    product_id: str | None
    phone_number: str | None
    size: OrderSize
    status: OrderStatus
    note: str | None
    is_damaged: bool
    damage_description: str | None
    delivery_address: str | None
    delivery_cost: float | None
    is_paid: bool
    created_at: datetime


class OrderWithHistoryRead(OrderRead):
    """
    Full order view; status_history is sorted oldest first.
    """

    status_history: list[StatusHistoryRead]


class OrderSummary(SQLModel):
    """Compact order info embedded in delivery listings."""

    id: uuid.UUID
    package_id: str
    phone_number: str | None
    status: OrderStatus
    created_at: datetime


class BulkImportResult(SQLModel):
    created: int
    package_ids: list[str]


class StatusUpdateResult(SQLModel):
    message: str
    status: OrderStatus
    order: OrderWithHistoryRead
