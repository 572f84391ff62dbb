# wecargo/models/enums.py
from enum import Enum
from typing import Any


class OrderStatus(str, Enum):
    """
    Shipment lifecycle:

        IN_WAREHOUSE -> IN_TRANSIT -> IN_UB -> OUT_FOR_DELIVERY -> DELIVERED

    plus CANCELLED. Transitions are not validated; staff may move an order
    to any status (manual corrections).
    """

    IN_WAREHOUSE = "IN_WAREHOUSE"
    IN_TRANSIT = "IN_TRANSIT"
    IN_UB = "IN_UB"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class DeliveryStatus(str, Enum):
    REQUESTED = "REQUESTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class OrderSize(str, Enum):
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"
    UNDEFINED = "UNDEFINED"


class EmployeeRole(str, Enum):
    MANAGER = "MANAGER"
    DELIVERY = "DELIVERY"


# Historical rows may still carry these values.
LEGACY_STATUS_ALIASES: dict[str, OrderStatus] = {
    "PENDING": OrderStatus.IN_WAREHOUSE,
}

# Order must be in one of these to accept a delivery request.
DELIVERY_ELIGIBLE_STATUSES = frozenset(
    {OrderStatus.IN_UB, OrderStatus.OUT_FOR_DELIVERY}
)

IN_TRANSIT_STATUSES = frozenset(
    {OrderStatus.IN_TRANSIT, OrderStatus.IN_UB, OrderStatus.OUT_FOR_DELIVERY}
)


def normalize_status(value: Any) -> OrderStatus:
    """
    Map any stored or incoming status value to an OrderStatus.

    This is the only place where raw status strings are interpreted:
      - OrderStatus members pass through
      - strings are trimmed and upper-cased
      - legacy "PENDING" becomes IN_WAREHOUSE

    Raises:
        ValueError: for anything else (schemas turn this into a 422,
        services into ValidationError).
    """
    if isinstance(value, OrderStatus):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid order status: {value!r}")

    raw = value.strip().upper()
    if raw in LEGACY_STATUS_ALIASES:
        return LEGACY_STATUS_ALIASES[raw]
    try:
        return OrderStatus(raw)
    except ValueError:
        raise ValueError(f"Invalid order status: {value!r}") from None


def stored_values_for(status: OrderStatus) -> list[str]:
    """
    All raw column values that read back as `status`.

    Used by queries filtering on status, so legacy rows are matched too.
    """
    values = [status.value]
    values.extend(
        alias for alias, target in LEGACY_STATUS_ALIASES.items() if target == status
    )
    return values


def order_status_for_delivery(delivery_status: DeliveryStatus) -> OrderStatus:
    """
    The order status implied by a delivery request status.

      REQUESTED, IN_PROGRESS -> OUT_FOR_DELIVERY
      COMPLETED              -> DELIVERED
    """
    if delivery_status == DeliveryStatus.COMPLETED:
        return OrderStatus.DELIVERED
    return OrderStatus.OUT_FOR_DELIVERY
