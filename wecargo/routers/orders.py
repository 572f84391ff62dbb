# wecargo/routers/orders.py
import uuid
from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from wecargo.core.auth import StaffPrincipal, require_admin, require_staff_or_admin
from wecargo.database import get_session
from wecargo.repositories.delivery_repo import DeliveryRepository
from wecargo.repositories.order_repo import OrderRepository
from wecargo.repositories.status_history_repo import StatusHistoryRepository
from wecargo.schemas.order import (
    BulkImportResult,
    OrderCreate,
    OrderRead,
    OrderStatusUpdate,
    OrderUpdate,
    OrderWithHistoryRead,
    StatusHistoryRead,
    StatusUpdateResult,
)
from wecargo.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
history_repo = StatusHistoryRepository()
delivery_repo = DeliveryRepository()
service = OrderService(order_repo, history_repo, delivery_repo)


# -------- Public tracking --------


@router.get("/track/{identifier}", response_model=OrderWithHistoryRead)
def track_order(
    identifier: str,
    session: Session = Depends(get_session),
):
    """
    Look up one parcel by internal id or package id (exact match).

    Public: no authentication.
    """
    return service.get_by_identifier(session, identifier)


@router.get("/phone/{phone_number}", response_model=list[OrderWithHistoryRead])
def list_orders_by_phone(
    phone_number: str,
    session: Session = Depends(get_session),
):
    """
    Every parcel registered under a phone number, newest first.
    An unknown phone number returns an empty list.
    """
    return service.list_by_phone(session, phone_number)


@router.get("/phone/{phone_number}/latest", response_model=OrderWithHistoryRead)
def latest_order_by_phone(
    phone_number: str,
    session: Session = Depends(get_session),
):
    return service.latest_by_phone(session, phone_number)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[OrderRead],
    dependencies=[Depends(require_admin)],
)
def list_all_orders(
    session: Session = Depends(get_session),
    status_filter: str | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    List all orders (admin only), newest first.

    `status_filter` is case-insensitive; IN_WAREHOUSE and legacy PENDING
    are the same filter.
    """
    return service.list_orders(session, status=status_filter, skip=skip, limit=limit)


@router.post(
    "",
    response_model=OrderWithHistoryRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
):
    return service.create_order(session, payload)


@router.post(
    "/bulk",
    response_model=BulkImportResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def bulk_import_orders(
    payload: list[OrderCreate],
    session: Session = Depends(get_session),
):
    """
    Import a batch of orders (admin only). All-or-nothing: a duplicate
    package id anywhere in the batch rejects the whole batch.
    """
    return service.bulk_create(session, payload)


@router.get(
    "/export",
    response_model=list[OrderWithHistoryRead],
    dependencies=[Depends(require_admin)],
)
def export_orders(
    start: date,
    end: date,
    format: Literal["json", "csv"] = "json",
    session: Session = Depends(get_session),
):
    """
    Orders created between `start` and `end` (inclusive), with history.

    `format=csv` returns a downloadable CSV file instead of JSON.
    """
    orders = service.export_orders(session, start, end)
    if format == "csv":
        filename = f"orders_{start.isoformat()}_{end.isoformat()}.csv"
        return Response(
            content=service.to_csv(orders),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    return orders


@router.patch(
    "/{order_id}",
    response_model=OrderWithHistoryRead,
    dependencies=[Depends(require_admin)],
)
def update_order(
    order_id: uuid.UUID,
    payload: OrderUpdate,
    session: Session = Depends(get_session),
):
    return service.update_order(session, order_id, payload)


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete an order with its status history and delivery request.
    """
    service.delete_order(session, order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -------- Staff or admin --------


@router.patch("/{order_id}/status", response_model=StatusUpdateResult)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
    principal: StaffPrincipal = Depends(require_staff_or_admin),
):
    """
    Move an order to any status (no transition rules, corrections allowed).

    The status history keeps one entry per status; re-entering a status
    refreshes that entry's timestamp.
    """
    order = service.update_order_status(
        session,
        order_id,
        payload.status,
        note=payload.note,
        employee_id=principal.employee_id,
    )
    return StatusUpdateResult(
        message="Order status updated",
        status=order.status,
        order=order,
    )


@router.get(
    "/{order_id}/history",
    response_model=list[StatusHistoryRead],
    dependencies=[Depends(require_staff_or_admin)],
)
def get_order_history(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_history(session, order_id)
