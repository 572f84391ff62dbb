# wecargo/routers/deliveries.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from wecargo.core.auth import (
    StaffPrincipal,
    require_admin,
    require_employee,
    require_staff_or_admin,
)
from wecargo.database import get_session
from wecargo.models.user import Employee
from wecargo.repositories.delivery_repo import DeliveryRepository
from wecargo.repositories.order_repo import OrderRepository
from wecargo.repositories.status_history_repo import StatusHistoryRepository
from wecargo.schemas.delivery import (
    CourierStatusUpdate,
    DeliveryRead,
    DeliveryRequestCreate,
    DeliveryUpdate,
    DeliveryWithOrderRead,
)
from wecargo.schemas.order import OrderWithHistoryRead
from wecargo.services.delivery_service import DeliveryService
from wecargo.services.order_service import OrderService

router = APIRouter(prefix="/deliveries", tags=["Deliveries"])
employee_router = APIRouter(prefix="/employee/deliveries", tags=["Employee Deliveries"])

delivery_repo = DeliveryRepository()
order_service = OrderService(OrderRepository(), StatusHistoryRepository(), delivery_repo)
service = DeliveryService(delivery_repo, order_service)


# -------- Customer-facing --------


@router.post(
    "",
    response_model=DeliveryRead,
    status_code=status.HTTP_201_CREATED,
)
def request_delivery(
    payload: DeliveryRequestCreate,
    session: Session = Depends(get_session),
):
    """
    Request home delivery for an order that is IN_UB or OUT_FOR_DELIVERY.

    Re-submitting overwrites the previous request. The order moves to
    OUT_FOR_DELIVERY.
    """
    return service.create_or_update_request(session, payload)


@router.get("/order/{order_id}", response_model=DeliveryRead)
def get_delivery_for_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_for_order(session, order_id)


# -------- Admin / staff --------


@router.get(
    "",
    response_model=list[DeliveryWithOrderRead],
    dependencies=[Depends(require_admin)],
)
def list_deliveries(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 100,
):
    """
    All delivery requests with their order summary, newest first (admin only).
    """
    return service.list_all(session, skip=skip, limit=limit)


@router.patch("/{delivery_id}", response_model=DeliveryWithOrderRead)
def update_delivery(
    delivery_id: uuid.UUID,
    payload: DeliveryUpdate,
    session: Session = Depends(get_session),
    principal: StaffPrincipal = Depends(require_staff_or_admin),
):
    """
    Update fee, schedule, notes or status.

    COMPLETED marks the order DELIVERED; REQUESTED / IN_PROGRESS keep it
    OUT_FOR_DELIVERY.
    """
    return service.update_delivery(
        session,
        delivery_id,
        payload,
        employee_id=principal.employee_id,
    )


# -------- Employee (courier) endpoints --------


@employee_router.get("", response_model=list[DeliveryWithOrderRead])
def list_active_deliveries(
    session: Session = Depends(get_session),
    _: Employee = Depends(require_employee),
):
    """Deliveries whose order is still IN_UB or OUT_FOR_DELIVERY."""
    return service.list_active(session)


@employee_router.get("/history", response_model=list[DeliveryWithOrderRead])
def list_delivery_history(
    session: Session = Depends(get_session),
    _: Employee = Depends(require_employee),
):
    """Delivered orders, most recently updated first."""
    return service.list_history(session)


@employee_router.put("/{delivery_id}/status", response_model=OrderWithHistoryRead)
def courier_update_status(
    delivery_id: uuid.UUID,
    payload: CourierStatusUpdate,
    session: Session = Depends(get_session),
    employee: Employee = Depends(require_employee),
):
    """
    Move the order behind a delivery to a new status; the note, if any,
    is appended to the delivery notes.
    """
    return service.courier_update(
        session,
        delivery_id,
        payload,
        employee_id=employee.id,
    )
