# wecargo/services/delivery_service.py
import logging
import uuid

from sqlmodel import Session

from wecargo.core.clock import utcnow
from wecargo.core.errors import EligibilityError, NotFoundError
from wecargo.models.delivery import DeliveryRequest
from wecargo.models.enums import (
    DELIVERY_ELIGIBLE_STATUSES,
    DeliveryStatus,
    OrderStatus,
    order_status_for_delivery,
)
from wecargo.models.order import Order
from wecargo.repositories.delivery_repo import DeliveryRepository
from wecargo.schemas.delivery import (
    CourierStatusUpdate,
    DeliveryRead,
    DeliveryRequestCreate,
    DeliveryUpdate,
    DeliveryWithOrderRead,
)
from wecargo.schemas.order import OrderSummary, OrderWithHistoryRead
from wecargo.services.order_service import OrderService

logger = logging.getLogger(__name__)


class DeliveryService:
    """
    Home-delivery requests and their synchronization with order status.

    Mapping kept after every write:
      REQUESTED / IN_PROGRESS -> order OUT_FOR_DELIVERY
      COMPLETED               -> order DELIVERED

    All order changes go through OrderService.apply_status so the status
    ledger stays idempotent. Each operation commits once.
    """

    def __init__(self, repo: DeliveryRepository, order_service: OrderService):
        self.repo = repo
        self.order_service = order_service

    # -------- Customer-facing --------

    def create_or_update_request(
        self,
        session: Session,
        payload: DeliveryRequestCreate,
    ) -> DeliveryRead:
        """
        Ask for home delivery of an order that reached the city.

        Rules:
          - order must be IN_UB or OUT_FOR_DELIVERY, otherwise
            EligibilityError and nothing is written
          - an existing request is overwritten and reset to REQUESTED
          - the order moves to OUT_FOR_DELIVERY if not already there
        """
        order = self.order_service.get_order(session, payload.order_id)
        if order.status not in DELIVERY_ELIGIBLE_STATUSES:
            raise EligibilityError("Order is not eligible for delivery at this time")

        now = utcnow()
        delivery = self.repo.get_by_order_id(session, order.id)
        if delivery is None:
            delivery = DeliveryRequest(
                order_id=order.id,
                address=payload.address,
                district=payload.district,
                notes=payload.notes,
                requested_at=now,
                updated_at=now,
            )
        else:
            delivery.address = payload.address
            delivery.district = payload.district
            delivery.notes = payload.notes
            delivery.status = DeliveryStatus.REQUESTED
            delivery.completed_at = None
            delivery.updated_at = now
        self.repo.save(session, delivery)

        self._sync_order(session, order, DeliveryStatus.REQUESTED)

        session.commit()
        session.refresh(delivery)
        logger.info("Delivery requested for order %s (%s)", order.package_id, delivery.district)
        return DeliveryRead.model_validate(delivery)

    def get_for_order(self, session: Session, order_id: uuid.UUID) -> DeliveryRead:
        delivery = self.repo.get_by_order_id(session, order_id)
        if delivery is None:
            raise NotFoundError("No delivery information found")
        return DeliveryRead.model_validate(delivery)

    # -------- Admin / staff --------

    def get_delivery(self, session: Session, delivery_id: uuid.UUID) -> DeliveryRequest:
        delivery = self.repo.get_by_id(session, delivery_id)
        if delivery is None:
            raise NotFoundError("Delivery request not found")
        return delivery

    def update_delivery(
        self,
        session: Session,
        delivery_id: uuid.UUID,
        payload: DeliveryUpdate,
        employee_id: uuid.UUID | None = None,
    ) -> DeliveryWithOrderRead:
        """
        Update fee / schedule / notes / status; status cascades to the order.

          COMPLETED   -> completed_at = now, order DELIVERED
          IN_PROGRESS -> order OUT_FOR_DELIVERY (unless already)
          REQUESTED   -> completed_at cleared, order OUT_FOR_DELIVERY (unless already)
        """
        delivery = self.get_delivery(session, delivery_id)
        data = payload.model_dump(exclude_unset=True)

        if "delivery_fee" in data:
            delivery.delivery_fee = data["delivery_fee"]
        if "scheduled_date" in data:
            delivery.scheduled_date = data["scheduled_date"]
        if "notes" in data:
            delivery.notes = data["notes"]

        new_status: DeliveryStatus | None = data.get("status")
        if new_status is not None:
            delivery.status = new_status
            if new_status == DeliveryStatus.COMPLETED:
                delivery.completed_at = utcnow()
            else:
                delivery.completed_at = None

        delivery.updated_at = utcnow()
        self.repo.save(session, delivery)

        order = self.order_service.get_order(session, delivery.order_id)
        if new_status is not None:
            self._sync_order(session, order, new_status, employee_id)

        session.commit()
        session.refresh(delivery)
        session.refresh(order)
        return self._with_order(delivery, order)

    def courier_update(
        self,
        session: Session,
        delivery_id: uuid.UUID,
        payload: CourierStatusUpdate,
        employee_id: uuid.UUID | None = None,
    ) -> OrderWithHistoryRead:
        """
        Delivery staff moves the order behind a delivery to `payload.status`.

        - the note, if any, is appended to the delivery notes on a new line
        - DELIVERED completes the delivery; OUT_FOR_DELIVERY reopens a
          completed one, so the two records never contradict each other
        """
        delivery = self.get_delivery(session, delivery_id)
        order = self.order_service.get_order(session, delivery.order_id)

        self.order_service.apply_status(
            session, order, payload.status, employee_id=employee_id
        )

        now = utcnow()
        if payload.status == OrderStatus.DELIVERED:
            delivery.status = DeliveryStatus.COMPLETED
            delivery.completed_at = now
        elif (
            payload.status == OrderStatus.OUT_FOR_DELIVERY
            and delivery.status == DeliveryStatus.COMPLETED
        ):
            delivery.status = DeliveryStatus.IN_PROGRESS
            delivery.completed_at = None

        if payload.note:
            delivery.notes = (
                f"{delivery.notes}\n{payload.note}" if delivery.notes else payload.note
            )
        delivery.updated_at = now
        self.repo.save(session, delivery)

        session.commit()
        session.refresh(order)
        return self.order_service.build_order_dto(session, order)

    def list_all(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 100,
    ) -> list[DeliveryWithOrderRead]:
        """Every request, newest request first (admin)."""
        rows = self.repo.list_with_orders(session, skip=skip, limit=limit)
        return [self._with_order(d, o) for d, o in rows]

    def list_active(self, session: Session) -> list[DeliveryWithOrderRead]:
        """Requests whose order is still IN_UB or OUT_FOR_DELIVERY (staff)."""
        rows = self.repo.list_for_order_statuses(session, DELIVERY_ELIGIBLE_STATUSES)
        return [self._with_order(d, o) for d, o in rows]

    def list_history(self, session: Session) -> list[DeliveryWithOrderRead]:
        """Delivered requests, most recently updated first (staff)."""
        rows = self.repo.list_for_order_statuses(
            session,
            [OrderStatus.DELIVERED],
            newest_update_first=True,
        )
        return [self._with_order(d, o) for d, o in rows]

    # -------- Helpers --------

    def _sync_order(
        self,
        session: Session,
        order: Order,
        delivery_status: DeliveryStatus,
        employee_id: uuid.UUID | None = None,
    ) -> None:
        target = order_status_for_delivery(delivery_status)
        # DELIVERED is always re-applied so its ledger timestamp marks completion
        if order.status != target or target == OrderStatus.DELIVERED:
            self.order_service.apply_status(session, order, target, employee_id=employee_id)

    @staticmethod
    def _with_order(delivery: DeliveryRequest, order: Order) -> DeliveryWithOrderRead:
        return DeliveryWithOrderRead(
            **DeliveryRead.model_validate(delivery).model_dump(),
            order=OrderSummary.model_validate(order),
        )
