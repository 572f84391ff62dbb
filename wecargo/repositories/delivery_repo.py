# wecargo/repositories/delivery_repo.py
import uuid
from typing import Iterable

from sqlmodel import Session, select

from wecargo.models.delivery import DeliveryRequest
from wecargo.models.enums import OrderStatus
from wecargo.models.order import Order
from wecargo.repositories.order_repo import status_in


class DeliveryRepository:
    """
    Data access layer for delivery requests.

    No commits here; delivery writes cascade into order/ledger writes.
    """

    def get_by_id(
        self,
        session: Session,
        delivery_id: uuid.UUID,
    ) -> DeliveryRequest | None:
        return session.get(DeliveryRequest, delivery_id)

    def get_by_order_id(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> DeliveryRequest | None:
        stmt = select(DeliveryRequest).where(DeliveryRequest.order_id == order_id)
        return session.exec(stmt).first()

    def save(self, session: Session, delivery: DeliveryRequest) -> DeliveryRequest:
        session.add(delivery)
        session.flush()
        session.refresh(delivery)
        return delivery

    def delete(self, session: Session, delivery: DeliveryRequest) -> None:
        session.delete(delivery)
        session.flush()

    # ---- Listings joined with their order ----

    def list_with_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 100,
    ) -> list[tuple[DeliveryRequest, Order]]:
        """All requests, newest request first."""
        stmt = (
            select(DeliveryRequest, Order)
            .join(Order, Order.id == DeliveryRequest.order_id)
            .order_by(DeliveryRequest.requested_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def list_for_order_statuses(
        self,
        session: Session,
        statuses: Iterable[OrderStatus],
        newest_update_first: bool = False,
    ) -> list[tuple[DeliveryRequest, Order]]:
        """Requests whose order currently sits in one of `statuses`."""
        order_by = (
            DeliveryRequest.updated_at.desc()
            if newest_update_first
            else DeliveryRequest.requested_at.desc()
        )
        stmt = (
            select(DeliveryRequest, Order)
            .join(Order, Order.id == DeliveryRequest.order_id)
            .where(status_in(*statuses))
            .order_by(order_by)
        )
        return list(session.exec(stmt).all())
