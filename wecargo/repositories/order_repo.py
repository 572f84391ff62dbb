# wecargo/repositories/order_repo.py
import uuid
from datetime import datetime
from typing import Iterable

from sqlalchemy import String, func, type_coerce
from sqlmodel import Session, select

from wecargo.models.enums import OrderStatus, stored_values_for
from wecargo.models.order import Order


def status_in(*statuses: OrderStatus):
    """
    WHERE clause matching any of `statuses`, including legacy aliases
    (PENDING rows match IN_WAREHOUSE). Compares the raw column text.
    """
    raw_values: list[str] = []
    for status in statuses:
        raw_values.extend(stored_values_for(status))
    return type_coerce(Order.status, String).in_(raw_values)


class OrderRepository:
    """
    Data access layer for orders.

    NOTE:
      - No commits here; status changes touch the order and the ledger
        together. The service is responsible for calling session.commit().
    """

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def get_by_package_id(self, session: Session, package_id: str) -> Order | None:
        stmt = select(Order).where(Order.package_id == package_id)
        return session.exec(stmt).first()

    def list_all(
        self,
        session: Session,
        status: OrderStatus | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = select(Order)
        if status is not None:
            stmt = stmt.where(status_in(status))
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def list_by_phone(self, session: Session, phone_number: str) -> list[Order]:
        """All orders for a phone number, newest first."""
        stmt = (
            select(Order)
            .where(Order.phone_number == phone_number)
            .order_by(Order.created_at.desc())
        )
        return list(session.exec(stmt).all())

    def list_created_between(
        self,
        session: Session,
        start: datetime,
        end: datetime,
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.created_at >= start, Order.created_at <= end)
            .order_by(Order.created_at.desc())
        )
        return list(session.exec(stmt).all())

    def existing_package_ids(
        self,
        session: Session,
        package_ids: Iterable[str],
    ) -> list[str]:
        ids = list(package_ids)
        if not ids:
            return []
        stmt = select(Order.package_id).where(Order.package_id.in_(ids))
        return list(session.exec(stmt).all())

    def count(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Order)
        return int(session.exec(stmt).one() or 0)

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()  # Assign PK
        session.refresh(order)
        return order

    def create_many(self, session: Session, orders: list[Order]) -> list[Order]:
        session.add_all(orders)
        session.flush()
        return orders

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    def delete_order(self, session: Session, order: Order) -> None:
        session.delete(order)
        session.flush()
