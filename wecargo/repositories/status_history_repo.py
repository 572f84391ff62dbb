# wecargo/repositories/status_history_repo.py
import uuid
from datetime import datetime

from sqlmodel import Session, select

from wecargo.models.enums import OrderStatus
from wecargo.models.order import StatusHistoryEntry


class StatusHistoryRepository:
    """
    Data access for the per-order status ledger.

    No commits here; ledger writes always go together with an order write.
    """

    def list_for_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[StatusHistoryEntry]:
        """Ledger entries, oldest first."""
        stmt = (
            select(StatusHistoryEntry)
            .where(StatusHistoryEntry.order_id == order_id)
            .order_by(StatusHistoryEntry.timestamp.asc())
        )
        return list(session.exec(stmt).all())

    def list_for_orders(
        self,
        session: Session,
        order_ids: list[uuid.UUID],
    ) -> dict[uuid.UUID, list[StatusHistoryEntry]]:
        """Ledger entries grouped by order id, each group oldest first."""
        grouped: dict[uuid.UUID, list[StatusHistoryEntry]] = {
            oid: [] for oid in order_ids
        }
        if not order_ids:
            return grouped
        stmt = (
            select(StatusHistoryEntry)
            .where(StatusHistoryEntry.order_id.in_(order_ids))
            .order_by(StatusHistoryEntry.timestamp.asc())
        )
        for entry in session.exec(stmt).all():
            grouped.setdefault(entry.order_id, []).append(entry)
        return grouped

    def get_for_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        status: OrderStatus,
    ) -> StatusHistoryEntry | None:
        # Loaded rows are normalized, so a legacy PENDING row compares
        # equal to IN_WAREHOUSE here.
        for entry in self.list_for_order(session, order_id):
            if entry.status == status:
                return entry
        return None

    def latest_for_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> StatusHistoryEntry | None:
        stmt = (
            select(StatusHistoryEntry)
            .where(StatusHistoryEntry.order_id == order_id)
            .order_by(StatusHistoryEntry.timestamp.desc())
        )
        return session.exec(stmt).first()

    def upsert(
        self,
        session: Session,
        order_id: uuid.UUID,
        status: OrderStatus,
        timestamp: datetime,
        employee_id: uuid.UUID | None = None,
    ) -> StatusHistoryEntry:
        """
        Record that `order_id` reached `status` at `timestamp`.

        Existing entry for the status -> refresh its timestamp.
        Otherwise -> insert a new entry.
        """
        entry = self.get_for_status(session, order_id, status)
        if entry is None:
            entry = StatusHistoryEntry(
                order_id=order_id,
                status=status,
                timestamp=timestamp,
                employee_id=employee_id,
            )
        else:
            entry.timestamp = timestamp
            if employee_id is not None:
                entry.employee_id = employee_id

        session.add(entry)
        session.flush()
        return entry

    def add_many(self, session: Session, entries: list[StatusHistoryEntry]) -> None:
        session.add_all(entries)
        session.flush()

    def delete_for_order(self, session: Session, order_id: uuid.UUID) -> None:
        for entry in self.list_for_order(session, order_id):
            session.delete(entry)
        session.flush()
