# wecargo/services/order_service.py
import csv
import io
import logging
import uuid
from datetime import date, datetime, time

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from wecargo.core.clock import utcnow
from wecargo.core.errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from wecargo.models.enums import OrderStatus, normalize_status
from wecargo.models.order import Order, StatusHistoryEntry
from wecargo.repositories.delivery_repo import DeliveryRepository
from wecargo.repositories.order_repo import OrderRepository
from wecargo.repositories.status_history_repo import StatusHistoryRepository
from wecargo.schemas.order import (
    BulkImportResult,
    OrderCreate,
    OrderRead,
    OrderUpdate,
    OrderWithHistoryRead,
    StatusHistoryRead,
)

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "id",
    "package_id",
    "product_id",
    "phone_number",
    "size",
    "status",
    "note",
    "is_damaged",
    "damage_description",
    "delivery_address",
    "delivery_cost",
    "is_paid",
    "created_at",
    "status_history",
]


class OrderService:
    """
    Business logic for orders and their status ledger.

    Responsibilities:
      - Status transitions with idempotent ledger upserts
      - Lookup by phone number / package id / internal id
      - Admin create, bulk import (all-or-nothing), update, delete, export

    Status transitions are NOT validated: any status may follow any other,
    so staff can correct mistakes (e.g. DELIVERED -> IN_UB).
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        history_repo: StatusHistoryRepository,
        delivery_repo: DeliveryRepository,
    ):
        self.order_repo = order_repo
        self.history_repo = history_repo
        self.delivery_repo = delivery_repo

    # -------- Status lifecycle --------

    def apply_status(
        self,
        session: Session,
        order: Order,
        new_status: OrderStatus,
        note: str | None = None,
        employee_id: uuid.UUID | None = None,
    ) -> StatusHistoryEntry:
        """
        Move `order` to `new_status` and upsert its ledger entry. No commit.

        Every status change in the system (direct updates, delivery
        cascades, admin edits) goes through here, so order.status always
        equals the most recently touched ledger entry.
        """
        previous = order.status
        order.status = new_status
        if note is not None:
            order.note = note
        self.order_repo.update_order(session, order)

        entry = self.history_repo.upsert(
            session,
            order.id,
            new_status,
            timestamp=utcnow(),
            employee_id=employee_id,
        )
        logger.info(
            "Order %s status %s -> %s",
            order.package_id,
            previous.value if previous else None,
            new_status.value,
        )
        return entry

    def update_order_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        new_status: OrderStatus,
        note: str | None = None,
        employee_id: uuid.UUID | None = None,
    ) -> OrderWithHistoryRead:
        """
        Set the order status, refresh/insert the ledger entry, commit.

        Raises:
            NotFoundError: if the order does not exist.
        """
        order = self.get_order(session, order_id)
        self.apply_status(session, order, new_status, note, employee_id)
        session.commit()
        session.refresh(order)
        return self.build_order_dto(session, order)

    # -------- Lookup --------

    def get_order(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def get_by_identifier(
        self,
        session: Session,
        identifier: str,
    ) -> OrderWithHistoryRead:
        """
        Resolve an internal id (UUID) or a package id, exact match only.
        """
        identifier = identifier.strip()
        order: Order | None = None

        try:
            order = self.order_repo.get_by_id(session, uuid.UUID(identifier))
        except ValueError:
            order = None

        if order is None and identifier:
            order = self.order_repo.get_by_package_id(session, identifier)

        if order is None:
            raise NotFoundError("Order not found")
        return self.build_order_dto(session, order)

    def list_by_phone(
        self,
        session: Session,
        phone_number: str,
    ) -> list[OrderWithHistoryRead]:
        """
        All orders for a phone number, newest first. Several orders per
        phone number is normal; no match is an empty list.
        """
        phone_number = (phone_number or "").strip()
        if not phone_number:
            raise ValidationError("Phone number is required")

        orders = self.order_repo.list_by_phone(session, phone_number)
        return self.build_order_dtos(session, orders)

    def latest_by_phone(
        self,
        session: Session,
        phone_number: str,
    ) -> OrderWithHistoryRead:
        orders = self.list_by_phone(session, phone_number)
        if not orders:
            raise NotFoundError("No orders found for this phone number")
        return orders[0]

    def get_history(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[StatusHistoryRead]:
        order = self.get_order(session, order_id)
        entries = self.history_repo.list_for_order(session, order.id)
        return [StatusHistoryRead.model_validate(e) for e in entries]

    def list_orders(
        self,
        session: Session,
        status: OrderStatus | str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        if status is not None:
            try:
                status = normalize_status(status)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
        orders = self.order_repo.list_all(session, status=status, skip=skip, limit=limit)
        return [OrderRead.model_validate(o) for o in orders]

    # -------- Admin operations --------

    def create_order(self, session: Session, payload: OrderCreate) -> OrderWithHistoryRead:
        """
        Register a parcel and seed its ledger with the initial status.

        Raises:
            ConflictError: if the package id already exists.
        """
        if self.order_repo.get_by_package_id(session, payload.package_id):
            raise ConflictError(f"Package id '{payload.package_id}' already exists")

        order = self._build_order(payload)
        try:
            self.order_repo.create_order(session, order)
            self.history_repo.add_many(
                session,
                [StatusHistoryEntry(order_id=order.id, status=order.status, timestamp=utcnow())],
            )
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise ConflictError(f"Package id '{payload.package_id}' already exists") from exc

        session.refresh(order)
        logger.info("Order %s created with status %s", order.package_id, order.status.value)
        return self.build_order_dto(session, order)

    def bulk_create(
        self,
        session: Session,
        payloads: list[OrderCreate],
    ) -> BulkImportResult:
        """
        Create many orders at once, all-or-nothing.

        Steps:
          1. Reject an empty batch.
          2. Reject package ids repeated inside the batch.
          3. Reject package ids already stored (pre-check, before any write).
          4. Insert every order + its seed ledger entry, single commit.
             Any failure rolls the whole batch back.
        """
        if not payloads:
            raise ValidationError("No orders to import")

        package_ids = [p.package_id for p in payloads]

        seen: set[str] = set()
        repeated: set[str] = set()
        for pid in package_ids:
            if pid in seen:
                repeated.add(pid)
            seen.add(pid)
        if repeated:
            raise ConflictError(
                {
                    "message": "Duplicate package ids in batch",
                    "package_ids": sorted(repeated),
                }
            )

        existing = self.order_repo.existing_package_ids(session, package_ids)
        if existing:
            raise ConflictError(
                {
                    "message": "Some package ids already exist",
                    "package_ids": sorted(existing),
                }
            )

        orders = [self._build_order(p) for p in payloads]
        try:
            self.order_repo.create_many(session, orders)
            self.history_repo.add_many(
                session,
                [
                    StatusHistoryEntry(order_id=o.id, status=o.status, timestamp=utcnow())
                    for o in orders
                ],
            )
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise ConflictError("Package id conflict; no orders were created") from exc
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Bulk import of %d orders failed", len(orders))
            raise PersistenceError("Bulk import failed; no orders were created") from exc

        logger.info("Bulk imported %d orders", len(orders))
        return BulkImportResult(created=len(orders), package_ids=package_ids)

    def update_order(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderUpdate,
        employee_id: uuid.UUID | None = None,
    ) -> OrderWithHistoryRead:
        """
        Partial admin update.

        - package_id changes are checked for conflicts
        - created_at may be overridden (administrative correction)
        - status, when present, goes through apply_status
        """
        order = self.get_order(session, order_id)
        data = payload.model_dump(exclude_unset=True)
        new_status = data.pop("status", None)

        new_package_id = data.get("package_id")
        if new_package_id and new_package_id != order.package_id:
            if self.order_repo.get_by_package_id(session, new_package_id):
                raise ConflictError(f"Package id '{new_package_id}' already exists")

        # Explicit nulls on non-nullable columns mean "leave unchanged"
        for key in ("package_id", "size", "is_damaged", "is_paid", "created_at"):
            if key in data and data[key] is None:
                data.pop(key)

        for key, value in data.items():
            setattr(order, key, value)
        self.order_repo.update_order(session, order)

        if new_status is not None:
            self.apply_status(session, order, new_status, employee_id=employee_id)

        session.commit()
        session.refresh(order)
        return self.build_order_dto(session, order)

    def delete_order(self, session: Session, order_id: uuid.UUID) -> None:
        """
        Delete an order together with its ledger and delivery request.
        """
        order = self.get_order(session, order_id)
        package_id = order.package_id

        delivery = self.delivery_repo.get_by_order_id(session, order.id)
        if delivery is not None:
            self.delivery_repo.delete(session, delivery)
        self.history_repo.delete_for_order(session, order.id)
        self.order_repo.delete_order(session, order)
        session.commit()
        logger.info("Order %s deleted", package_id)

    def export_orders(
        self,
        session: Session,
        start: date,
        end: date,
    ) -> list[OrderWithHistoryRead]:
        """
        Orders created between `start` and `end` (inclusive days), newest first.
        """
        if start > end:
            raise ValidationError("Start date must not be after end date")

        orders = self.order_repo.list_created_between(
            session,
            datetime.combine(start, time.min),
            datetime.combine(end, time.max),
        )
        return self.build_order_dtos(session, orders)

    @staticmethod
    def to_csv(orders: list[OrderWithHistoryRead]) -> str:
        """
        Render exported orders as CSV; the ledger becomes
        "STATUS@ISO-TIMESTAMP" pairs joined by '|'.
        """
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(EXPORT_COLUMNS)
        for o in orders:
            history = "|".join(
                f"{h.status.value}@{h.timestamp.isoformat()}" for h in o.status_history
            )
            writer.writerow(
                [
                    o.id,
                    o.package_id,
                    o.product_id or "",
                    o.phone_number or "",
                    o.size.value,
                    o.status.value,
                    o.note or "",
                    o.is_damaged,
                    o.damage_description or "",
                    o.delivery_address or "",
                    "" if o.delivery_cost is None else o.delivery_cost,
                    o.is_paid,
                    o.created_at.isoformat(),
                    history,
                ]
            )
        return buf.getvalue()

    # -------- Helpers --------

    @staticmethod
    def _build_order(payload: OrderCreate) -> Order:
        data = payload.model_dump(exclude_none=True)
        return Order(**data)

    def build_order_dto(self, session: Session, order: Order) -> OrderWithHistoryRead:
        history = self.history_repo.list_for_order(session, order.id)
        return self._compose(order, history)

    def build_order_dtos(
        self,
        session: Session,
        orders: list[Order],
    ) -> list[OrderWithHistoryRead]:
        grouped = self.history_repo.list_for_orders(session, [o.id for o in orders])
        return [self._compose(o, grouped.get(o.id, [])) for o in orders]

    @staticmethod
    def _compose(order: Order, history: list[StatusHistoryEntry]) -> OrderWithHistoryRead:
        """
        Order + ledger DTO. History is sorted oldest first regardless of
        write order.
        """
        ordered = sorted(history, key=lambda h: h.timestamp)
        return OrderWithHistoryRead(
            **OrderRead.model_validate(order).model_dump(),
            status_history=[StatusHistoryRead.model_validate(h) for h in ordered],
        )
