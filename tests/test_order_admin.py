"""
Tests for admin order operations.

Tests cover:
- single create (duplicate package id -> conflict)
- bulk import is all-or-nothing, including write failures
- partial update incl. package id conflicts and status routing
- delete removes ledger and delivery request
- export by date range, JSON and CSV
"""

import csv
import io
from datetime import date, datetime

import pytest
from sqlalchemy import DateTime, func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from wecargo.core.errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from wecargo.models.delivery import DeliveryRequest
from wecargo.models.enums import OrderSize, OrderStatus
from wecargo.models.order import Order, StatusHistoryEntry
from wecargo.schemas.delivery import DeliveryRequestCreate
from wecargo.schemas.order import OrderCreate, OrderUpdate


def _count(session, model) -> int:
    return session.exec(select(func.count()).select_from(model)).one()


class TestCreate:
    def test_duplicate_package_id_conflict(self, session, make_order):
        make_order("PKG-1")
        with pytest.raises(ConflictError):
            make_order("PKG-1")
        assert _count(session, Order) == 1

    def test_numeric_package_id_is_stringified(self):
        payload = OrderCreate(package_id=12345)
        assert payload.package_id == "12345"

    def test_create_stores_naive_utc_timestamps(self, session, order_service):
        created = order_service.create_order(session, OrderCreate(package_id="PKG-1"))

        assert created.created_at.tzinfo is None
        assert created.status_history[0].timestamp.tzinfo is None
        for column in (Order.__table__.c.created_at, StatusHistoryEntry.__table__.c.timestamp):
            assert isinstance(column.type, DateTime)
            assert column.type.timezone is False


class TestBulkImport:
    def test_all_rows_created_with_seed_entries(self, session, order_service):
        payloads = [
            OrderCreate(package_id="B-1", phone_number="88001122"),
            OrderCreate(package_id="B-2", status="pending"),
            OrderCreate(package_id="B-3", status=OrderStatus.IN_TRANSIT, size=OrderSize.LARGE),
        ]

        result = order_service.bulk_create(session, payloads)

        assert result.created == 3
        assert result.package_ids == ["B-1", "B-2", "B-3"]
        assert _count(session, Order) == 3
        assert _count(session, StatusHistoryEntry) == 3
        assert order_service.get_by_identifier(session, "B-2").status == OrderStatus.IN_WAREHOUSE

    def test_existing_package_id_rejects_whole_batch(self, session, order_service, make_order):
        make_order("B-2")
        before = _count(session, Order)

        with pytest.raises(ConflictError) as excinfo:
            order_service.bulk_create(
                session,
                [OrderCreate(package_id="B-1"), OrderCreate(package_id="B-2")],
            )

        assert excinfo.value.detail["package_ids"] == ["B-2"]
        assert _count(session, Order) == before
        assert [o.package_id for o in order_service.list_orders(session)] == ["B-2"]

    def test_duplicate_inside_batch_rejected(self, session, order_service):
        with pytest.raises(ConflictError) as excinfo:
            order_service.bulk_create(
                session,
                [
                    OrderCreate(package_id="B-1"),
                    OrderCreate(package_id="B-2"),
                    OrderCreate(package_id="B-1"),
                ],
            )

        assert excinfo.value.detail["package_ids"] == ["B-1"]
        assert _count(session, Order) == 0

    def test_empty_batch_rejected(self, session, order_service):
        with pytest.raises(ValidationError):
            order_service.bulk_create(session, [])

    def test_write_failure_rolls_back_whole_batch(self, session, order_service, monkeypatch):
        def failing_add_many(session, entries):
            raise SQLAlchemyError("disk full")

        monkeypatch.setattr(order_service.history_repo, "add_many", failing_add_many)

        with pytest.raises(PersistenceError):
            order_service.bulk_create(
                session,
                [OrderCreate(package_id="B-1"), OrderCreate(package_id="B-2")],
            )

        assert _count(session, Order) == 0
        assert _count(session, StatusHistoryEntry) == 0


class TestUpdate:
    def test_partial_update_keeps_other_fields(self, session, order_service, make_order):
        order = make_order("PKG-1", note="keep", delivery_cost=1500)

        result = order_service.update_order(
            session, order.id, OrderUpdate(is_paid=True, size=OrderSize.SMALL)
        )

        assert result.is_paid is True
        assert result.size == OrderSize.SMALL
        assert result.note == "keep"
        assert result.delivery_cost == 1500

    def test_package_id_change_conflict(self, session, order_service, make_order):
        make_order("PKG-1")
        other = make_order("PKG-2")

        with pytest.raises(ConflictError):
            order_service.update_order(session, other.id, OrderUpdate(package_id="PKG-1"))

    def test_status_goes_through_ledger(self, session, order_service, make_order):
        order = make_order("PKG-1")

        result = order_service.update_order(
            session, order.id, OrderUpdate(status=OrderStatus.IN_UB)
        )

        assert result.status == OrderStatus.IN_UB
        assert [h.status for h in result.status_history] == [
            OrderStatus.IN_WAREHOUSE,
            OrderStatus.IN_UB,
        ]

    def test_created_at_override(self, session, order_service, make_order):
        order = make_order("PKG-1")
        corrected = datetime(2023, 12, 24, 9, 30)

        result = order_service.update_order(session, order.id, OrderUpdate(created_at=corrected))

        assert result.created_at == corrected


class TestDelete:
    def test_delete_removes_ledger_and_delivery(
        self, session, order_service, delivery_service, make_order
    ):
        order = make_order("PKG-1", OrderStatus.IN_UB)
        delivery_service.create_or_update_request(
            session,
            DeliveryRequestCreate(order_id=order.id, address="Peace Ave 1", district="Bayanzurkh"),
        )

        order_service.delete_order(session, order.id)

        assert _count(session, Order) == 0
        assert _count(session, StatusHistoryEntry) == 0
        assert _count(session, DeliveryRequest) == 0
        with pytest.raises(NotFoundError):
            order_service.get_order(session, order.id)


class TestExport:
    def test_date_range_is_inclusive(self, session, order_service, make_order):
        make_order("PKG-JAN", created_at=datetime(2024, 1, 31, 23, 59))
        make_order("PKG-FEB", created_at=datetime(2024, 2, 1, 0, 0))
        make_order("PKG-MAR", created_at=datetime(2024, 3, 1, 0, 0))

        orders = order_service.export_orders(session, date(2024, 1, 31), date(2024, 2, 1))

        assert [o.package_id for o in orders] == ["PKG-FEB", "PKG-JAN"]

    def test_start_after_end_rejected(self, session, order_service):
        with pytest.raises(ValidationError):
            order_service.export_orders(session, date(2024, 2, 1), date(2024, 1, 1))

    def test_csv_has_header_and_history(self, session, order_service, make_order):
        order = make_order("PKG-1", created_at=datetime(2024, 1, 10))
        order_service.update_order_status(session, order.id, OrderStatus.IN_TRANSIT)

        orders = order_service.export_orders(session, date(2024, 1, 1), date(2030, 12, 31))
        rows = list(csv.DictReader(io.StringIO(order_service.to_csv(orders))))

        assert len(rows) == 1
        assert rows[0]["package_id"] == "PKG-1"
        assert rows[0]["status"] == "IN_TRANSIT"
        history = rows[0]["status_history"].split("|")
        assert [h.split("@")[0] for h in history] == ["IN_WAREHOUSE", "IN_TRANSIT"]
