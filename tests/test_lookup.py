"""
Tests for order lookup by phone number and by identifier.
"""

import uuid
from datetime import datetime

import pytest

from wecargo.core.errors import NotFoundError, ValidationError
from wecargo.models.enums import OrderStatus


class TestPhoneLookup:
    def test_all_orders_newest_first(self, session, order_service, make_order):
        make_order("PKG-OLD", phone_number="88001122", created_at=datetime(2024, 1, 5))
        make_order("PKG-NEW", phone_number="88001122", created_at=datetime(2024, 3, 1))
        make_order("PKG-MID", phone_number="88001122", created_at=datetime(2024, 2, 1))
        make_order("PKG-OTHER", phone_number="99999999")

        orders = order_service.list_by_phone(session, "88001122")

        assert [o.package_id for o in orders] == ["PKG-NEW", "PKG-MID", "PKG-OLD"]
        assert all(o.status_history for o in orders)

    def test_no_match_is_empty_list(self, session, order_service, make_order):
        make_order("PKG-1")
        assert order_service.list_by_phone(session, "11112222") == []

    @pytest.mark.parametrize("phone", ["", "   "])
    def test_blank_phone_rejected(self, session, order_service, phone):
        with pytest.raises(ValidationError):
            order_service.list_by_phone(session, phone)

    def test_latest_by_phone(self, session, order_service, make_order):
        make_order("PKG-A", created_at=datetime(2024, 1, 1))
        make_order("PKG-B", created_at=datetime(2024, 6, 1))

        assert order_service.latest_by_phone(session, "99110011").package_id == "PKG-B"

        with pytest.raises(NotFoundError):
            order_service.latest_by_phone(session, "00000000")


class TestIdentifierLookup:
    def test_by_internal_id(self, session, order_service, make_order):
        order = make_order("PKG-1")
        found = order_service.get_by_identifier(session, str(order.id))
        assert found.package_id == "PKG-1"

    def test_by_package_id(self, session, order_service, make_order):
        order = make_order("PKG-1", OrderStatus.IN_TRANSIT)
        found = order_service.get_by_identifier(session, "PKG-1")
        assert found.id == order.id
        assert found.status == OrderStatus.IN_TRANSIT

    def test_package_id_match_is_exact(self, session, order_service, make_order):
        make_order("PKG-1")
        with pytest.raises(NotFoundError):
            order_service.get_by_identifier(session, "PKG")

    def test_unknown_uuid_not_found(self, session, order_service, make_order):
        make_order("PKG-1")
        with pytest.raises(NotFoundError):
            order_service.get_by_identifier(session, str(uuid.uuid4()))
