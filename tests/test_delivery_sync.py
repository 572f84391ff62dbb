"""
Tests for delivery requests and their synchronization with order status.

Tests cover:
- eligibility (IN_UB / OUT_FOR_DELIVERY only), nothing written on rejection
- request moves the order to OUT_FOR_DELIVERY; re-request overwrites
- staff updates cascade: COMPLETED -> DELIVERED, REQUESTED/IN_PROGRESS -> OUT_FOR_DELIVERY
- courier status updates keep delivery and order consistent
- staff listings
"""

import uuid
from datetime import date

import pytest

from wecargo.core.errors import EligibilityError, NotFoundError
from wecargo.models.enums import DeliveryStatus, OrderStatus
from wecargo.repositories.delivery_repo import DeliveryRepository
from wecargo.schemas.delivery import (
    CourierStatusUpdate,
    DeliveryRequestCreate,
    DeliveryUpdate,
)


def _request(order_id, address="Peace Ave 12", district="Sukhbaatar", notes=None):
    return DeliveryRequestCreate(
        order_id=order_id, address=address, district=district, notes=notes
    )


@pytest.fixture
def arrived_order(make_order):
    return make_order("PKG-UB", OrderStatus.IN_UB)


class TestDeliveryRequest:
    @pytest.mark.parametrize(
        "status",
        [
            OrderStatus.IN_WAREHOUSE,
            OrderStatus.IN_TRANSIT,
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
        ],
    )
    def test_ineligible_order_rejected_without_writes(
        self, session, delivery_service, order_service, make_order, status
    ):
        order = make_order(f"PKG-{status.value}", status)

        with pytest.raises(EligibilityError):
            delivery_service.create_or_update_request(session, _request(order.id))

        assert DeliveryRepository().get_by_order_id(session, order.id) is None
        unchanged = order_service.get_by_identifier(session, str(order.id))
        assert unchanged.status == status
        assert len(unchanged.status_history) == 1

    def test_unknown_order_not_found(self, session, delivery_service):
        with pytest.raises(NotFoundError):
            delivery_service.create_or_update_request(session, _request(uuid.uuid4()))

    def test_request_moves_order_out_for_delivery(
        self, session, delivery_service, order_service, arrived_order
    ):
        delivery = delivery_service.create_or_update_request(session, _request(arrived_order.id))

        assert delivery.status == DeliveryStatus.REQUESTED
        assert delivery.district == "Sukhbaatar"

        order = order_service.get_by_identifier(session, "PKG-UB")
        assert order.status == OrderStatus.OUT_FOR_DELIVERY
        assert [h.status for h in order.status_history] == [
            OrderStatus.IN_UB,
            OrderStatus.OUT_FOR_DELIVERY,
        ]

    def test_second_request_overwrites_and_resets(
        self, session, delivery_service, arrived_order
    ):
        first = delivery_service.create_or_update_request(session, _request(arrived_order.id))
        delivery_service.update_delivery(
            session, first.id, DeliveryUpdate(status=DeliveryStatus.IN_PROGRESS)
        )

        second = delivery_service.create_or_update_request(
            session,
            _request(arrived_order.id, address="Seoul St 5", district="Khan-Uul", notes="gate 2"),
        )

        assert second.id == first.id
        assert second.address == "Seoul St 5"
        assert second.district == "Khan-Uul"
        assert second.notes == "gate 2"
        assert second.status == DeliveryStatus.REQUESTED
        assert second.completed_at is None

    def test_blank_district_rejected_by_schema(self, arrived_order):
        with pytest.raises(ValueError):
            _request(arrived_order.id, district="   ")

    def test_get_for_order(self, session, delivery_service, arrived_order):
        with pytest.raises(NotFoundError):
            delivery_service.get_for_order(session, arrived_order.id)

        created = delivery_service.create_or_update_request(session, _request(arrived_order.id))
        assert delivery_service.get_for_order(session, arrived_order.id).id == created.id


class TestDeliveryUpdate:
    def test_completed_marks_order_delivered(
        self, session, delivery_service, order_service, arrived_order
    ):
        delivery = delivery_service.create_or_update_request(session, _request(arrived_order.id))

        result = delivery_service.update_delivery(
            session,
            delivery.id,
            DeliveryUpdate(status=DeliveryStatus.COMPLETED, delivery_fee=5000),
        )

        assert result.status == DeliveryStatus.COMPLETED
        assert result.completed_at is not None
        assert result.delivery_fee == 5000
        assert result.order.status == OrderStatus.DELIVERED

        order = order_service.get_by_identifier(session, "PKG-UB")
        assert order.status_history[-1].status == OrderStatus.DELIVERED

    def test_reopening_returns_order_to_out_for_delivery(
        self, session, delivery_service, arrived_order
    ):
        delivery = delivery_service.create_or_update_request(session, _request(arrived_order.id))
        delivery_service.update_delivery(
            session, delivery.id, DeliveryUpdate(status=DeliveryStatus.COMPLETED)
        )

        result = delivery_service.update_delivery(
            session, delivery.id, DeliveryUpdate(status=DeliveryStatus.REQUESTED)
        )

        assert result.completed_at is None
        assert result.order.status == OrderStatus.OUT_FOR_DELIVERY

    def test_fields_only_update_leaves_order_alone(
        self, session, delivery_service, order_service, arrived_order
    ):
        delivery = delivery_service.create_or_update_request(session, _request(arrived_order.id))
        before = order_service.get_by_identifier(session, "PKG-UB")

        result = delivery_service.update_delivery(
            session,
            delivery.id,
            DeliveryUpdate(scheduled_date=date(2024, 5, 1), notes="call first"),
        )

        assert result.scheduled_date == date(2024, 5, 1)
        assert result.notes == "call first"
        assert result.status == DeliveryStatus.REQUESTED
        after = order_service.get_by_identifier(session, "PKG-UB")
        assert after.status_history == before.status_history

    def test_unknown_delivery_not_found(self, session, delivery_service):
        with pytest.raises(NotFoundError):
            delivery_service.update_delivery(session, uuid.uuid4(), DeliveryUpdate())


class TestCourierUpdate:
    def test_delivered_completes_delivery_and_appends_note(
        self, session, delivery_service, arrived_order, employee
    ):
        delivery = delivery_service.create_or_update_request(
            session, _request(arrived_order.id, notes="ring twice")
        )

        order = delivery_service.courier_update(
            session,
            delivery.id,
            CourierStatusUpdate(status=OrderStatus.DELIVERED, note="left with guard"),
            employee_id=employee.id,
        )

        assert order.status == OrderStatus.DELIVERED
        delivered = [h for h in order.status_history if h.status == OrderStatus.DELIVERED][0]
        assert delivered.employee_id == employee.id

        stored = delivery_service.get_delivery(session, delivery.id)
        assert stored.status == DeliveryStatus.COMPLETED
        assert stored.completed_at is not None
        assert stored.notes == "ring twice\nleft with guard"

    def test_out_for_delivery_reopens_completed_delivery(
        self, session, delivery_service, arrived_order, employee
    ):
        delivery = delivery_service.create_or_update_request(session, _request(arrived_order.id))
        delivery_service.courier_update(
            session, delivery.id, CourierStatusUpdate(status=OrderStatus.DELIVERED), employee.id
        )

        delivery_service.courier_update(
            session,
            delivery.id,
            CourierStatusUpdate(status=OrderStatus.OUT_FOR_DELIVERY),
            employee.id,
        )

        stored = delivery_service.get_delivery(session, delivery.id)
        assert stored.status == DeliveryStatus.IN_PROGRESS
        assert stored.completed_at is None


class TestStaffListings:
    def test_active_and_history(self, session, delivery_service, make_order):
        pending = make_order("PKG-A", OrderStatus.IN_UB)
        done = make_order("PKG-B", OrderStatus.IN_UB)

        delivery_service.create_or_update_request(session, _request(pending.id))
        finished = delivery_service.create_or_update_request(session, _request(done.id))
        delivery_service.update_delivery(
            session, finished.id, DeliveryUpdate(status=DeliveryStatus.COMPLETED)
        )

        active = delivery_service.list_active(session)
        history = delivery_service.list_history(session)

        assert [d.order.package_id for d in active] == ["PKG-A"]
        assert [d.order.package_id for d in history] == ["PKG-B"]

    def test_list_all_newest_first(self, session, delivery_service, make_order):
        first = make_order("PKG-A", OrderStatus.IN_UB)
        second = make_order("PKG-B", OrderStatus.OUT_FOR_DELIVERY)
        delivery_service.create_or_update_request(session, _request(first.id))
        delivery_service.create_or_update_request(session, _request(second.id))

        listed = delivery_service.list_all(session)

        assert [d.order.package_id for d in listed] == ["PKG-B", "PKG-A"]
