"""Pytest configuration and fixtures shared by service and API tests."""

import pytest
from fastapi.testclient import TestClient

from wecargo.core.auth import Realm, issue_token
from wecargo.core.security import hash_password
from wecargo.database import Database
from wecargo.main import create_app
from wecargo.models.enums import EmployeeRole, OrderStatus
from wecargo.models.user import Admin, Customer, Employee
from wecargo.repositories.delivery_repo import DeliveryRepository
from wecargo.repositories.order_repo import OrderRepository
from wecargo.repositories.status_history_repo import StatusHistoryRepository
from wecargo.schemas.order import OrderCreate
from wecargo.services.delivery_service import DeliveryService
from wecargo.services.order_service import OrderService

PASSWORD = "secret-pass-123"


@pytest.fixture(scope="function")
def db():
    """Provide a clean in-memory database for each test function.

    StaticPool keeps a single connection, so every session (test code and
    request handlers alike) sees the same tables.
    """
    database = Database("sqlite://")
    database.create_all()

    yield database

    database.drop_all()
    database.dispose()


@pytest.fixture(scope="function")
def session(db):
    with db.session() as s:
        yield s


@pytest.fixture(scope="function")
def client(db):
    """TestClient over an app wired to the test database."""
    app = create_app(db)
    with TestClient(app) as c:
        yield c


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture
def order_service():
    return OrderService(OrderRepository(), StatusHistoryRepository(), DeliveryRepository())


@pytest.fixture
def delivery_service(order_service):
    return DeliveryService(DeliveryRepository(), order_service)


@pytest.fixture
def make_order(session, order_service):
    """Factory: create an order through the service and return its DTO."""

    def _make(package_id="PKG-1", status=OrderStatus.IN_WAREHOUSE, **fields):
        fields.setdefault("phone_number", "99110011")
        payload = OrderCreate(package_id=package_id, status=status, **fields)
        return order_service.create_order(session, payload)

    return _make


# ---------------------------------------------------------------------------
# Principals
# ---------------------------------------------------------------------------


@pytest.fixture
def admin(session):
    account = Admin(email="admin@wecargo.mn", password_hash=hash_password(PASSWORD))
    session.add(account)
    session.commit()
    session.refresh(account)
    return account


@pytest.fixture
def employee(session):
    account = Employee(
        name="Bat",
        email="bat@wecargo.mn",
        password_hash=hash_password(PASSWORD),
        role=EmployeeRole.DELIVERY,
    )
    session.add(account)
    session.commit()
    session.refresh(account)
    return account


@pytest.fixture
def customer(session):
    account = Customer(
        phone_number="99110011",
        name="Saraa",
        email="saraa@example.com",
        password_hash=hash_password(PASSWORD),
    )
    session.add(account)
    session.commit()
    session.refresh(account)
    return account


def bearer(realm: Realm, subject) -> dict[str, str]:
    token, _ = issue_token(realm, subject)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin):
    return bearer(Realm.ADMIN, admin.id)


@pytest.fixture
def employee_headers(employee):
    return bearer(Realm.STAFF, employee.id)


@pytest.fixture
def customer_headers(customer):
    return bearer(Realm.CUSTOMER, customer.id)
