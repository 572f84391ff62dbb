"""
Tests for the three token realms and account services.

Tests cover:
- tokens verify only in their own realm
- expired / tampered tokens
- customer sign-up / sign-in
- employee login: inactive accounts rejected before password check
- admin bootstrap / password change
"""

import pytest
from jose import jwt

from wecargo.core.auth import Realm, issue_token, realm_config, verify_token
from wecargo.core.config import get_settings
from wecargo.core.errors import AuthError, ConflictError
from wecargo.repositories.admin_repo import AdminRepository
from wecargo.repositories.customer_repo import CustomerRepository
from wecargo.repositories.employee_repo import EmployeeRepository
from wecargo.schemas.user import (
    AdminCreate,
    AdminPasswordChange,
    CustomerSignIn,
    CustomerSignUp,
    EmailLogin,
    EmployeeCreate,
    EmployeeUpdate,
)
from wecargo.services.admin_service import AdminService
from wecargo.services.customer_service import CustomerService
from wecargo.services.employee_service import EmployeeService

from conftest import PASSWORD


class TestTokens:
    @pytest.mark.parametrize("realm", list(Realm))
    def test_round_trip_in_same_realm(self, realm):
        token, expires_in = issue_token(realm, "3f1c7a52-8f6e-4f0e-9a55-7f3b2f7d9d11")
        payload = verify_token(realm, token)
        assert payload["realm"] == realm.value
        assert expires_in == realm_config(realm).expire_minutes * 60

    @pytest.mark.parametrize(
        "issued, checked",
        [
            (Realm.CUSTOMER, Realm.STAFF),
            (Realm.CUSTOMER, Realm.ADMIN),
            (Realm.STAFF, Realm.ADMIN),
            (Realm.ADMIN, Realm.CUSTOMER),
        ],
    )
    def test_token_rejected_in_other_realm(self, issued, checked):
        token, _ = issue_token(issued, "subject")
        with pytest.raises(AuthError):
            verify_token(checked, token)

    def test_realm_claim_checked_even_with_right_secret(self):
        cfg = realm_config(Realm.STAFF)
        forged = jwt.encode(
            {"sub": "x", "realm": "customer", "exp": 4102444800},
            cfg.secret,
            algorithm=get_settings().JWT_ALG,
        )
        with pytest.raises(AuthError):
            verify_token(Realm.STAFF, forged)

    def test_expired_token(self):
        cfg = realm_config(Realm.ADMIN)
        expired = jwt.encode(
            {"sub": "x", "realm": "admin", "exp": 1},
            cfg.secret,
            algorithm=get_settings().JWT_ALG,
        )
        with pytest.raises(AuthError) as excinfo:
            verify_token(Realm.ADMIN, expired)
        assert excinfo.value.detail == "Token expired"

    def test_expiry_per_realm(self):
        assert realm_config(Realm.CUSTOMER).expire_minutes == 7 * 24 * 60
        assert realm_config(Realm.STAFF).expire_minutes == 24 * 60
        assert realm_config(Realm.ADMIN).expire_minutes == 24 * 60


@pytest.fixture
def customer_service(order_service):
    return CustomerService(CustomerRepository(), order_service)


@pytest.fixture
def employee_service():
    return EmployeeService(EmployeeRepository())


@pytest.fixture
def admin_service():
    return AdminService(AdminRepository())


class TestCustomerAccounts:
    def test_sign_up_then_sign_in(self, session, customer_service):
        signed_up = customer_service.sign_up(
            session,
            CustomerSignUp(phone_number=" 88112233 ", password="hunter22", name="Dorj"),
        )
        assert signed_up.customer.phone_number == "88112233"
        assert verify_token(Realm.CUSTOMER, signed_up.access_token)["sub"] == str(
            signed_up.customer.id
        )

        signed_in = customer_service.sign_in(
            session, CustomerSignIn(phone_number="88112233", password="hunter22")
        )
        assert signed_in.customer.id == signed_up.customer.id

    def test_duplicate_phone_conflict(self, session, customer_service, customer):
        with pytest.raises(ConflictError):
            customer_service.sign_up(
                session,
                CustomerSignUp(phone_number=customer.phone_number, password="hunter22"),
            )

    def test_wrong_password(self, session, customer_service, customer):
        with pytest.raises(AuthError):
            customer_service.sign_in(
                session,
                CustomerSignIn(phone_number=customer.phone_number, password="wrong-pass"),
            )

    def test_my_orders_by_phone(self, session, customer_service, customer, make_order):
        make_order("PKG-MINE", phone_number=customer.phone_number)
        make_order("PKG-OTHER", phone_number="70000000")

        orders = customer_service.my_orders(session, customer)

        assert [o.package_id for o in orders] == ["PKG-MINE"]


class TestEmployeeAccounts:
    def test_login_updates_last_login(self, session, employee_service, employee):
        assert employee.last_login is None

        result = employee_service.login(
            session, EmailLogin(email=employee.email, password=PASSWORD)
        )

        assert result.employee.last_login is not None
        assert verify_token(Realm.STAFF, result.access_token)["role"] == "DELIVERY"

    def test_inactive_rejected_before_password_check(self, session, employee_service, employee):
        employee_service.update_employee(session, employee.id, EmployeeUpdate(is_active=False))

        for password in (PASSWORD, "not-the-password"):
            with pytest.raises(AuthError) as excinfo:
                employee_service.login(session, EmailLogin(email=employee.email, password=password))
            assert excinfo.value.status_code == 403

    def test_wrong_password_is_401(self, session, employee_service, employee):
        with pytest.raises(AuthError) as excinfo:
            employee_service.login(session, EmailLogin(email=employee.email, password="nope-nope"))
        assert excinfo.value.status_code == 401

    def test_create_duplicate_email_conflict(self, session, employee_service, employee):
        with pytest.raises(ConflictError):
            employee_service.create_employee(
                session,
                EmployeeCreate(
                    name="Other",
                    email=employee.email,
                    password="password1",
                    role="MANAGER",
                ),
            )

    def test_update_rehashes_password(self, session, employee_service, employee):
        employee_service.update_employee(
            session, employee.id, EmployeeUpdate(password="brand-new-pass")
        )

        result = employee_service.login(
            session, EmailLogin(email=employee.email, password="brand-new-pass")
        )
        assert result.employee.id == employee.id


class TestAdminAccounts:
    def test_bootstrap_only_when_empty(self, session, admin_service):
        first = admin_service.bootstrap(
            session, AdminCreate(email="root@wecargo.mn", password="long-password")
        )
        assert first.email == "root@wecargo.mn"

        with pytest.raises(ConflictError):
            admin_service.bootstrap(
                session, AdminCreate(email="second@wecargo.mn", password="long-password")
            )

    def test_change_password_requires_current(self, session, admin_service, admin):
        with pytest.raises(AuthError):
            admin_service.change_password(
                session,
                admin,
                AdminPasswordChange(current_password="wrong", new_password="another-pass"),
            )

        admin_service.change_password(
            session,
            admin,
            AdminPasswordChange(current_password=PASSWORD, new_password="another-pass"),
        )
        result = admin_service.login(
            session, EmailLogin(email=admin.email, password="another-pass")
        )
        assert result.admin.id == admin.id
