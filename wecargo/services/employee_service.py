# wecargo/services/employee_service.py
import logging
import uuid

from fastapi import status
from sqlmodel import Session

from wecargo.core.auth import Realm, issue_token
from wecargo.core.clock import utcnow
from wecargo.core.errors import AuthError, ConflictError, NotFoundError
from wecargo.core.security import hash_password, verify_password
from wecargo.models.user import Employee
from wecargo.repositories.employee_repo import EmployeeRepository
from wecargo.schemas.user import (
    EmailLogin,
    EmployeeCreate,
    EmployeeProfileUpdate,
    EmployeeRead,
    EmployeeTokenResponse,
    EmployeeUpdate,
)

logger = logging.getLogger(__name__)


class EmployeeService:
    """
    Business logic for staff accounts.

    Responsibilities:
      - staff-realm login (inactive accounts rejected)
      - self profile edits
      - admin CRUD with unique email enforcement
    """

    def __init__(self, repo: EmployeeRepository):
        self.repo = repo

    # ----- Login / self -----

    def login(self, session: Session, payload: EmailLogin) -> EmployeeTokenResponse:
        """
        Raises:
            AuthError(403): account exists but is inactive (checked first).
            AuthError(401): unknown email or wrong password.
        """
        employee = self.repo.get_by_email(session, payload.email)
        if employee is None:
            raise AuthError("Invalid email or password")

        if not employee.is_active:
            raise AuthError(
                "Account is inactive. Please contact administrator.",
                status_code=status.HTTP_403_FORBIDDEN,
            )

        if not verify_password(payload.password, employee.password_hash):
            raise AuthError("Invalid email or password")

        employee.last_login = utcnow()
        employee = self.repo.update(session, employee)
        logger.info("Employee %s logged in", employee.email)

        token, expires_in = issue_token(
            Realm.STAFF,
            employee.id,
            {"email": employee.email, "role": employee.role.value},
        )
        return EmployeeTokenResponse(
            access_token=token,
            expires_in=expires_in,
            employee=EmployeeRead.model_validate(employee),
        )

    def update_profile(
        self,
        session: Session,
        employee: Employee,
        payload: EmployeeProfileUpdate,
    ) -> Employee:
        employee.name = payload.name
        employee.phone_number = payload.phone_number
        employee.address = payload.address
        employee.updated_at = utcnow()
        return self.repo.update(session, employee)

    # ----- Admin operations -----

    def list_employees(self, session: Session, skip: int, limit: int) -> list[Employee]:
        return self.repo.list(session, skip=skip, limit=limit)

    def get_employee(self, session: Session, employee_id: uuid.UUID) -> Employee:
        """
        Raises:
            NotFoundError: if not found.
        """
        employee = self.repo.get_by_id(session, employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def create_employee(self, session: Session, payload: EmployeeCreate) -> Employee:
        if self.repo.get_by_email(session, payload.email):
            raise ConflictError("Email already registered")

        data = payload.model_dump(exclude={"password"})
        employee = Employee(**data, password_hash=hash_password(payload.password))
        employee = self.repo.create(session, employee)
        logger.info("Employee %s created (%s)", employee.email, employee.role.value)
        return employee

    def update_employee(
        self,
        session: Session,
        employee_id: uuid.UUID,
        payload: EmployeeUpdate,
    ) -> Employee:
        """
        Partial update. A changed email must stay unique; a new password
        is re-hashed.
        """
        employee = self.get_employee(session, employee_id)
        data = payload.model_dump(exclude_unset=True)

        new_email = data.get("email")
        if new_email and new_email != employee.email:
            if self.repo.get_by_email(session, new_email):
                raise ConflictError("Email already registered")

        password = data.pop("password", None)
        if password:
            employee.password_hash = hash_password(password)

        for key, value in data.items():
            # name, email, role and is_active are non-nullable
            if value is None and key in ("name", "email", "role", "is_active"):
                continue
            setattr(employee, key, value)

        employee.updated_at = utcnow()
        return self.repo.update(session, employee)

    def delete_employee(self, session: Session, employee_id: uuid.UUID) -> None:
        employee = self.get_employee(session, employee_id)
        email = employee.email
        self.repo.delete(session, employee)
        logger.info("Employee %s deleted", email)
