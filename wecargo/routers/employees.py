# wecargo/routers/employees.py
import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from wecargo.core.auth import (
    Realm,
    clear_auth_cookie,
    require_admin,
    require_employee,
    set_auth_cookie,
)
from wecargo.database import get_session
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
from wecargo.services.employee_service import EmployeeService

router = APIRouter(prefix="/employee", tags=["Employees"])
admin_router = APIRouter(
    prefix="/admin/employees",
    tags=["Admin Employees"],
    dependencies=[Depends(require_admin)],
)

repo = EmployeeRepository()
service = EmployeeService(repo)


# -------- Staff self-service --------


@router.post("/auth/login", response_model=EmployeeTokenResponse)
def login(
    payload: EmailLogin,
    response: Response,
    session: Session = Depends(get_session),
):
    """
    Staff login. Inactive accounts get 403 even with the right password.
    """
    result = service.login(session, payload)
    set_auth_cookie(response, Realm.STAFF, result.access_token)
    return result


@router.post("/auth/logout")
def logout(response: Response):
    clear_auth_cookie(response, Realm.STAFF)
    return {"success": True}


@router.get("/me", response_model=EmployeeRead)
def read_me(current_employee: Employee = Depends(require_employee)):
    return current_employee


@router.put("/profile", response_model=EmployeeRead)
def update_profile(
    payload: EmployeeProfileUpdate,
    session: Session = Depends(get_session),
    current_employee: Employee = Depends(require_employee),
):
    """
    Edit own name / phone / address. Role, email and activation are
    managed by admins.
    """
    return service.update_profile(session, current_employee, payload)


# -------- Admin endpoints --------


@admin_router.get("", response_model=list[EmployeeRead])
def list_employees(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    """
    List staff accounts (admin only), newest first.
    """
    return service.list_employees(session, skip, limit)


@admin_router.post(
    "",
    response_model=EmployeeRead,
    status_code=status.HTTP_201_CREATED,
)
def create_employee(
    payload: EmployeeCreate,
    session: Session = Depends(get_session),
):
    return service.create_employee(session, payload)


@admin_router.get("/{employee_id}", response_model=EmployeeRead)
def get_employee(
    employee_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_employee(session, employee_id)


@admin_router.patch("/{employee_id}", response_model=EmployeeRead)
def update_employee(
    employee_id: uuid.UUID,
    payload: EmployeeUpdate,
    session: Session = Depends(get_session),
):
    """
    Partial update. Deactivating (`is_active=false`) locks the account
    out immediately, including existing tokens.
    """
    return service.update_employee(session, employee_id, payload)


@admin_router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(
    employee_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    service.delete_employee(session, employee_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
