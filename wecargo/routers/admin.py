# wecargo/routers/admin.py
from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from wecargo.core.auth import Realm, clear_auth_cookie, require_admin, set_auth_cookie
from wecargo.database import get_session
from wecargo.models.user import Admin
from wecargo.repositories.admin_repo import AdminRepository
from wecargo.repositories.stats_repo import StatsRepository
from wecargo.schemas.stats import AdminDashboardStats
from wecargo.schemas.user import (
    AdminCreate,
    AdminPasswordChange,
    AdminRead,
    AdminTokenResponse,
    EmailLogin,
)
from wecargo.services.admin_service import AdminService
from wecargo.services.stats_service import StatsService

router = APIRouter(prefix="/admin", tags=["Admin"])

service = AdminService(AdminRepository())
stats_service = StatsService(StatsRepository())


# -------- Auth --------


@router.post("/auth/login", response_model=AdminTokenResponse)
def login(
    payload: EmailLogin,
    response: Response,
    session: Session = Depends(get_session),
):
    result = service.login(session, payload)
    set_auth_cookie(response, Realm.ADMIN, result.access_token)
    return result


@router.post("/auth/logout")
def logout(response: Response):
    clear_auth_cookie(response, Realm.ADMIN)
    return {"success": True}


@router.get("/auth/verify", response_model=AdminRead)
def verify(current_admin: Admin = Depends(require_admin)):
    """
    Check that the admin token (header or `admin_token` cookie) is still valid.
    """
    return current_admin


@router.post("/auth/change-password", response_model=AdminRead)
def change_password(
    payload: AdminPasswordChange,
    session: Session = Depends(get_session),
    current_admin: Admin = Depends(require_admin),
):
    return service.change_password(session, current_admin, payload)


@router.post(
    "/auth/bootstrap",
    response_model=AdminRead,
    status_code=status.HTTP_201_CREATED,
)
def bootstrap_admin(
    payload: AdminCreate,
    session: Session = Depends(get_session),
):
    """
    Create the first admin account. Refused (409) once any admin exists.
    """
    return service.bootstrap(session, payload)


@router.post(
    "/admins",
    response_model=AdminRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_admin(
    payload: AdminCreate,
    session: Session = Depends(get_session),
):
    return service.create_admin(session, payload)


# -------- Dashboard --------


@router.get(
    "/stats",
    response_model=AdminDashboardStats,
    dependencies=[Depends(require_admin)],
)
def get_admin_dashboard_stats(
    year: int | None = None,
    session: Session = Depends(get_session),
):
    """
    Aggregated statistics for the admin dashboard.

    Query params (optional):
      - year: integer, defaults to current year (monthly order counts)
    """
    return stats_service.get_admin_dashboard_stats(
        session=session,
        year=year,
    )
