# wecargo/core/auth.py
"""
Token issuing/verification and FastAPI guards for the three principal realms.

Realms are independent: each has its own secret, expiry and cookie, and the
`realm` claim is checked on verification, so a customer token can never pass
as a staff or admin token.

    realm     secret                 expiry   cookie
    customer  CUSTOMER_JWT_SECRET    7 days   auth_token
    staff     EMPLOYEE_JWT_SECRET    1 day    employee_token
    admin     ADMIN_JWT_SECRET       24 hours admin_token

Tokens are accepted from `Authorization: Bearer <jwt>` or the realm cookie.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from fastapi import Depends, Request, Response, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, ExpiredSignatureError, JWTError
from sqlmodel import Session

from wecargo.core.config import get_settings
from wecargo.core.errors import AuthError
from wecargo.database import get_session
from wecargo.models.enums import EmployeeRole
from wecargo.models.user import Admin, Customer, Employee

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so cookie tokens can be tried next.
bearer_scheme = HTTPBearer(auto_error=False)


class Realm(str, Enum):
    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"


@dataclass(frozen=True)
class RealmConfig:
    secret: str
    expire_minutes: int
    cookie_name: str


def realm_config(realm: Realm) -> RealmConfig:
    settings = get_settings()
    if realm == Realm.CUSTOMER:
        return RealmConfig(
            settings.CUSTOMER_JWT_SECRET,
            settings.CUSTOMER_TOKEN_EXPIRE_MINUTES,
            "auth_token",
        )
    if realm == Realm.STAFF:
        return RealmConfig(
            settings.EMPLOYEE_JWT_SECRET,
            settings.EMPLOYEE_TOKEN_EXPIRE_MINUTES,
            "employee_token",
        )
    return RealmConfig(
        settings.ADMIN_JWT_SECRET,
        settings.ADMIN_TOKEN_EXPIRE_MINUTES,
        "admin_token",
    )


def issue_token(
    realm: Realm,
    subject: uuid.UUID | str,
    claims: dict[str, Any] | None = None,
) -> tuple[str, int]:
    """
    Sign a JWT for `subject` in `realm`.

    Returns:
        (token, expires_in_seconds)
    """
    cfg = realm_config(realm)
    now = datetime.now(timezone.utc)
    expires_in = cfg.expire_minutes * 60

    payload: dict[str, Any] = dict(claims or {})
    payload.update(
        {
            "sub": str(subject),
            "realm": realm.value,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
        }
    )
    token = jwt.encode(payload, cfg.secret, algorithm=get_settings().JWT_ALG)
    return token, expires_in


def verify_token(realm: Realm, token: str) -> dict[str, Any]:
    """
    Decode and verify a token of the given realm.

    Verification:
      - signature (HS256 with the realm secret)
      - expiration time (exp)
      - realm claim matches

    Raises:
        AuthError(401): if token is invalid, expired or from another realm.
    """
    cfg = realm_config(realm)
    try:
        payload = jwt.decode(
            token,
            cfg.secret,
            algorithms=[get_settings().JWT_ALG],
        )
    except ExpiredSignatureError:
        raise AuthError("Token expired")
    except JWTError:
        raise AuthError("Invalid token")

    if payload.get("realm") != realm.value or not payload.get("sub"):
        raise AuthError("Invalid token")
    return payload


def subject_id(payload: dict[str, Any]) -> uuid.UUID:
    try:
        return uuid.UUID(payload["sub"])
    except (KeyError, ValueError):
        raise AuthError("Invalid sub in token")


def set_auth_cookie(response: Response, realm: Realm, token: str) -> None:
    """HttpOnly realm cookie, same lifetime as the token."""
    cfg = realm_config(realm)
    response.set_cookie(
        key=cfg.cookie_name,
        value=token,
        max_age=cfg.expire_minutes * 60,
        httponly=True,
        secure=get_settings().COOKIE_SECURE,
        samesite="lax",
    )


def clear_auth_cookie(response: Response, realm: Realm) -> None:
    response.delete_cookie(key=realm_config(realm).cookie_name)


def _token_from_request(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
    realm: Realm,
) -> str | None:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(realm_config(realm).cookie_name)


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------


def require_customer(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> Customer:
    """
    Resolve the authenticated customer.

    Raises:
        AuthError(401): missing/invalid token or unknown customer.
    """
    token = _token_from_request(request, credentials, Realm.CUSTOMER)
    if not token:
        raise AuthError("Authentication required")

    payload = verify_token(Realm.CUSTOMER, token)
    customer = session.get(Customer, subject_id(payload))
    if customer is None:
        raise AuthError("Customer not found")
    return customer


def _load_active_employee(session: Session, payload: dict[str, Any]) -> Employee:
    employee = session.get(Employee, subject_id(payload))
    if employee is None:
        raise AuthError("Employee not found")
    # Deactivation takes effect immediately, even for unexpired tokens
    if not employee.is_active:
        raise AuthError(
            "Account is inactive. Please contact administrator.",
            status_code=status.HTTP_403_FORBIDDEN,
        )
    return employee


def require_employee(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> Employee:
    """
    Resolve the authenticated, active staff member (any role).
    """
    token = _token_from_request(request, credentials, Realm.STAFF)
    if not token:
        raise AuthError("Authentication required")
    return _load_active_employee(session, verify_token(Realm.STAFF, token))


def require_manager(employee: Employee = Depends(require_employee)) -> Employee:
    """
    Enforce MANAGER role within the staff realm.

    Raises:
        AuthError(403): if the employee is delivery staff.
    """
    if employee.role != EmployeeRole.MANAGER:
        raise AuthError(
            "Manager access required",
            status_code=status.HTTP_403_FORBIDDEN,
        )
    return employee


def require_admin(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> Admin:
    """
    Resolve the authenticated admin.
    """
    token = _token_from_request(request, credentials, Realm.ADMIN)
    if not token:
        raise AuthError("Authentication required")

    payload = verify_token(Realm.ADMIN, token)
    admin = session.get(Admin, subject_id(payload))
    if admin is None:
        raise AuthError("Admin not found")
    return admin


@dataclass
class StaffPrincipal:
    """Either an admin or an active employee acting on orders."""

    realm: Realm
    id: uuid.UUID

    @property
    def employee_id(self) -> uuid.UUID | None:
        return self.id if self.realm == Realm.STAFF else None


def require_staff_or_admin(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> StaffPrincipal:
    """
    Accept an admin token or an active employee token.

    A bearer token is tried against the admin realm first, then staff.
    Without a header, the admin cookie is tried, then the employee cookie.
    """
    candidates: list[tuple[Realm, str]] = []
    if credentials is not None and credentials.credentials:
        candidates = [
            (Realm.ADMIN, credentials.credentials),
            (Realm.STAFF, credentials.credentials),
        ]
    else:
        for realm in (Realm.ADMIN, Realm.STAFF):
            cookie = request.cookies.get(realm_config(realm).cookie_name)
            if cookie:
                candidates.append((realm, cookie))

    if not candidates:
        raise AuthError("Authentication required")

    last_error = AuthError("Invalid token")
    for realm, token in candidates:
        try:
            payload = verify_token(realm, token)
        except AuthError as exc:
            last_error = exc
            continue

        if realm == Realm.ADMIN:
            admin = session.get(Admin, subject_id(payload))
            if admin is None:
                raise AuthError("Admin not found")
            return StaffPrincipal(Realm.ADMIN, admin.id)

        employee = _load_active_employee(session, payload)
        return StaffPrincipal(Realm.STAFF, employee.id)

    raise last_error
