# wecargo/core/errors.py
"""
Application error taxonomy.

Every error is an HTTPException carrying a stable `kind` string, so services
can raise them directly and FastAPI maps them to responses. The handlers in
`wecargo.main` render them as:

    {"kind": "<kind>", "detail": "<human readable message>"}

Nothing here is retried; callers decide what to do.
"""
from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for all errors surfaced by services."""

    kind: str = "error"
    default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        detail: Any = None,
        status_code: int | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(
            status_code=status_code or self.default_status,
            detail=detail if detail is not None else self.kind,
            headers=headers,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "detail": self.detail}


class NotFoundError(AppError):
    """Entity id does not resolve."""

    kind = "not_found"
    default_status = status.HTTP_404_NOT_FOUND


class ValidationError(AppError):
    """Missing or malformed required field."""

    kind = "validation"
    default_status = status.HTTP_400_BAD_REQUEST


class EligibilityError(AppError):
    """Operation requested while the entity is in a disallowed state."""

    kind = "eligibility"
    default_status = status.HTTP_409_CONFLICT


class ConflictError(AppError):
    """Duplicate unique key (package id, phone number, email)."""

    kind = "conflict"
    default_status = status.HTTP_409_CONFLICT


class AuthError(AppError):
    """
    Missing/invalid/expired token, bad credentials, inactive account.

    Use status_code=403 for "authenticated but not allowed".
    """

    kind = "auth"
    default_status = status.HTTP_401_UNAUTHORIZED


class PersistenceError(AppError):
    """Generic backing-store failure."""

    kind = "persistence"
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
