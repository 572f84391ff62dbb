# wecargo/schemas/user.py
import uuid
from datetime import datetime

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from wecargo.models.enums import EmployeeRole


def _required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("field cannot be empty")
    return v


def _optional(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    return v or None


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------


class CustomerSignUp(SQLModel):
    """
    Customer registration. The phone number is the login and also the key
    that links a customer to their parcels.
    """

    model_config = ConfigDict(extra="forbid")

    phone_number: str = Field(max_length=32)
    password: str = Field(min_length=6, max_length=128)
    name: str | None = Field(default=None, max_length=100)
    email: EmailStr | None = None

    @field_validator("phone_number")
    @classmethod
    def phone_not_empty(cls, v: str) -> str:
        return _required(v)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        return _optional(v)


class CustomerSignIn(SQLModel):
    model_config = ConfigDict(extra="forbid")

    phone_number: str
    password: str

    @field_validator("phone_number", "password")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _required(v)


class CustomerRead(SQLModel):
    """Response schema returned to clients (never exposes hashes/codes)."""

    id: uuid.UUID
    phone_number: str
    name: str | None
    email: str | None
    created_at: datetime


class PasswordResetRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    phone_number: str

    @field_validator("phone_number")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _required(v)


class PasswordReset(SQLModel):
    model_config = ConfigDict(extra="forbid")

    phone_number: str
    reset_code: str
    new_password: str = Field(min_length=6, max_length=128)

    @field_validator("phone_number", "reset_code")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _required(v)


class PasswordResetResponse(SQLModel):
    success: bool
    message: str
    sent_via_sms: bool = False
    sent_via_email: bool = False


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------


class EmployeeCreate(SQLModel):
    """
    Admin payload for creating a staff account.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: EmployeeRole
    phone_number: str | None = None
    address: str | None = None
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return _required(v)

    @field_validator("phone_number", "address")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        return _optional(v)


class EmployeeUpdate(SQLModel):
    """
    Admin partial update; a new password is re-hashed.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=6, max_length=128)
    role: EmployeeRole | None = None
    phone_number: str | None = None
    address: str | None = None
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _required(v)


class EmployeeProfileUpdate(SQLModel):
    """
    Self-service profile edit for the logged-in employee.
    Email, role and activation are admin-only.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    phone_number: str | None = None
    address: str | None = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return _required(v)

    @field_validator("phone_number", "address")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        return _optional(v)


class EmployeeRead(SQLModel):
    id: uuid.UUID
    name: str
    email: str
    phone_number: str | None
    address: str | None
    role: EmployeeRole
    is_active: bool
    join_date: datetime
    last_login: datetime | None
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Admins & shared credential payloads
# ---------------------------------------------------------------------------


class EmailLogin(SQLModel):
    """Email/password login used by both staff and admin realms."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("password cannot be empty")
        return v


class AdminCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=8, max_length=128)


class AdminPasswordChange(SQLModel):
    model_config = ConfigDict(extra="forbid")

    current_password: str
    new_password: str = Field(min_length=8, max_length=128)


class AdminRead(SQLModel):
    id: uuid.UUID
    email: str
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


class TokenResponse(SQLModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class CustomerTokenResponse(TokenResponse):
    customer: CustomerRead


class EmployeeTokenResponse(TokenResponse):
    employee: EmployeeRead


class AdminTokenResponse(TokenResponse):
    admin: AdminRead
