# wecargo/models/user.py
"""
Principal tables. The three realms are deliberately disjoint: a phone number
registered as a customer has nothing to do with an employee or admin account.
"""
import uuid
from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from wecargo.core.clock import utcnow
from wecargo.models.enums import EmployeeRole


class Customer(SQLModel, table=True):
    """
    Customer account, identified by phone number.

    Orders are linked to customers only through `Order.phone_number`.
    """

    __tablename__ = "customers"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    phone_number: str = Field(
        unique=True,
        index=True,
        description="Login identifier",
    )

    name: str | None = Field(default=None, max_length=100)
    email: str | None = Field(
        default=None,
        description="Optional; used as the password-reset fallback channel",
    )

    password_hash: str

    # Password reset (6-digit code)
    reset_code: str | None = Field(default=None)
    reset_code_expires_at: datetime | None = Field(default=None, sa_type=DateTime)

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime,
        description="Creation timestamp (UTC)",
    )


class Employee(SQLModel, table=True):
    """
    Warehouse / delivery staff.

    Inactive employees cannot log in regardless of password.
    """

    __tablename__ = "employees"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(max_length=100)
    email: str = Field(unique=True, index=True)
    password_hash: str

    phone_number: str | None = Field(default=None)
    address: str | None = Field(default=None)

    role: EmployeeRole = Field(default=EmployeeRole.DELIVERY, index=True)
    is_active: bool = Field(default=True)

    join_date: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    last_login: datetime | None = Field(default=None, sa_type=DateTime)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class Admin(SQLModel, table=True):
    __tablename__ = "admins"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    email: str = Field(unique=True, index=True)
    password_hash: str

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
