# wecargo/models/types.py
from sqlalchemy import String
from sqlalchemy.types import TypeDecorator

from wecargo.models.enums import OrderStatus, normalize_status


class OrderStatusType(TypeDecorator):
    """
    Order status column stored as plain text.

    Reads go through `normalize_status`, so legacy "PENDING" rows surface as
    OrderStatus.IN_WAREHOUSE everywhere. Writes always store canonical values.

    To match raw legacy values in a WHERE clause, compare against
    `type_coerce(column, String)` instead of the column itself.
    """

    impl = String(32)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return normalize_status(value).value

    def process_result_value(self, value, dialect) -> OrderStatus | None:
        if value is None:
            return None
        return normalize_status(value)
