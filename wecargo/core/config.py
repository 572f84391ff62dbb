# wecargo/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Recommended env vars (.env):
      - DATABASE_URL (defaults to a local SQLite file)
      - CUSTOMER_JWT_SECRET, EMPLOYEE_JWT_SECRET, ADMIN_JWT_SECRET

    The three secrets sign three independent token realms. They MUST differ
    in production so that a customer token never verifies as staff/admin.

    SMTP settings for notifications are read by `core.email_client`.
    """

    PROJECT_NAME: str = "WeCargo Tracking API"
    API_V1_STR: str = "/api/v1"

    # Persistence
    DATABASE_URL: str = "sqlite:///./wecargo.db"
    DATABASE_ECHO: bool = False

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Token realms (HS256)
    JWT_ALG: str = "HS256"
    CUSTOMER_JWT_SECRET: str = "customer-secret-key-for-development"
    EMPLOYEE_JWT_SECRET: str = "employee-secret-key-for-development"
    ADMIN_JWT_SECRET: str = "admin-secret-key-for-development"

    # customer 7d, staff 1d, admin 24h
    CUSTOMER_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    EMPLOYEE_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    ADMIN_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    COOKIE_SECURE: bool = False

    # Password reset
    RESET_CODE_TTL_MINUTES: int = 60
    SMS_CARRIER: str | None = None

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
