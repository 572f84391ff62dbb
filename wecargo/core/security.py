# wecargo/core/security.py
"""
Password hashing shared by all three principal realms.

sha256_crypt via passlib: salted, no native bcrypt build required.
"""
import secrets

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["sha256_crypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Return a salted hash for storage in `password_hash` columns."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Check a plain password against a stored hash.

    Returns False (never raises) for empty or unrecognized hashes.
    """
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def generate_reset_code(length: int = 6) -> str:
    """Numeric one-time code, e.g. '042917'."""
    return "".join(secrets.choice("0123456789") for _ in range(length))
