# wecargo/services/admin_service.py
import logging

from sqlmodel import Session

from wecargo.core.auth import Realm, issue_token
from wecargo.core.clock import utcnow
from wecargo.core.errors import AuthError, ConflictError
from wecargo.core.security import hash_password, verify_password
from wecargo.models.user import Admin
from wecargo.repositories.admin_repo import AdminRepository
from wecargo.schemas.user import (
    AdminCreate,
    AdminPasswordChange,
    AdminRead,
    AdminTokenResponse,
    EmailLogin,
)

logger = logging.getLogger(__name__)


class AdminService:
    """
    Admin realm accounts: login, password change, creation.

    The very first admin is created through `bootstrap`, which only works
    while the admins table is empty; every later admin is created by an
    authenticated admin.
    """

    def __init__(self, repo: AdminRepository):
        self.repo = repo

    def login(self, session: Session, payload: EmailLogin) -> AdminTokenResponse:
        admin = self.repo.get_by_email(session, payload.email)
        if admin is None or not verify_password(payload.password, admin.password_hash):
            raise AuthError("Invalid email or password")

        logger.info("Admin %s logged in", admin.email)
        token, expires_in = issue_token(Realm.ADMIN, admin.id, {"email": admin.email})
        return AdminTokenResponse(
            access_token=token,
            expires_in=expires_in,
            admin=AdminRead.model_validate(admin),
        )

    def change_password(
        self,
        session: Session,
        admin: Admin,
        payload: AdminPasswordChange,
    ) -> Admin:
        """
        Raises:
            AuthError: if the current password does not match.
        """
        if not verify_password(payload.current_password, admin.password_hash):
            raise AuthError("Current password is incorrect")

        admin.password_hash = hash_password(payload.new_password)
        admin.updated_at = utcnow()
        return self.repo.update(session, admin)

    def create_admin(self, session: Session, payload: AdminCreate) -> Admin:
        if self.repo.get_by_email(session, payload.email):
            raise ConflictError("Email already registered")

        admin = Admin(email=payload.email, password_hash=hash_password(payload.password))
        admin = self.repo.create(session, admin)
        logger.info("Admin %s created", admin.email)
        return admin

    def bootstrap(self, session: Session, payload: AdminCreate) -> Admin:
        """
        Create the first admin account.

        Raises:
            ConflictError: if any admin already exists.
        """
        if self.repo.count(session) > 0:
            raise ConflictError("An admin account already exists")
        return self.create_admin(session, payload)
