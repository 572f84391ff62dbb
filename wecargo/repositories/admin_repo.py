# wecargo/repositories/admin_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from wecargo.models.user import Admin


class AdminRepository:
    def get_by_id(self, session: Session, admin_id: uuid.UUID) -> Admin | None:
        return session.get(Admin, admin_id)

    def get_by_email(self, session: Session, email: str) -> Admin | None:
        stmt = select(Admin).where(Admin.email == email)
        return session.exec(stmt).first()

    def count(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Admin)
        return int(session.exec(stmt).one() or 0)

    def create(self, session: Session, admin: Admin) -> Admin:
        session.add(admin)
        session.commit()
        session.refresh(admin)
        return admin

    def update(self, session: Session, admin: Admin) -> Admin:
        session.add(admin)
        session.commit()
        session.refresh(admin)
        return admin
