# wecargo/repositories/employee_repo.py
import uuid

from sqlmodel import Session, select

from wecargo.models.user import Employee


class EmployeeRepository:
    """
    Data access layer for Employee (staff accounts).
    """

    def get_by_id(self, session: Session, employee_id: uuid.UUID) -> Employee | None:
        return session.get(Employee, employee_id)

    def get_by_email(self, session: Session, email: str) -> Employee | None:
        stmt = select(Employee).where(Employee.email == email)
        return session.exec(stmt).first()

    def list(self, session: Session, skip: int = 0, limit: int = 50) -> list[Employee]:
        """Paginated listing, newest accounts first."""
        stmt = (
            select(Employee)
            .order_by(Employee.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def create(self, session: Session, employee: Employee) -> Employee:
        session.add(employee)
        session.commit()
        session.refresh(employee)
        return employee

    def update(self, session: Session, employee: Employee) -> Employee:
        session.add(employee)
        session.commit()
        session.refresh(employee)
        return employee

    def delete(self, session: Session, employee: Employee) -> None:
        session.delete(employee)
        session.commit()
