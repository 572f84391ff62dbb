# wecargo/repositories/customer_repo.py
import uuid

from sqlmodel import Session, select

from wecargo.models.user import Customer


class CustomerRepository:
    """
    Data access layer for Customer.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_id(self, session: Session, customer_id: uuid.UUID) -> Customer | None:
        """Return a Customer by primary key, or None if not found."""
        return session.get(Customer, customer_id)

    def get_by_phone(self, session: Session, phone_number: str) -> Customer | None:
        """Return a Customer by unique phone number, or None if not found."""
        stmt = select(Customer).where(Customer.phone_number == phone_number)
        return session.exec(stmt).first()

    def create(self, session: Session, customer: Customer) -> Customer:
        """Insert a new Customer and return the persisted row."""
        session.add(customer)
        session.commit()
        session.refresh(customer)
        return customer

    def update(self, session: Session, customer: Customer) -> Customer:
        """Persist changes to an existing Customer."""
        session.add(customer)
        session.commit()
        session.refresh(customer)
        return customer
