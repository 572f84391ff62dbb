# wecargo/services/customer_service.py
import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from wecargo.core import notifications
from wecargo.core.auth import Realm, issue_token
from wecargo.core.clock import utcnow
from wecargo.core.config import get_settings
from wecargo.core.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from wecargo.core.security import generate_reset_code, hash_password, verify_password
from wecargo.models.user import Customer
from wecargo.repositories.customer_repo import CustomerRepository
from wecargo.schemas.order import OrderWithHistoryRead
from wecargo.schemas.user import (
    CustomerRead,
    CustomerSignIn,
    CustomerSignUp,
    CustomerTokenResponse,
    PasswordReset,
    PasswordResetResponse,
)
from wecargo.services.order_service import OrderService

logger = logging.getLogger(__name__)

RESET_REQUEST_MESSAGE = "If the phone number is registered, a reset code has been sent"


class CustomerService:
    """
    Business logic for customer accounts.

    Responsibilities:
      - sign-up / sign-in in the customer token realm
      - "my orders" through the shared phone-number lookup
      - password reset with a short-lived numeric code
    """

    def __init__(self, repo: CustomerRepository, order_service: OrderService):
        self.repo = repo
        self.order_service = order_service

    # ----- Registration / login -----

    def sign_up(self, session: Session, payload: CustomerSignUp) -> CustomerTokenResponse:
        """
        Raises:
            ConflictError: if the phone number is already registered.
        """
        if self.repo.get_by_phone(session, payload.phone_number):
            raise ConflictError("Phone number already registered")

        customer = Customer(
            phone_number=payload.phone_number,
            name=payload.name,
            email=payload.email,
            password_hash=hash_password(payload.password),
        )
        try:
            customer = self.repo.create(session, customer)
        except IntegrityError as exc:
            session.rollback()
            raise ConflictError("Phone number already registered") from exc

        logger.info("Customer %s signed up", customer.phone_number)
        return self._token_response(customer)

    def sign_in(self, session: Session, payload: CustomerSignIn) -> CustomerTokenResponse:
        customer = self.repo.get_by_phone(session, payload.phone_number)
        if customer is None or not verify_password(payload.password, customer.password_hash):
            raise AuthError("Invalid phone number or password")
        return self._token_response(customer)

    # ----- Self -----

    def my_orders(self, session: Session, customer: Customer) -> list[OrderWithHistoryRead]:
        """Orders registered under the customer's phone number, newest first."""
        return self.order_service.list_by_phone(session, customer.phone_number)

    # ----- Password reset -----

    def request_reset(self, session: Session, phone_number: str) -> PasswordResetResponse:
        """
        Issue a reset code and send it best-effort.

        The answer is the same whether or not the phone number exists.
        """
        customer = self.repo.get_by_phone(session, phone_number.strip())
        if customer is None:
            logger.info("Reset requested for unknown phone %s", phone_number)
            return PasswordResetResponse(success=True, message=RESET_REQUEST_MESSAGE)

        ttl = get_settings().RESET_CODE_TTL_MINUTES
        code = generate_reset_code()
        customer.reset_code = code
        customer.reset_code_expires_at = utcnow() + timedelta(minutes=ttl)
        self.repo.update(session, customer)

        sms_sent, email_sent = notifications.deliver_reset_code(
            customer.phone_number, customer.email, code
        )
        if not (sms_sent or email_sent):
            logger.warning("Reset code for %s could not be delivered", customer.phone_number)

        return PasswordResetResponse(
            success=True,
            message=RESET_REQUEST_MESSAGE,
            sent_via_sms=sms_sent,
            sent_via_email=email_sent,
        )

    def reset_password(self, session: Session, payload: PasswordReset) -> PasswordResetResponse:
        """
        Raises:
            NotFoundError: unknown phone number.
            ValidationError: wrong or expired code.
        """
        customer = self.repo.get_by_phone(session, payload.phone_number)
        if customer is None:
            raise NotFoundError("Customer not found")

        if not customer.reset_code or customer.reset_code != payload.reset_code:
            raise ValidationError("Invalid reset code")
        if customer.reset_code_expires_at is None or customer.reset_code_expires_at < utcnow():
            raise ValidationError("Reset code has expired")

        customer.password_hash = hash_password(payload.new_password)
        customer.reset_code = None
        customer.reset_code_expires_at = None
        self.repo.update(session, customer)

        logger.info("Password reset for customer %s", customer.phone_number)
        return PasswordResetResponse(success=True, message="Password has been reset")

    # ----- Helpers -----

    @staticmethod
    def _token_response(customer: Customer) -> CustomerTokenResponse:
        token, expires_in = issue_token(
            Realm.CUSTOMER,
            customer.id,
            {"phone_number": customer.phone_number},
        )
        return CustomerTokenResponse(
            access_token=token,
            expires_in=expires_in,
            customer=CustomerRead.model_validate(customer),
        )
