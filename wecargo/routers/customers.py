# wecargo/routers/customers.py
from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from wecargo.core.auth import Realm, clear_auth_cookie, require_customer, set_auth_cookie
from wecargo.database import get_session
from wecargo.models.user import Customer
from wecargo.repositories.customer_repo import CustomerRepository
from wecargo.repositories.delivery_repo import DeliveryRepository
from wecargo.repositories.order_repo import OrderRepository
from wecargo.repositories.status_history_repo import StatusHistoryRepository
from wecargo.schemas.order import OrderWithHistoryRead
from wecargo.schemas.user import (
    CustomerRead,
    CustomerSignIn,
    CustomerSignUp,
    CustomerTokenResponse,
    PasswordReset,
    PasswordResetRequest,
    PasswordResetResponse,
)
from wecargo.services.customer_service import CustomerService
from wecargo.services.order_service import OrderService

router = APIRouter(prefix="/customers", tags=["Customers"])

repo = CustomerRepository()
order_service = OrderService(OrderRepository(), StatusHistoryRepository(), DeliveryRepository())
service = CustomerService(repo, order_service)


# -------- Auth --------


@router.post(
    "/auth/sign-up",
    response_model=CustomerTokenResponse,
    status_code=status.HTTP_201_CREATED,
)
def sign_up(
    payload: CustomerSignUp,
    response: Response,
    session: Session = Depends(get_session),
):
    """
    Register with phone number + password. Logs the customer in.
    """
    result = service.sign_up(session, payload)
    set_auth_cookie(response, Realm.CUSTOMER, result.access_token)
    return result


@router.post("/auth/sign-in", response_model=CustomerTokenResponse)
def sign_in(
    payload: CustomerSignIn,
    response: Response,
    session: Session = Depends(get_session),
):
    """
    Token is returned in the body and set as the `auth_token` cookie.
    """
    result = service.sign_in(session, payload)
    set_auth_cookie(response, Realm.CUSTOMER, result.access_token)
    return result


@router.post("/auth/logout")
def logout(response: Response):
    clear_auth_cookie(response, Realm.CUSTOMER)
    return {"success": True}


@router.post("/auth/request-reset", response_model=PasswordResetResponse)
def request_password_reset(
    payload: PasswordResetRequest,
    session: Session = Depends(get_session),
):
    """
    Send a 6-digit reset code by SMS (email fallback).

    Always answers success so phone numbers cannot be enumerated.
    """
    return service.request_reset(session, payload.phone_number)


@router.post("/auth/reset-password", response_model=PasswordResetResponse)
def reset_password(
    payload: PasswordReset,
    session: Session = Depends(get_session),
):
    return service.reset_password(session, payload)


# -------- Self --------


@router.get("/me", response_model=CustomerRead)
def read_me(current_customer: Customer = Depends(require_customer)):
    """
    Return the authenticated customer's profile.

    Auth:
      - Customer token (bearer header or `auth_token` cookie).
    """
    return current_customer


@router.get("/me/orders", response_model=list[OrderWithHistoryRead])
def list_my_orders(
    session: Session = Depends(get_session),
    current_customer: Customer = Depends(require_customer),
):
    """
    Orders registered under the customer's phone number, newest first.
    """
    return service.my_orders(session, current_customer)
