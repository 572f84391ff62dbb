# wecargo/core/notifications.py
"""
Best-effort customer notifications (password-reset codes).

SMS goes out through carrier email-to-SMS gateways
(<digits>@sms.<carrier>.mn) using the SMTP client; when no gateway accepts
the message the code is emailed instead, if the customer has an email.

Nothing here raises: a failed send is logged and reported as False so the
calling request still succeeds.
"""
import logging
import re
import smtplib

from wecargo.core import email_client
from wecargo.core.config import get_settings

logger = logging.getLogger(__name__)

# Mongolian carriers and their email-to-SMS gateway domains
SMS_GATEWAYS: dict[str, str] = {
    "mobicom": "sms.mobicom.mn",
    "skytel": "sms.skytel.mn",
    "gmobile": "sms.gmobile.mn",
    "unitel": "sms.unitel.mn",
}

_SEND_ERRORS = (RuntimeError, smtplib.SMTPException, OSError)


def _carrier_order(preferred: str | None) -> list[str]:
    carriers = list(SMS_GATEWAYS)
    if preferred and preferred in SMS_GATEWAYS:
        carriers.remove(preferred)
        carriers.insert(0, preferred)
    return carriers


def send_sms(phone_number: str, message: str) -> bool:
    """
    Try each carrier gateway (configured SMS_CARRIER first) until one
    accepts the message.
    """
    if not email_client.is_configured():
        logger.info("SMTP not configured, skipping email-to-SMS gateway")
        return False

    digits = re.sub(r"\D", "", phone_number)
    if not digits:
        return False

    for carrier in _carrier_order(get_settings().SMS_CARRIER):
        address = f"{digits}@{SMS_GATEWAYS[carrier]}"
        try:
            # Subject is ignored by SMS gateways
            email_client.send_email(to_email=address, subject="", text_body=message)
        except _SEND_ERRORS as exc:
            logger.warning("SMS via %s failed for %s: %s", carrier, phone_number, exc)
            continue
        logger.info("SMS sent via %s to %s", carrier, phone_number)
        return True

    return False


def _expiry_text() -> str:
    minutes = get_settings().RESET_CODE_TTL_MINUTES
    if minutes % 60 == 0:
        hours = minutes // 60
        return f"{hours} hour" if hours == 1 else f"{hours} hours"
    return f"{minutes} minutes"


def send_reset_code_email(to_email: str, code: str) -> bool:
    expires = _expiry_text()
    try:
        email_client.send_email(
            to_email=to_email,
            subject="[WeCargo] Password reset code",
            text_body=(
                f"Your WeCargo password reset code is {code}.\n"
                f"It expires in {expires}. If you did not request it, ignore this email."
            ),
            html_body=(
                "<p>Your WeCargo password reset code is "
                f"<b>{code}</b>.</p><p>It expires in {expires}.</p>"
            ),
        )
    except _SEND_ERRORS as exc:
        logger.warning("Reset code email to %s failed: %s", to_email, exc)
        return False
    return True


def deliver_reset_code(
    phone_number: str,
    email: str | None,
    code: str,
) -> tuple[bool, bool]:
    """
    Send a reset code by SMS, falling back to email.

    Returns:
        (sent_via_sms, sent_via_email)
    """
    sms_sent = send_sms(phone_number, f"WeCargo: your password reset code is {code}")
    email_sent = False
    if not sms_sent and email:
        email_sent = send_reset_code_email(email, code)
    return sms_sent, email_sent
