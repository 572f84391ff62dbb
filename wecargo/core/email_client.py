# wecargo/core/email_client.py
"""
SMTP client for outbound notifications.

Configuration comes from the environment (.env), e.g. Gmail with an App
Password over SSL:

    SMTP_HOST=smtp.gmail.com
    SMTP_PORT=465
    SMTP_USERNAME=notifications@wecargo.mn
    SMTP_PASSWORD=<app password>
    SMTP_FROM_EMAIL=notifications@wecargo.mn
    SMTP_FROM_NAME=WeCargo
    SMTP_USE_TLS=false
    SMTP_USE_SSL=true

Both plain email and carrier email-to-SMS gateways go through send_email();
see `core.notifications`.
"""
import os
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage


def _get_bool_env(name: str, default: bool = False) -> bool:
    """
    Read a boolean env var; "1", "true", "yes", "y" (any case) are truthy.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y"}


@dataclass(frozen=True)
class SmtpConfig:
    host: str | None
    port: int
    username: str | None
    password: str | None
    from_email: str
    from_name: str
    use_tls: bool
    use_ssl: bool

    @classmethod
    def from_env(cls) -> "SmtpConfig":
        username = os.getenv("SMTP_USERNAME")
        return cls(
            host=os.getenv("SMTP_HOST"),
            port=int(os.getenv("SMTP_PORT", "587")),
            username=username,
            password=os.getenv("SMTP_PASSWORD"),
            # defaults to the login address
            from_email=os.getenv("SMTP_FROM_EMAIL", username or ""),
            from_name=os.getenv("SMTP_FROM_NAME", "WeCargo"),
            use_tls=_get_bool_env("SMTP_USE_TLS", default=True),
            use_ssl=_get_bool_env("SMTP_USE_SSL", default=False),
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.host and self.username and self.password)

    @property
    def from_header(self) -> str:
        if self.from_email:
            return f"{self.from_name} <{self.from_email}>"
        return self.username or ""


def is_configured() -> bool:
    """True when host and credentials are present."""
    return SmtpConfig.from_env().is_complete


def _create_smtp_client(cfg: SmtpConfig) -> smtplib.SMTP:
    """
    SSL (typically port 465) when SMTP_USE_SSL, otherwise a plain connection
    upgraded with STARTTLS when SMTP_USE_TLS (typically port 587).
    Do not enable both.
    """
    if cfg.use_ssl:
        return smtplib.SMTP_SSL(cfg.host, cfg.port, timeout=30)

    server = smtplib.SMTP(cfg.host, cfg.port, timeout=30)
    if cfg.use_tls:
        server.starttls()
    return server


def send_email(
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
) -> None:
    """
    Send an email to a single recipient.

    Raises
    ------
    RuntimeError:
        If required SMTP configuration is missing.
    smtplib.SMTPException / OSError:
        If the underlying SMTP connection or send fails.
    """
    cfg = SmtpConfig.from_env()
    if not cfg.is_complete:
        raise RuntimeError("SMTP_HOST, SMTP_USERNAME and SMTP_PASSWORD must be set to send email")

    msg = EmailMessage()
    msg["From"] = cfg.from_header
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")

    server = _create_smtp_client(cfg)
    try:
        server.login(cfg.username, cfg.password)  # type: ignore[arg-type]
        server.send_message(msg)
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            # Connection is being torn down anyway.
            pass
