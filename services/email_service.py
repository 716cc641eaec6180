"""
Email Service

Sends transactional email (one-time passcodes) over SMTP.
When SMTP credentials are missing or still the sample placeholder, the
service runs in mock mode: nothing is sent, the message is logged, and
callers see success so sign-in keeps working in local environments.
"""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Callable, Optional

from core.config import PLACEHOLDER_SMTP_USER, Settings

logger = logging.getLogger(__name__)

FROM_NAME = "Athleon Global"
OTP_SUBJECT = "Your Athleon Global Verification Code"
OTP_EXPIRY_MINUTES = 10

SMTPFactory = Callable[[str, int, float], smtplib.SMTP]


def _default_smtp_factory(host: str, port: int, timeout: float) -> smtplib.SMTP:
    # 465 is implicit TLS; every other port upgrades with STARTTLS.
    if port == 465:
        return smtplib.SMTP_SSL(host, port, timeout=timeout)
    server = smtplib.SMTP(host, port, timeout=timeout)
    server.starttls()
    return server


def render_otp_html(otp: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
        <h2 style="color: #333;">Welcome to Athleon Global!</h2>
        <p>Your verification code is:</p>
        <div style="background-color: #f4f4f4; padding: 15px; text-align: center; border-radius: 5px; font-size: 24px; letter-spacing: 5px; font-weight: bold; margin: 20px 0;">
            {otp}
        </div>
        <p>This code will expire in {OTP_EXPIRY_MINUTES} minutes.</p>
        <p style="color: #666; font-size: 12px; margin-top: 30px;">If you didn't request this code, please ignore this email.</p>
    </div>
    """


def render_otp_text(otp: str) -> str:
    return (
        "Welcome to Athleon Global!\n\n"
        f"Your verification code is: {otp}\n\n"
        f"This code will expire in {OTP_EXPIRY_MINUTES} minutes.\n"
        "If you didn't request this code, please ignore this email."
    )


class EmailService:
    """Service for sending emails"""

    def __init__(self, settings: Settings, smtp_factory: Optional[SMTPFactory] = None):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASS
        self.timeout = float(settings.EXTERNAL_API_TIMEOUT)
        self._smtp_factory = smtp_factory or _default_smtp_factory

    @property
    def is_mock_mode(self) -> bool:
        return (
            not self.smtp_user
            or not self.smtp_password
            or self.smtp_user == PLACEHOLDER_SMTP_USER
        )

    @property
    def from_address(self) -> str:
        return f'"{FROM_NAME}" <{self.smtp_user}>'

    def _connect(self) -> smtplib.SMTP:
        server = self._smtp_factory(self.smtp_host, self.smtp_port, self.timeout)
        server.login(self.smtp_user, self.smtp_password)
        return server

    def _check_connection(self) -> None:
        server = self._connect()
        server.noop()
        server.quit()

    def _deliver(self, msg: MIMEMultipart) -> None:
        server = self._connect()
        try:
            server.send_message(msg)
        finally:
            server.quit()

    async def verify_connection(self) -> bool:
        """
        Check that the SMTP server accepts our credentials.

        Returns True if the login succeeded, False otherwise. Never raises.
        """
        if self.is_mock_mode:
            logger.info("SMTP not configured, skipping connection check (mock email mode)")
            return False

        try:
            await asyncio.to_thread(self._check_connection)
            logger.info(f"SMTP connection established: {self.smtp_host}:{self.smtp_port}")
            return True
        except Exception as e:
            logger.error(f"Failed to connect to SMTP server {self.smtp_host}:{self.smtp_port}: {e}")
            return False

    async def send_email_otp(self, email: str, otp: str) -> bool:
        """
        Send a verification code.

        Returns True if sent (or logged in mock mode), False if delivery failed.
        """
        if self.is_mock_mode:
            logger.warning("SMTP not configured. Using mock email service.")
            logger.info(
                f"[MOCK EMAIL] To: {email} | OTP: {otp}",
                extra={"extra_fields": {"mock_email": True, "to": email}},
            )
            return True

        msg = MIMEMultipart("alternative")
        msg["Subject"] = OTP_SUBJECT
        msg["From"] = self.from_address
        msg["To"] = email
        msg.attach(MIMEText(render_otp_text(otp), "plain"))
        msg.attach(MIMEText(render_otp_html(otp), "html"))

        try:
            await asyncio.to_thread(self._deliver, msg)
            logger.info(f"OTP email sent to {email}")
            return True
        except Exception as e:
            logger.error(f"Error sending OTP email to {email}: {e}")
            return False
