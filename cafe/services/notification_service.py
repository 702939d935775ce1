# cafe/services/notification_service.py
import smtplib
from email.message import EmailMessage
from typing import Protocol

from cafe.domain.errors import DispatchError
from cafe.utils.logging import get_logger
from cafe.utils.retry import smtp_retry
from cafe.utils.settings import (
    EMAIL_PASS,
    EMAIL_USER,
    SMTP_HOST,
    SMTP_PORT,
    SMTP_TIMEOUT_SECONDS,
    STORE_NAME,
)

logger = get_logger(__name__)

_OTP_HTML = """\
<div style="font-family: Arial, sans-serif; padding: 20px; background-color: #f4f4f4;">
    <div style="max-width: 500px; margin: 0 auto; background-color: #ffffff; padding: 30px; border-radius: 10px;">
        <h2 style="color: #333; text-align: center;">Verify Your Order</h2>
        <p style="font-size: 16px; color: #555;">Hi there,</p>
        <p style="font-size: 16px; color: #555;">Use the following code to verify your {store} order:</p>
        <div style="background-color: #fce4ec; border: 1px solid #f8bbd0; color: #c2185b; font-size: 24px;
                    font-weight: bold; text-align: center; padding: 15px; border-radius: 5px; margin: 20px 0;">
            {code}
        </div>
        <p style="font-size: 14px; color: #888;">If you didn't request this, please ignore this email.</p>
    </div>
</div>
"""


class Notifier(Protocol):
    def send_otp(self, email: str, code: str) -> None: ...


class EmailNotifier:
    """
    Wysylka kodu OTP mailem (SMTP + STARTTLS).
    Wywolanie synchroniczne - checkout musi wiedziec od razu, czy mail wyszedl.
    """

    def __init__(
        self,
        host: str = SMTP_HOST,
        port: int = SMTP_PORT,
        username: str = EMAIL_USER,
        password: str = EMAIL_PASS,
        sender: str | None = None,
        store_name: str = STORE_NAME,
        timeout: int = SMTP_TIMEOUT_SECONDS,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.store_name = store_name
        self.timeout = timeout

    def build_otp_message(self, email: str, code: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = email
        message["Subject"] = f"Your {self.store_name} Order Verification Code"
        message.set_content(f"Your OTP for order verification is: {code}")
        message.add_alternative(_OTP_HTML.format(store=self.store_name, code=code), subtype="html")
        return message

    @smtp_retry()
    def _send(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password)
            smtp.send_message(message)

    def send_otp(self, email: str, code: str) -> None:
        message = self.build_otp_message(email, code)
        logger.info(f"Sending verification code to {email} via {self.host}:{self.port}")

        try:
            self._send(message)
        except smtplib.SMTPRecipientsRefused:
            logger.warning(f"Recipient {email} refused by SMTP server")
            raise DispatchError(f"Email address {email} was rejected by the mail server") from None
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP authentication failed: {e}")
            raise DispatchError("Mail server rejected our credentials, please try again later") from e
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send verification email to {email}: {e}")
            raise DispatchError(f"Failed to send email: {e}") from e


class LoggingNotifier:
    """Tryb deweloperski (brak EMAIL_USER) - kod tylko w logach."""

    def send_otp(self, email: str, code: str) -> None:
        logger.info(f"[DEV OTP] {email}: {code}")


def build_notifier() -> Notifier:
    if EMAIL_USER:
        return EmailNotifier()
    logger.warning("EMAIL_USER is not set, verification codes will only be logged")
    return LoggingNotifier()
