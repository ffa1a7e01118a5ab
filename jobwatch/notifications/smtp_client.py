"""SMTP client wrapper for digest delivery.

Thin wrapper around smtplib with TLS/SSL, authentication and connection
cleanup. Implements the digest channel contract
``send(recipients, subject, body)``.
"""

import smtplib
import ssl
from email.message import EmailMessage
from typing import Callable, Iterable, List, Optional

from email_validator import EmailNotValidError, validate_email

from jobwatch.config.environment import EnvironmentConfig
from jobwatch.logging import get_logger

from .models import DigestDeliveryError

logger = get_logger(__name__, component="notification")


class SMTPClient:
    """Sends plain-text messages through the configured relay.

    The smtplib factories are injectable so tests never open sockets.
    """

    def __init__(
        self,
        env_config: EnvironmentConfig,
        use_tls: bool = True,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
    ):
        self.env_config = env_config
        self.use_tls = use_tls
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def send(self, recipients: Iterable[str], subject: str, body: str) -> None:
        """Send one message to ``recipients``.

        An empty recipient list is a no-op.

        Raises:
            DigestDeliveryError: If an address is invalid or delivery fails
        """
        try:
            to_addresses = parse_recipients(recipients)
        except ValueError as e:
            raise DigestDeliveryError(str(e)) from e
        if not to_addresses:
            logger.debug("No digest recipients configured, nothing to send")
            return

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = build_sender_address(self.env_config)
        message["To"] = ", ".join(to_addresses)
        message.set_content(body)

        self._deliver(message)

    def _deliver(self, message: EmailMessage) -> None:
        env = self.env_config
        smtp = None
        try:
            if env.smtp_port == 465:
                # Port 465: implicit TLS
                smtp = self.smtp_ssl_factory(
                    env.smtp_host, env.smtp_port, context=ssl.create_default_context()
                )
            else:
                smtp = self.smtp_factory(env.smtp_host, env.smtp_port)
                if self.use_tls:
                    smtp.starttls(context=ssl.create_default_context())

            if env.smtp_user and env.smtp_pass:
                smtp.login(env.smtp_user, env.smtp_pass)

            smtp.send_message(message)
            logger.debug(f"Message sent to {message['To']}")

        except smtplib.SMTPException as e:
            raise DigestDeliveryError(f"SMTP error during message delivery: {e}") from e
        except OSError as e:
            raise DigestDeliveryError(f"Network error during SMTP connection: {e}") from e
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except (smtplib.SMTPException, OSError) as e:
                    logger.warning(f"Error closing SMTP connection: {e}")


def parse_recipients(recipients: Iterable[str]) -> List[str]:
    """Validate and normalise addresses (a comma string is also accepted).

    Raises:
        ValueError: If any email address is invalid
    """
    if isinstance(recipients, str):
        recipients = recipients.split(",")

    validated = []
    for email in recipients:
        email = email.strip()
        if not email:
            continue
        try:
            validated.append(validate_email(email, check_deliverability=False).normalized)
        except EmailNotValidError as e:
            raise ValueError(f"Invalid digest recipient: '{email}' - {e}") from e
    return validated


def build_sender_address(env_config: EnvironmentConfig) -> str:
    """'From' header: ``SMTP_SENDER_NAME <SMTP_USER>`` or a noreply address at the relay."""
    sender_email = env_config.smtp_user or f"noreply@{env_config.smtp_host}"
    return f"{env_config.smtp_sender_name} <{sender_email}>"
