"""Environment variable loading and validation."""

import os
import re
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email

from .exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///./data/jobwatch.db"
DEFAULT_REDIS_URL = "redis://127.0.0.1:6379"

_SSLMODE_PATTERN = re.compile(r"[?&]sslmode=[^&]*")


class EnvironmentConfig:
    """Environment variable configuration holder."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        redis_url: Optional[str] = None,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_user: Optional[str] = None,
        smtp_pass: Optional[str] = None,
        smtp_sender_name: Optional[str] = None,
        digest_to: Optional[List[str]] = None,
        log_level: Optional[str] = None,
        environment: Optional[str] = None,
    ):
        self.database_url = strip_sslmode(database_url or DEFAULT_DATABASE_URL)
        self.redis_url = redis_url or DEFAULT_REDIS_URL
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_pass = smtp_pass
        self.smtp_sender_name = smtp_sender_name or "jobwatch"
        self.digest_to = list(digest_to or [])
        self.log_level = log_level
        self.environment = environment or "development"

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_port)


def strip_sslmode(url: str) -> str:
    """Drop any ``sslmode`` query parameter; TLS is negotiated by the driver defaults.

    >>> strip_sslmode("postgresql://u:p@db/jobs?sslmode=require")
    'postgresql://u:p@db/jobs'
    """
    stripped = _SSLMODE_PATTERN.sub("", url)
    if "?" not in stripped and "&" in stripped:
        stripped = stripped.replace("&", "?", 1)
    return stripped


def load_environment_config(require_smtp: bool = False) -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Optional environment variables:
    - DATABASE_URL: SQLAlchemy URL for jobs and the dedup ledger
      (default: sqlite:///./data/jobwatch.db; ``sslmode`` is stripped)
    - REDIS_URL: pub/sub endpoint for realtime notifications
    - SMTP_HOST / SMTP_PORT: mail relay for the digest
    - SMTP_USER / SMTP_PASS: relay credentials (both or neither)
    - SMTP_SENDER_NAME: display name on the digest
    - DIGEST_TO: comma-separated addresses, appended to digest.recipients
    - LOG_LEVEL: overrides logging.level
    - ENVIRONMENT: stamped on every log record

    Args:
        require_smtp: When True (digest has recipients), SMTP_HOST and
            SMTP_PORT become mandatory.

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If variables are missing or invalid
    """
    errors = []

    smtp_host = os.getenv("SMTP_HOST")
    smtp_port_str = os.getenv("SMTP_PORT")
    smtp_user = os.getenv("SMTP_USER")
    smtp_pass = os.getenv("SMTP_PASS")
    digest_to_raw = os.getenv("DIGEST_TO", "")
    log_level = os.getenv("LOG_LEVEL")

    digest_to = [addr.strip() for addr in digest_to_raw.split(",") if addr.strip()]
    if digest_to:
        require_smtp = True

    if require_smtp:
        if not smtp_host:
            errors.append("Missing required environment variable: SMTP_HOST")
        if not smtp_port_str:
            errors.append("Missing required environment variable: SMTP_PORT")

    smtp_port = None
    if smtp_port_str:
        try:
            smtp_port = int(smtp_port_str)
            if smtp_port < 1 or smtp_port > 65535:
                errors.append(f"Invalid SMTP_PORT: {smtp_port}. Must be between 1 and 65535.")
        except ValueError:
            errors.append(f"Invalid SMTP_PORT: '{smtp_port_str}'. Must be a valid integer.")

    for address in digest_to:
        if not is_valid_email(address):
            errors.append(f"Invalid email address format in DIGEST_TO: '{address}'")

    if log_level:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if log_level.upper() not in valid_levels:
            errors.append(
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(valid_levels)}"
            )
        log_level = log_level.upper()

    if smtp_user and not smtp_pass:
        errors.append("SMTP_USER is set but SMTP_PASS is not. Both must be set for authentication.")
    elif smtp_pass and not smtp_user:
        errors.append("SMTP_PASS is set but SMTP_USER is not. Both must be set for authentication.")

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fill in your credentials",
                "SMTP settings are only needed when the digest has recipients",
                "Verify SMTP_PORT is a number between 1 and 65535",
            ],
        )

    return EnvironmentConfig(
        database_url=os.getenv("DATABASE_URL"),
        redis_url=os.getenv("REDIS_URL"),
        smtp_host=smtp_host,
        smtp_port=smtp_port,
        smtp_user=smtp_user,
        smtp_pass=smtp_pass,
        smtp_sender_name=os.getenv("SMTP_SENDER_NAME"),
        digest_to=digest_to,
        log_level=log_level,
        environment=os.getenv("ENVIRONMENT"),
    )


def is_valid_email(email: str) -> bool:
    """Syntax-only address check (no DNS lookup)."""
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True
