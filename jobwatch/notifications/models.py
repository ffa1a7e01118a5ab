"""Data models and exceptions for the notification fan-out."""

from dataclasses import dataclass, field
from typing import List, Optional


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class RealtimePublishError(NotificationError):
    """Raised when a message cannot be published on the pub/sub channel."""

    def __init__(self, message: str, topic: Optional[str] = None):
        super().__init__(message)
        self.topic = topic


class DigestDeliveryError(NotificationError):
    """Raised when the digest email cannot be delivered."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when template rendering fails due to configuration or missing variables."""

    pass


@dataclass
class PublishOutcome:
    """Result of publishing one matched job to its interested recipients.

    Attributes:
        job_id: Job that was published
        published: Recipient ids whose channel accepted the message
        failed: Recipient ids whose publish raised
    """

    job_id: str
    published: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


@dataclass
class DigestMessage:
    """A composed, not yet sent, digest."""

    subject: str
    body: str
    total: int
    shown: int

    @property
    def remaining(self) -> int:
        return self.total - self.shown


@dataclass
class DigestResult:
    """Outcome of the end-of-cycle digest.

    Attributes:
        status: "sent", "skipped" (nothing matched or no recipients) or "failed"
        entry_count: Matches covered by the digest
        recipients: Addresses the digest was sent to
        error: Error message if delivery failed
    """

    status: str
    entry_count: int = 0
    recipients: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.status == "sent"
