"""Notification fan-out: realtime pub/sub channel and per-cycle email digest."""

from .digest import DigestBuilder
from .models import (
    DigestDeliveryError,
    DigestMessage,
    DigestResult,
    NotificationError,
    NotificationTemplateError,
    PublishOutcome,
    RealtimePublishError,
)
from .realtime import (
    RealtimePublisher,
    channel_for,
    recipient_from_topic,
    subscription_pattern,
)
from .service import NotificationFanout
from .smtp_client import SMTPClient, build_sender_address, parse_recipients
from .templates import TemplateRenderer

__all__ = [
    # Service
    "NotificationFanout",
    # Realtime
    "RealtimePublisher",
    "channel_for",
    "recipient_from_topic",
    "subscription_pattern",
    # Digest
    "DigestBuilder",
    "DigestMessage",
    "DigestResult",
    "TemplateRenderer",
    "SMTPClient",
    "build_sender_address",
    "parse_recipients",
    # Results and exceptions
    "PublishOutcome",
    "NotificationError",
    "RealtimePublishError",
    "DigestDeliveryError",
    "NotificationTemplateError",
]
