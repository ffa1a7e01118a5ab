"""Realtime channel: Redis pub/sub publisher.

Each recipient has a channel ``<prefix>:<recipient_id>`` (``notifications:demo``).
Relays subscribe with the pattern ``<prefix>:*`` and route a message to the
recipient named by the part of the channel after the prefix.
"""

from datetime import datetime
from typing import Optional, Union

import redis

from jobwatch.domain.models import Job, NotificationPayload
from jobwatch.logging import get_logger

from .models import RealtimePublishError

logger = get_logger(__name__, component="realtime")

DEFAULT_CHANNEL_PREFIX = "notifications"


def channel_for(recipient_id: str, prefix: str = DEFAULT_CHANNEL_PREFIX) -> str:
    """``channel_for("demo")`` -> ``'notifications:demo'``."""
    return f"{prefix}:{recipient_id}"


def subscription_pattern(prefix: str = DEFAULT_CHANNEL_PREFIX) -> str:
    return f"{prefix}:*"


def recipient_from_topic(topic: Union[str, bytes], prefix: str = DEFAULT_CHANNEL_PREFIX) -> Optional[str]:
    """Recipient id encoded in a channel name, or None if it is not one of ours.

    Example:
        >>> recipient_from_topic("notifications:demo")
        'demo'
        >>> recipient_from_topic("other:demo") is None
        True
    """
    if isinstance(topic, bytes):
        topic = topic.decode("utf-8")
    head = f"{prefix}:"
    if not topic.startswith(head):
        return None
    return topic[len(head):] or None


class RealtimePublisher:
    """Publishes NotificationPayloads on per-recipient Redis channels."""

    def __init__(self, client: "redis.Redis", channel_prefix: str = DEFAULT_CHANNEL_PREFIX):
        self.client = client
        self.channel_prefix = channel_prefix

    @classmethod
    def from_url(
        cls,
        redis_url: str,
        channel_prefix: str = DEFAULT_CHANNEL_PREFIX,
        timeout: float = 5.0,
    ) -> "RealtimePublisher":
        client = redis.Redis.from_url(
            redis_url,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        return cls(client, channel_prefix=channel_prefix)

    def ping(self) -> bool:
        """Round-trip to the server.

        Raises:
            RealtimePublishError: If Redis is unreachable
        """
        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            raise RealtimePublishError(f"Redis ping failed: {e}") from e

    def publish(self, topic: str, payload: Union[str, bytes]) -> int:
        """Publish raw ``payload`` on ``topic``; returns the subscriber count.

        Zero subscribers is not an error: delivery is at-least-once only
        towards relays that are listening.

        Raises:
            RealtimePublishError: On connection or protocol errors
        """
        try:
            receivers = self.client.publish(topic, payload)
        except redis.RedisError as e:
            raise RealtimePublishError(f"Publish to {topic} failed: {e}", topic=topic) from e

        logger.debug(
            f"Published to {topic}",
            extra={"event": "realtime.publish.succeeded", "topic": topic, "receivers": receivers},
        )
        return receivers

    def publish_match(
        self, recipient_id: str, job: Job, now: Optional[datetime] = None
    ) -> NotificationPayload:
        """Publish ``job`` to ``recipient_id``'s channel and return the payload sent."""
        payload = NotificationPayload.from_job(job, now=now)
        self.publish(channel_for(recipient_id, self.channel_prefix), payload.to_json())
        return payload

    def close(self) -> None:
        try:
            self.client.close()
        except redis.RedisError as e:
            logger.warning(f"Error closing Redis connection: {e}")
