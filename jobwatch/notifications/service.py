"""Notification fan-out for matched jobs.

Two independent sinks:
1. Realtime: each match is published at once on every interested
   recipient's channel. A failed publish is logged and counted.
2. Digest: matches accumulate in a DigestBuilder for the cycle and are
   sent as one email at cycle end. A failed dispatch is logged and dropped.

Neither sink raises into the pipeline.
"""

from datetime import datetime
from typing import Iterable, Optional

from jobwatch.config.models import DigestConfig
from jobwatch.domain.models import Job
from jobwatch.logging import get_logger

from .digest import DigestBuilder
from .models import (
    DigestDeliveryError,
    DigestResult,
    NotificationTemplateError,
    PublishOutcome,
    RealtimePublishError,
)
from .realtime import RealtimePublisher
from .smtp_client import SMTPClient
from .templates import TemplateRenderer

logger = get_logger(__name__, component="notification")


class NotificationFanout:
    """Routes matched jobs to the realtime channel and the cycle digest."""

    def __init__(
        self,
        realtime: Optional[RealtimePublisher] = None,
        digest_sender: Optional[SMTPClient] = None,
        digest_config: Optional[DigestConfig] = None,
        template_renderer: Optional[TemplateRenderer] = None,
    ):
        """
        Args:
            realtime: Publisher, or None to disable the realtime sink
            digest_sender: Anything with ``send(recipients, subject, body)``;
                None disables the digest
            digest_config: Recipients, preview limit and subject prefix
            template_renderer: Digest renderer (created lazily if None)
        """
        self.realtime = realtime
        self.digest_sender = digest_sender
        self.digest_config = digest_config or DigestConfig()
        self._renderer = template_renderer

    @property
    def digest_enabled(self) -> bool:
        return self.digest_sender is not None and self.digest_config.enabled

    def publish(
        self, job: Job, recipient_ids: Iterable[str], now: Optional[datetime] = None
    ) -> PublishOutcome:
        """Publish ``job`` to each recipient; failures are isolated per recipient."""
        outcome = PublishOutcome(job_id=job.id)
        if self.realtime is None:
            return outcome

        for recipient_id in recipient_ids:
            try:
                self.realtime.publish_match(recipient_id, job, now=now)
            except RealtimePublishError as e:
                outcome.failed.append(recipient_id)
                logger.warning(
                    f"Realtime publish failed for {recipient_id}: {e}",
                    extra={
                        "event": "realtime.publish.failed",
                        "job_id": job.id,
                        "recipient_id": recipient_id,
                        "topic": e.topic,
                        "error": str(e),
                    },
                )
            else:
                outcome.published.append(recipient_id)

        return outcome

    def new_digest(self) -> DigestBuilder:
        """A fresh accumulator for one cycle."""
        if self._renderer is None:
            self._renderer = TemplateRenderer()
        return DigestBuilder(
            preview_limit=self.digest_config.preview_limit,
            subject_prefix=self.digest_config.subject_prefix,
            renderer=self._renderer,
        )

    def dispatch_digest(self, digest: DigestBuilder, now: Optional[datetime] = None) -> DigestResult:
        """Send the cycle digest once, if anything matched and recipients are configured."""
        entry_count = len(digest)
        if not self.digest_enabled or entry_count == 0:
            logger.debug(
                "Digest skipped",
                extra={
                    "event": "digest.skipped",
                    "entry_count": entry_count,
                    "enabled": self.digest_enabled,
                },
            )
            return DigestResult(status="skipped", entry_count=entry_count)

        recipients = list(self.digest_config.recipients)
        try:
            message = digest.compose(now)
            self.digest_sender.send(recipients, message.subject, message.body)
        except (DigestDeliveryError, NotificationTemplateError) as e:
            logger.error(
                f"Digest delivery failed: {e}",
                extra={
                    "event": "digest.failed",
                    "entry_count": entry_count,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            return DigestResult(
                status="failed", entry_count=entry_count, recipients=recipients, error=str(e)
            )

        logger.info(
            f"Digest sent with {entry_count} matches to {len(recipients)} recipients",
            extra={
                "event": "digest.sent",
                "entry_count": entry_count,
                "shown": message.shown,
                "recipient_count": len(recipients),
            },
        )
        return DigestResult(status="sent", entry_count=entry_count, recipients=recipients)

    def close(self) -> None:
        if self.realtime is not None:
            self.realtime.close()
