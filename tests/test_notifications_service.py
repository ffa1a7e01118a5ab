"""Tests for the notification fan-out service."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from jobwatch.config.models import DigestConfig
from jobwatch.notifications import (
    DigestBuilder,
    DigestDeliveryError,
    NotificationFanout,
    NotificationTemplateError,
    RealtimePublishError,
    RealtimePublisher,
)
from tests.helpers import make_job

NOW = datetime(2025, 11, 4, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def realtime():
    return Mock(spec=RealtimePublisher)


@pytest.fixture
def sender():
    return Mock()


@pytest.fixture
def digest_config():
    return DigestConfig(recipients=["ops@example.com"], preview_limit=20)


class TestRealtimeFanout:
    def test_publishes_to_each_recipient(self, realtime):
        fanout = NotificationFanout(realtime=realtime)
        job = make_job()

        outcome = fanout.publish(job, ["demo", "team"], now=NOW)

        assert outcome.published == ["demo", "team"]
        assert outcome.failed == []
        realtime.publish_match.assert_any_call("demo", job, now=NOW)
        realtime.publish_match.assert_any_call("team", job, now=NOW)

    def test_failure_isolated_per_recipient(self, realtime):
        realtime.publish_match.side_effect = [
            RealtimePublishError("down", topic="notifications:demo"),
            None,
        ]
        fanout = NotificationFanout(realtime=realtime)

        outcome = fanout.publish(make_job(), ["demo", "team"])

        assert outcome.failed == ["demo"]
        assert outcome.published == ["team"]

    def test_disabled_realtime_is_noop(self):
        outcome = NotificationFanout().publish(make_job(), ["demo"])

        assert outcome.published == []
        assert outcome.failed == []


class TestDigestDispatch:
    def test_sends_once_with_rendered_digest(self, sender, digest_config):
        fanout = NotificationFanout(digest_sender=sender, digest_config=digest_config)
        digest = fanout.new_digest()
        for i in range(25):
            digest.add(make_job(str(i)))

        result = fanout.dispatch_digest(digest, now=NOW)

        assert result.status == "sent"
        assert result.is_success()
        assert result.entry_count == 25
        sender.send.assert_called_once()
        recipients, subject, body = sender.send.call_args.args
        assert recipients == ["ops@example.com"]
        assert subject == "[jobwatch] 25 new job matches"
        assert "+5 more" in body

    def test_empty_digest_skipped(self, sender, digest_config):
        fanout = NotificationFanout(digest_sender=sender, digest_config=digest_config)

        result = fanout.dispatch_digest(fanout.new_digest())

        assert result.status == "skipped"
        sender.send.assert_not_called()

    def test_no_recipients_skipped(self, sender):
        fanout = NotificationFanout(digest_sender=sender, digest_config=DigestConfig())
        digest = fanout.new_digest()
        digest.add(make_job())

        result = fanout.dispatch_digest(digest)

        assert fanout.digest_enabled is False
        assert result.status == "skipped"
        assert result.entry_count == 1
        sender.send.assert_not_called()

    def test_no_sender_skipped(self, digest_config):
        fanout = NotificationFanout(digest_config=digest_config)
        digest = fanout.new_digest()
        digest.add(make_job())

        assert fanout.dispatch_digest(digest).status == "skipped"

    def test_delivery_failure_reported_not_raised(self, sender, digest_config):
        sender.send.side_effect = DigestDeliveryError("relay down")
        fanout = NotificationFanout(digest_sender=sender, digest_config=digest_config)
        digest = fanout.new_digest()
        digest.add(make_job())

        result = fanout.dispatch_digest(digest)

        assert result.status == "failed"
        assert result.error == "relay down"
        sender.send.assert_called_once()

    def test_render_failure_reported_not_raised(self, sender, digest_config):
        renderer = Mock()
        renderer.render.side_effect = NotificationTemplateError("bad template")
        fanout = NotificationFanout(
            digest_sender=sender, digest_config=digest_config, template_renderer=renderer
        )
        digest = fanout.new_digest()
        digest.add(make_job())

        result = fanout.dispatch_digest(digest)

        assert result.status == "failed"
        sender.send.assert_not_called()

    def test_new_digest_uses_config(self, digest_config):
        config = DigestConfig(preview_limit=5, subject_prefix="[x]")
        digest = NotificationFanout(digest_config=config).new_digest()

        assert isinstance(digest, DigestBuilder)
        assert digest.preview_limit == 5
        assert digest.subject_prefix == "[x]"


class TestClose:
    def test_close_closes_realtime(self, realtime):
        NotificationFanout(realtime=realtime).close()
        realtime.close.assert_called_once()

    def test_close_without_realtime(self):
        NotificationFanout().close()
