"""Tests for the Redis pub/sub realtime channel."""

import json
from datetime import datetime, timezone
from unittest.mock import Mock, patch

import pytest
import redis

from jobwatch.notifications import (
    RealtimePublishError,
    RealtimePublisher,
    channel_for,
    recipient_from_topic,
    subscription_pattern,
)
from tests.helpers import make_job

NOW = datetime(2024, 11, 1, 12, tzinfo=timezone.utc)


@pytest.fixture
def client():
    client = Mock(spec=redis.Redis)
    client.publish.return_value = 1
    client.ping.return_value = True
    return client


class TestTopicConvention:
    def test_channel_for(self):
        assert channel_for("demo") == "notifications:demo"
        assert channel_for("demo", prefix="jobs") == "jobs:demo"

    def test_subscription_pattern(self):
        assert subscription_pattern() == "notifications:*"

    @pytest.mark.parametrize(
        "topic,expected",
        [
            ("notifications:demo", "demo"),
            (b"notifications:team-1", "team-1"),
            ("other:demo", None),
            ("notifications:", None),
        ],
    )
    def test_recipient_from_topic(self, topic, expected):
        assert recipient_from_topic(topic) == expected

    def test_topic_round_trip(self):
        assert recipient_from_topic(channel_for("backend-team")) == "backend-team"


class TestRealtimePublisher:
    def test_publish_match_sends_json_payload(self, client):
        publisher = RealtimePublisher(client)
        job = make_job("1", contract_type="C2C")

        payload = publisher.publish_match("demo", job, now=NOW)

        topic, body = client.publish.call_args.args
        assert topic == "notifications:demo"
        assert json.loads(body) == {
            "jobId": job.id,
            "title": job.title,
            "company": job.company,
            "location": job.location,
            "url": job.url,
            "contract": "C2C",
            "ts": 1730462400000,
        }
        assert payload.job_id == job.id

    def test_custom_prefix(self, client):
        publisher = RealtimePublisher(client, channel_prefix="jobs")

        publisher.publish_match("demo", make_job(), now=NOW)

        assert client.publish.call_args.args[0] == "jobs:demo"

    def test_zero_subscribers_is_not_an_error(self, client):
        client.publish.return_value = 0
        publisher = RealtimePublisher(client)

        assert publisher.publish("notifications:demo", "{}") == 0

    def test_redis_error_wrapped(self, client):
        client.publish.side_effect = redis.ConnectionError("down")
        publisher = RealtimePublisher(client)

        with pytest.raises(RealtimePublishError) as exc_info:
            publisher.publish_match("demo", make_job(), now=NOW)

        assert exc_info.value.topic == "notifications:demo"

    def test_ping(self, client):
        assert RealtimePublisher(client).ping() is True

    def test_ping_failure(self, client):
        client.ping.side_effect = redis.ConnectionError("refused")

        with pytest.raises(RealtimePublishError, match="ping failed"):
            RealtimePublisher(client).ping()

    def test_close_logs_redis_errors(self, client):
        client.close.side_effect = redis.RedisError("already closed")

        RealtimePublisher(client).close()

        client.close.assert_called_once()

    @patch("jobwatch.notifications.realtime.redis.Redis.from_url")
    def test_from_url(self, mock_from_url):
        publisher = RealtimePublisher.from_url("redis://cache:6379/0", channel_prefix="x", timeout=3)

        mock_from_url.assert_called_once_with(
            "redis://cache:6379/0", socket_timeout=3, socket_connect_timeout=3
        )
        assert publisher.client is mock_from_url.return_value
        assert publisher.channel_prefix == "x"
