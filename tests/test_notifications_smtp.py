"""Unit tests for the SMTP client wrapper."""

import smtplib
from unittest.mock import MagicMock

import pytest

from jobwatch.config.environment import EnvironmentConfig
from jobwatch.notifications import (
    DigestDeliveryError,
    SMTPClient,
    build_sender_address,
    parse_recipients,
)


@pytest.fixture
def env_config_with_auth():
    return EnvironmentConfig(
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="user@example.com",
        smtp_pass="secret123",
        smtp_sender_name="Job Watch",
    )


@pytest.fixture
def env_config_without_auth():
    return EnvironmentConfig(smtp_host="smtp.example.com", smtp_port=25)


@pytest.fixture
def env_config_implicit_tls():
    return EnvironmentConfig(
        smtp_host="smtp.example.com",
        smtp_port=465,
        smtp_user="user@example.com",
        smtp_pass="secret123",
    )


@pytest.fixture
def smtp_factories():
    smtp = MagicMock()
    smtp_ssl = MagicMock()
    return smtp, smtp_ssl


def make_client(env_config, factories, use_tls=True):
    smtp, smtp_ssl = factories
    return SMTPClient(env_config, use_tls=use_tls, smtp_factory=smtp, smtp_ssl_factory=smtp_ssl)


class TestSend:
    def test_starttls_login_and_send(self, env_config_with_auth, smtp_factories):
        client = make_client(env_config_with_auth, smtp_factories)

        client.send(["a@example.com", "b@example.com"], "Subject", "Body")

        smtp_factory, smtp_ssl_factory = smtp_factories
        smtp_factory.assert_called_once_with("smtp.example.com", 587)
        smtp_ssl_factory.assert_not_called()
        conn = smtp_factory.return_value
        conn.starttls.assert_called_once()
        conn.login.assert_called_once_with("user@example.com", "secret123")
        conn.quit.assert_called_once()

        message = conn.send_message.call_args.args[0]
        assert message["Subject"] == "Subject"
        assert message["To"] == "a@example.com, b@example.com"
        assert message["From"] == "Job Watch <user@example.com>"
        assert message.get_content().strip() == "Body"

    def test_no_auth_no_tls(self, env_config_without_auth, smtp_factories):
        client = make_client(env_config_without_auth, smtp_factories, use_tls=False)

        client.send(["a@example.com"], "S", "B")

        conn = smtp_factories[0].return_value
        conn.starttls.assert_not_called()
        conn.login.assert_not_called()
        conn.send_message.assert_called_once()

    def test_port_465_uses_ssl(self, env_config_implicit_tls, smtp_factories):
        client = make_client(env_config_implicit_tls, smtp_factories)

        client.send(["a@example.com"], "S", "B")

        smtp_factory, smtp_ssl_factory = smtp_factories
        smtp_factory.assert_not_called()
        assert smtp_ssl_factory.call_args.args == ("smtp.example.com", 465)
        smtp_ssl_factory.return_value.starttls.assert_not_called()

    def test_empty_recipients_is_noop(self, env_config_with_auth, smtp_factories):
        client = make_client(env_config_with_auth, smtp_factories)

        client.send([], "S", "B")

        smtp_factories[0].assert_not_called()

    def test_smtp_error_wrapped(self, env_config_with_auth, smtp_factories):
        conn = smtp_factories[0].return_value
        conn.send_message.side_effect = smtplib.SMTPRecipientsRefused({})
        client = make_client(env_config_with_auth, smtp_factories)

        with pytest.raises(DigestDeliveryError, match="SMTP error"):
            client.send(["a@example.com"], "S", "B")
        conn.quit.assert_called_once()

    def test_connection_error_wrapped(self, env_config_with_auth, smtp_factories):
        smtp_factories[0].side_effect = ConnectionRefusedError("refused")
        client = make_client(env_config_with_auth, smtp_factories)

        with pytest.raises(DigestDeliveryError, match="Network error"):
            client.send(["a@example.com"], "S", "B")

    def test_quit_failure_does_not_mask_success(self, env_config_with_auth, smtp_factories):
        conn = smtp_factories[0].return_value
        conn.quit.side_effect = smtplib.SMTPServerDisconnected("gone")
        client = make_client(env_config_with_auth, smtp_factories)

        client.send(["a@example.com"], "S", "B")

        conn.send_message.assert_called_once()

    def test_invalid_recipient_raises(self, env_config_with_auth, smtp_factories):
        client = make_client(env_config_with_auth, smtp_factories)

        with pytest.raises(DigestDeliveryError, match="Invalid digest recipient"):
            client.send(["not-an-email"], "S", "B")
        smtp_factories[0].assert_not_called()


class TestHelpers:
    def test_parse_recipients_from_string(self):
        assert parse_recipients("a@example.com, b@example.com,") == [
            "a@example.com",
            "b@example.com",
        ]

    def test_parse_recipients_invalid(self):
        with pytest.raises(ValueError):
            parse_recipients(["ok@example.com", "bad"])

    def test_sender_address_with_user(self, env_config_with_auth):
        assert build_sender_address(env_config_with_auth) == "Job Watch <user@example.com>"

    def test_sender_address_without_user(self, env_config_without_auth):
        assert build_sender_address(env_config_without_auth) == (
            "jobwatch <noreply@smtp.example.com>"
        )
