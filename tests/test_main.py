"""Unit tests for the main entry point.

Tests:
- CLI argument parsing
- Log level override priority
- Notification sink construction from config
- Run-once exit codes
- Startup failures (configuration, database, Redis)
"""

from unittest.mock import Mock, patch

import pytest

from jobwatch.config.environment import EnvironmentConfig
from jobwatch.config.exceptions import ConfigurationError
from jobwatch.config.models import (
    AppConfig,
    DigestConfig,
    LoggingConfig,
    MatchCriteria,
    RealtimeConfig,
    SourceConfig,
)
from jobwatch.main import build_fanout, build_parser, load_runtime_config, main, run_once
from jobwatch.notifications import RealtimePublishError, SMTPClient
from jobwatch.persistence import DatabaseConnectionError
from jobwatch.pipeline.models import CycleResult, CycleStats
from jobwatch.utils.timestamps import utc_now


def make_app_config(**overrides):
    fields = {
        "sources": [SourceConfig(name="Test", type="greenhouse", identifier="test")],
        "match": MatchCriteria(role_keywords="python"),
        "realtime": RealtimeConfig(enabled=False),
    }
    fields.update(overrides)
    return AppConfig(**fields)


@pytest.fixture
def env_config():
    return EnvironmentConfig(
        database_url="sqlite:///:memory:",
        smtp_host="smtp.example.com",
        smtp_port=587,
    )


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])

        assert args.config is None
        assert args.run_once is False
        assert args.log_level is None

    def test_flags(self):
        args = build_parser().parse_args(
            ["--config", "custom.yaml", "--run-once", "--log-level", "DEBUG"]
        )

        assert str(args.config) == "custom.yaml"
        assert args.run_once is True
        assert args.log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-level", "LOUD"])


class TestLoadRuntimeConfig:
    def test_cli_level_overrides_config(self, env_config):
        app_config = make_app_config(logging=LoggingConfig(level="WARNING"))

        with patch("jobwatch.main.load_config", return_value=(app_config, env_config)):
            loaded, _ = load_runtime_config(None, "DEBUG")

        assert loaded.logging.level == "DEBUG"
        assert app_config.logging.level == "WARNING"

    def test_config_level_kept_without_override(self, env_config):
        app_config = make_app_config(logging=LoggingConfig(level="WARNING"))

        with patch("jobwatch.main.load_config", return_value=(app_config, env_config)):
            loaded, _ = load_runtime_config(None, None)

        assert loaded is app_config

    def test_configuration_error_propagates(self):
        error = ConfigurationError("bad", errors=["sources: missing"])
        with patch("jobwatch.main.load_config", side_effect=error):
            with pytest.raises(ConfigurationError):
                load_runtime_config(None, None)


class TestBuildFanout:
    def test_all_sinks_disabled(self, env_config):
        fanout = build_fanout(make_app_config(), env_config)

        assert fanout.realtime is None
        assert fanout.digest_enabled is False

    def test_digest_sender_created_when_recipients_configured(self, env_config):
        app_config = make_app_config(digest=DigestConfig(recipients=["ops@example.com"]))

        fanout = build_fanout(app_config, env_config)

        assert isinstance(fanout.digest_sender, SMTPClient)
        assert fanout.digest_enabled is True

    @patch("jobwatch.main.RealtimePublisher")
    def test_realtime_publisher_pinged(self, mock_publisher_cls, env_config):
        publisher = mock_publisher_cls.from_url.return_value
        app_config = make_app_config(realtime=RealtimeConfig(channel_prefix="alerts"))

        fanout = build_fanout(app_config, env_config)

        mock_publisher_cls.from_url.assert_called_once_with(
            env_config.redis_url,
            channel_prefix="alerts",
            timeout=app_config.advanced.http_request_timeout,
        )
        publisher.ping.assert_called_once()
        assert fanout.realtime is publisher

    @patch("jobwatch.main.RealtimePublisher")
    def test_unreachable_redis_raises_and_closes(self, mock_publisher_cls, env_config):
        publisher = mock_publisher_cls.from_url.return_value
        publisher.ping.side_effect = RealtimePublishError("Redis ping failed")

        with pytest.raises(RealtimePublishError):
            build_fanout(make_app_config(realtime=RealtimeConfig()), env_config)

        publisher.close.assert_called_once()


class TestRunOnce:
    @pytest.mark.parametrize("success,expected", [(True, 0), (False, 1)])
    def test_exit_code_reflects_cycle_success(self, success, expected):
        pipeline = Mock()
        pipeline.run_cycle.return_value = CycleResult(
            success=success, stats=CycleStats(cycle_id="abc", timestamp=utc_now())
        )

        assert run_once(pipeline) == expected

    def test_source_failures_do_not_change_exit_code(self):
        stats = CycleStats(cycle_id="abc", timestamp=utc_now())
        stats.failed_sources.append("lever:example")
        pipeline = Mock()
        pipeline.run_cycle.return_value = CycleResult(success=True, stats=stats)

        assert run_once(pipeline) == 0


@patch("jobwatch.main.close_database")
@patch("jobwatch.main.configure_logging")
@patch("jobwatch.main.load_dotenv")
class TestMain:
    """main() with configuration, database and pipeline construction patched."""

    @patch("jobwatch.main.build_pipeline")
    @patch("jobwatch.main.init_database")
    @patch("jobwatch.main.load_runtime_config")
    def test_run_once_success(
        self,
        mock_load,
        mock_init_db,
        mock_build_pipeline,
        mock_dotenv,
        mock_configure_logging,
        mock_close_db,
        env_config,
    ):
        mock_load.return_value = (make_app_config(), env_config)
        pipeline = mock_build_pipeline.return_value
        pipeline.run_cycle.return_value = CycleResult(
            success=True, stats=CycleStats(cycle_id="abc", timestamp=utc_now())
        )

        exit_code = main(["--run-once"])

        assert exit_code == 0
        mock_configure_logging.assert_called_once()
        mock_init_db.assert_called_once_with("sqlite:///:memory:")
        pipeline.run_cycle.assert_called_once()
        pipeline.close.assert_called_once()
        mock_close_db.assert_called_once()

    @patch("jobwatch.main.build_pipeline")
    @patch("jobwatch.main.init_database")
    @patch("jobwatch.main.load_runtime_config")
    def test_run_once_failure(
        self,
        mock_load,
        mock_init_db,
        mock_build_pipeline,
        mock_dotenv,
        mock_configure_logging,
        mock_close_db,
        env_config,
    ):
        mock_load.return_value = (make_app_config(), env_config)
        mock_build_pipeline.return_value.run_cycle.return_value = CycleResult(
            success=False,
            stats=CycleStats(cycle_id="abc", timestamp=utc_now()),
            error="boom",
        )

        assert main(["--run-once"]) == 1

    @patch("jobwatch.main.run_scheduled", return_value=0)
    @patch("jobwatch.main.build_pipeline")
    @patch("jobwatch.main.init_database")
    @patch("jobwatch.main.load_runtime_config")
    def test_scheduled_mode_uses_poll_interval(
        self,
        mock_load,
        mock_init_db,
        mock_build_pipeline,
        mock_run_scheduled,
        mock_dotenv,
        mock_configure_logging,
        mock_close_db,
        env_config,
    ):
        mock_load.return_value = (make_app_config(poll_interval="30m"), env_config)

        assert main([]) == 0

        mock_run_scheduled.assert_called_once_with(mock_build_pipeline.return_value, 1800)

    @patch("jobwatch.main.load_runtime_config")
    def test_configuration_error_exits_1(
        self, mock_load, mock_dotenv, mock_configure_logging, mock_close_db, capsys
    ):
        mock_load.side_effect = ConfigurationError("bad config", errors=["match: missing"])

        assert main(["--run-once"]) == 1
        assert "Configuration Error" in capsys.readouterr().err
        mock_close_db.assert_called_once()

    @patch("jobwatch.main.build_pipeline")
    @patch("jobwatch.main.init_database")
    @patch("jobwatch.main.load_runtime_config")
    def test_database_failure_exits_1(
        self,
        mock_load,
        mock_init_db,
        mock_build_pipeline,
        mock_dotenv,
        mock_configure_logging,
        mock_close_db,
        env_config,
        capsys,
    ):
        mock_load.return_value = (make_app_config(), env_config)
        mock_init_db.side_effect = DatabaseConnectionError("cannot connect")

        assert main(["--run-once"]) == 1
        assert "Startup failed" in capsys.readouterr().err
        mock_build_pipeline.assert_not_called()

    @patch("jobwatch.main.build_pipeline")
    @patch("jobwatch.main.RealtimePublisher")
    @patch("jobwatch.main.init_database")
    @patch("jobwatch.main.load_runtime_config")
    def test_redis_failure_exits_1(
        self,
        mock_load,
        mock_init_db,
        mock_publisher_cls,
        mock_build_pipeline,
        mock_dotenv,
        mock_configure_logging,
        mock_close_db,
        env_config,
    ):
        mock_load.return_value = (make_app_config(realtime=RealtimeConfig()), env_config)
        mock_publisher_cls.from_url.return_value.ping.side_effect = RealtimePublishError("down")

        assert main(["--run-once"]) == 1
        mock_build_pipeline.assert_not_called()
        mock_close_db.assert_called_once()
