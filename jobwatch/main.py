"""Main entry point for the jobwatch service."""

import argparse
import signal
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from jobwatch.config.environment import EnvironmentConfig
from jobwatch.config.exceptions import ConfigurationError
from jobwatch.config.loader import load_config
from jobwatch.config.models import AppConfig
from jobwatch.logging import get_logger
from jobwatch.logging.config import configure_logging
from jobwatch.notifications.models import RealtimePublishError
from jobwatch.notifications.realtime import RealtimePublisher
from jobwatch.notifications.service import NotificationFanout
from jobwatch.notifications.smtp_client import SMTPClient
from jobwatch.persistence.database import close_database, init_database
from jobwatch.persistence.exceptions import PersistenceError
from jobwatch.pipeline.runner import JobPipeline, build_pipeline
from jobwatch.scheduler import SchedulerService

logger = get_logger(__name__, component="cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jobwatch",
        description="jobwatch - poll job boards, match postings and fan out notifications",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml, then config/config.yaml)",
    )
    parser.add_argument(
        "--run-once",
        action="store_true",
        help="Run a single cycle immediately and exit (exit code reflects cycle success)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    return parser


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and apply the CLI log level.

    Priority for the log level: CLI > LOG_LEVEL > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        app_config = app_config.model_copy(
            update={
                "logging": app_config.logging.model_copy(update={"level": log_level_override})
            }
        )
    return app_config, env_config


def build_fanout(app_config: AppConfig, env_config: EnvironmentConfig) -> NotificationFanout:
    """
    Create the notification sinks enabled by configuration.

    Raises:
        RealtimePublishError: If realtime is enabled and Redis does not answer
    """
    realtime = None
    if app_config.realtime.enabled:
        realtime = RealtimePublisher.from_url(
            env_config.redis_url,
            channel_prefix=app_config.realtime.channel_prefix,
            timeout=app_config.advanced.http_request_timeout,
        )
        try:
            realtime.ping()
        except RealtimePublishError:
            realtime.close()
            raise
        logger.info(
            "Realtime channel connected",
            extra={
                "event": "realtime.connected",
                "channel_prefix": app_config.realtime.channel_prefix,
            },
        )

    digest_sender = None
    if app_config.digest.enabled:
        digest_sender = SMTPClient(env_config, use_tls=app_config.digest.use_tls)

    return NotificationFanout(
        realtime=realtime,
        digest_sender=digest_sender,
        digest_config=app_config.digest,
    )


def run_once(pipeline: JobPipeline) -> int:
    result = pipeline.run_cycle()
    stats = result.stats
    logger.info(
        "Single cycle complete",
        extra={
            "event": "service.run_once.completed",
            "success": result.success,
            "total_fetched": stats.total_fetched,
            "total_new": stats.total_new,
            "total_matched": stats.total_matched,
            "failed_sources": stats.failed_sources,
        },
    )
    return 0 if result.success else 1


def run_scheduled(pipeline: JobPipeline, interval_seconds: int) -> int:
    """Run cycles until SIGINT/SIGTERM."""
    shutdown_event = threading.Event()
    scheduler_service = SchedulerService(
        pipeline=pipeline,
        interval_seconds=interval_seconds,
        shutdown_event=shutdown_event,
    )

    def signal_handler(signum, frame):
        logger.info(
            f"Received signal {signum}, shutting down",
            extra={"event": "service.signal_received", "signal": signum},
        )
        scheduler_service.shutdown(wait=False)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    scheduler_service.start()
    logger.info(
        "Scheduler started. Press Ctrl+C to stop",
        extra={"event": "service.daemon_mode.started"},
    )

    try:
        shutdown_event.wait()
    except KeyboardInterrupt:
        logger.info(
            "Keyboard interrupt received, shutting down",
            extra={"event": "service.keyboard_interrupt"},
        )
        scheduler_service.shutdown(wait=False)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    load_dotenv()
    start_time = time.time()
    args = build_parser().parse_args(argv)
    pipeline = None

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        configure_logging(
            level=app_config.logging.level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )
        logger.info(
            "jobwatch starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config or "config.yaml"),
                "log_level": app_config.logging.level,
                "run_once": args.run_once,
            },
        )

        init_database(env_config.database_url)
        fanout = build_fanout(app_config, env_config)
        pipeline = build_pipeline(app_config, fanout)

        logger.info(
            "Configuration loaded",
            extra={
                "event": "config.loaded",
                "source_count": len(app_config.sources),
                "enabled_source_count": len(app_config.get_enabled_sources()),
                "recipient_count": len(app_config.recipients),
                "poll_interval_seconds": app_config.poll_interval_seconds,
                "realtime_enabled": fanout.realtime is not None,
                "digest_enabled": fanout.digest_enabled,
                "ledger_backend": app_config.ledger.backend,
            },
        )

        if args.run_once:
            return run_once(pipeline)
        return run_scheduled(pipeline, app_config.poll_interval_seconds)

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except (PersistenceError, RealtimePublishError) as e:
        print(f"Startup failed: {e}", file=sys.stderr)
        logger.critical(
            f"Startup failed: {e}",
            extra={"event": "service.startup.failed", "error_type": type(e).__name__},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    finally:
        if pipeline is not None:
            pipeline.close()
        close_database()
        logger.info(
            "jobwatch stopped",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )


if __name__ == "__main__":
    sys.exit(main())
