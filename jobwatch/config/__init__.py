"""Configuration management for jobwatch."""

from .duration import DurationParseError, parse_duration
from .environment import EnvironmentConfig, load_environment_config, strip_sslmode
from .exceptions import ConfigurationError
from .loader import load_config, parse_app_config, validate_config_file
from .models import (
    AdvancedConfig,
    AppConfig,
    DigestConfig,
    LedgerConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    MatchCriteria,
    RealtimeConfig,
    RecipientConfig,
    SourceConfig,
    SourceType,
)

__all__ = [
    # Loader functions
    "load_config",
    "parse_app_config",
    "validate_config_file",
    "load_environment_config",
    "parse_duration",
    "strip_sslmode",
    # Configuration models
    "AppConfig",
    "SourceConfig",
    "MatchCriteria",
    "RecipientConfig",
    "RealtimeConfig",
    "DigestConfig",
    "LedgerConfig",
    "LoggingConfig",
    "AdvancedConfig",
    "EnvironmentConfig",
    # Enums
    "SourceType",
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
    "DurationParseError",
]
