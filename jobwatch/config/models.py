"""Configuration schema (pydantic).

All models are frozen: the snapshot produced by ``load_config`` is shared by
every component for the life of the process and never mutated.
"""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from jobwatch.utils.text import split_csv, split_keywords

from .duration import DurationParseError, parse_duration, validate_duration_range
from .environment import is_valid_email


class SourceType(str, Enum):
    """Supported job sources."""

    GREENHOUSE = "greenhouse"
    LEVER = "lever"
    ASHBY = "ashby"
    REMOTIVE = "remotive"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    JSON = "json"
    KEY_VALUE = "key-value"


class SourceConfig(BaseModel):
    """One board or feed to poll."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    name: str = Field(..., min_length=1, description="Display name, used as company fallback")
    type: SourceType = Field(..., description="Source kind")
    identifier: str = Field(..., min_length=1, description="Board token, org id or feed category")
    enabled: bool = Field(True, description="Whether to poll this source")

    @field_validator("name", "identifier")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped

    @property
    def source_id(self) -> str:
        """Canonical origin string stamped on every Job, e.g. ``greenhouse:acme``."""
        return f"{self.type}:{self.identifier}"


class MatchCriteria(BaseModel):
    """Keyword lists deciding whether a job is relevant.

    Each list accepts a YAML list or a comma-separated string. Entries are
    trimmed and lower-cased at load time so matching never re-normalises.
    """

    model_config = ConfigDict(frozen=True)

    role_keywords: List[str] = Field(..., description="At least one must appear in the job text")
    employment_keywords: List[str] = Field(
        default_factory=list,
        description="At least one must appear (the word 'contract' always qualifies)",
    )
    allowed_locations: List[str] = Field(
        default_factory=list,
        description="Location must contain one of these; empty allows any location",
    )

    @field_validator("role_keywords", "employment_keywords", "allowed_locations", mode="before")
    @classmethod
    def normalize_keywords(cls, v):
        return split_keywords(v)

    @field_validator("role_keywords")
    @classmethod
    def require_role_keywords(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("role_keywords must contain at least one keyword")
        return v


class RecipientConfig(BaseModel):
    """A realtime subscriber and, optionally, its own interest criteria."""

    model_config = ConfigDict(frozen=True)

    recipient_id: str = Field(..., min_length=1, pattern=r"^[^\s:*]+$")
    match: Optional[MatchCriteria] = Field(
        None, description="Overrides the global match criteria for this recipient"
    )


class RealtimeConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(True, description="Publish each match on the pub/sub channel")
    channel_prefix: str = Field("notifications", min_length=1)


class DigestConfig(BaseModel):
    """Batched end-of-cycle summary email."""

    model_config = ConfigDict(frozen=True)

    recipients: List[str] = Field(
        default_factory=list, description="Email addresses; empty disables the digest"
    )
    preview_limit: int = Field(20, ge=1, le=200, description="Entries listed before '+K more'")
    subject_prefix: str = Field("[jobwatch]")
    use_tls: bool = Field(True, description="STARTTLS on non-465 ports")

    @field_validator("recipients", mode="before")
    @classmethod
    def split_recipients(cls, v):
        return split_csv(v)

    @field_validator("recipients")
    @classmethod
    def validate_addresses(cls, v: List[str]) -> List[str]:
        invalid = [addr for addr in v if not is_valid_email(addr)]
        if invalid:
            raise ValueError(f"Invalid email address(es): {', '.join(invalid)}")
        return v

    @property
    def enabled(self) -> bool:
        return bool(self.recipients)


class LedgerConfig(BaseModel):
    """Where seen fingerprints live and how long they are kept."""

    model_config = ConfigDict(frozen=True)

    backend: Literal["database", "memory"] = Field("database")
    retention_days: int = Field(30, ge=0, description="0 keeps fingerprints forever")
    max_entries: int = Field(100_000, ge=0, description="Memory backend bound; 0 = unbounded")


class LoggingConfig(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    level: LogLevel = Field(LogLevel.INFO)
    format: LogFormat = Field(LogFormat.KEY_VALUE)


class AdvancedConfig(BaseModel):
    """HTTP and processing limits."""

    model_config = ConfigDict(frozen=True)

    http_request_timeout: int = Field(30, ge=5, le=300, description="Per-request timeout (s)")
    user_agent: str = Field("jobwatch/0.1", min_length=1)
    max_jobs_per_source: int = Field(1000, ge=0, description="0 = unlimited")
    description_max_length: int = Field(1000, ge=0, description="0 = keep full text")
    fetch_max_workers: int = Field(0, ge=0, le=64, description="0 = one thread per source")

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class AppConfig(BaseModel):
    """Root configuration snapshot."""

    model_config = ConfigDict(frozen=True)

    sources: List[SourceConfig] = Field(..., min_length=1)
    match: MatchCriteria
    poll_interval: str = Field("15m", description="Time between scheduled cycles")
    recipients: List[RecipientConfig] = Field(
        default_factory=lambda: [RecipientConfig(recipient_id="demo")]
    )
    realtime: RealtimeConfig = Field(default_factory=RealtimeConfig)
    digest: DigestConfig = Field(default_factory=DigestConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)

    @field_validator("poll_interval", mode="before")
    @classmethod
    def validate_poll_interval(cls, v) -> str:
        text = str(v).strip()
        try:
            validate_duration_range(parse_duration(text))
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return text

    @model_validator(mode="after")
    def validate_sources_and_recipients(self):
        if not any(source.enabled for source in self.sources):
            raise ValueError("At least one source must be enabled. All sources have enabled=false.")

        seen_sources = set()
        for source in self.sources:
            if source.source_id in seen_sources:
                raise ValueError(f"Duplicate source: {source.source_id} appears multiple times")
            seen_sources.add(source.source_id)

        if not self.recipients:
            raise ValueError("At least one recipient is required")
        recipient_ids = [r.recipient_id for r in self.recipients]
        duplicates = sorted({r for r in recipient_ids if recipient_ids.count(r) > 1})
        if duplicates:
            raise ValueError(f"Duplicate recipient ids: {', '.join(duplicates)}")

        return self

    @property
    def poll_interval_seconds(self) -> int:
        return parse_duration(self.poll_interval)

    def get_enabled_sources(self) -> List[SourceConfig]:
        return [source for source in self.sources if source.enabled]
