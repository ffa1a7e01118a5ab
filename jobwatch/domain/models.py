"""Core domain models: the canonical Job and the realtime notification payload.

- Job: source-normalised posting, the only shape that leaves an adapter
- NotificationPayload: the view of a matched Job published to recipients
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobwatch.utils.hashing import fingerprint_job
from jobwatch.utils.timestamps import ensure_utc, to_epoch_millis, utc_now


class Job(BaseModel):
    """Canonical job posting.

    ``title``, ``company``, ``location``, ``url`` and ``description`` are never
    None: missing provider values collapse to ``""`` so the fingerprint stays
    deterministic. ``contract_type`` and ``posted_at`` are genuinely optional
    and a None there means "unknown", which the storage merge treats as
    "keep what we already have".
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "greenhouse:acme:4012345",
                "source": "greenhouse:acme",
                "title": "Backend Java Engineer",
                "company": "Acme",
                "location": "Remote, USA",
                "description": "C2C contract available...",
                "url": "https://boards.greenhouse.io/acme/jobs/4012345",
                "contract_type": "Contract",
                "posted_at": "2025-11-01T12:00:00Z",
            }
        },
    )

    id: str = Field(..., min_length=1, description="Source-qualified unique id")
    source: str = Field(..., min_length=1, description="Origin, e.g. 'greenhouse:acme'")
    title: str = Field("", description="Job title")
    company: str = Field("", description="Hiring company")
    location: str = Field("", description="Free-text location")
    description: str = Field("", description="Plain-text description, truncated by the adapter")
    url: str = Field("", description="Link to the posting")
    contract_type: Optional[str] = Field(None, description="Employment/contract type if known")
    posted_at: Optional[datetime] = Field(None, description="When the posting went live (UTC)")

    @field_validator("id", "source", mode="before")
    @classmethod
    def strip_identity(cls, v: Any) -> str:
        if v is None:
            raise ValueError("Field is required")
        return str(v).strip()

    @field_validator("title", "company", "location", "description", "url", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        """Coerce missing text to ``""`` and trim surrounding whitespace."""
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("contract_type", mode="before")
    @classmethod
    def blank_contract_to_none(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        stripped = str(v).strip()
        return stripped or None

    @field_validator("posted_at")
    @classmethod
    def posted_at_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @property
    def fingerprint(self) -> str:
        """Identity digest over source, id, url, title and company."""
        return fingerprint_job(self)

    def searchable_text(self) -> str:
        """Lower-cased title, company, location and description joined by spaces."""
        return " ".join((self.title, self.company, self.location, self.description)).lower()


class NotificationPayload(BaseModel):
    """What a recipient receives on ``notifications:<recipient_id>``.

    Serialised with the camel-case wire names (``jobId``, ``ts``) that the
    realtime relay forwards to connected clients unchanged.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    job_id: str = Field(..., alias="jobId")
    title: str
    company: str
    location: str
    url: str
    contract: Optional[str] = None
    timestamp: int = Field(..., alias="ts", description="Epoch milliseconds at publish time")

    @classmethod
    def from_job(cls, job: Job, now: Optional[datetime] = None) -> "NotificationPayload":
        return cls(
            job_id=job.id,
            title=job.title,
            company=job.company,
            location=job.location,
            url=job.url,
            contract=job.contract_type,
            timestamp=to_epoch_millis(now or utc_now()),
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
