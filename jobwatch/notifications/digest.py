"""Per-cycle digest accumulation and composition."""

import threading
from datetime import datetime
from typing import Any, Dict, List, Optional

from jobwatch.domain.models import Job
from jobwatch.utils.timestamps import utc_now

from .models import DigestMessage
from .templates import TemplateRenderer


class DigestBuilder:
    """
    Collects a cycle's matches and composes one summary message.

    The body lists the first ``preview_limit`` matches in arrival order and
    ends with ``+K more`` when the rest were cut. A builder belongs to a
    single cycle; start a new one for the next cycle.
    """

    def __init__(
        self,
        preview_limit: int = 20,
        subject_prefix: str = "[jobwatch]",
        renderer: Optional[TemplateRenderer] = None,
    ):
        if preview_limit < 1:
            raise ValueError("preview_limit must be at least 1")
        self.preview_limit = preview_limit
        self.subject_prefix = subject_prefix
        self.renderer = renderer or TemplateRenderer()
        self._jobs: List[Job] = []
        self._lock = threading.Lock()

    def add(self, job: Job) -> None:
        with self._lock:
            self._jobs.append(job)

    @property
    def jobs(self) -> List[Job]:
        with self._lock:
            return list(self._jobs)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def build_context(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        jobs = self.jobs
        shown = jobs[: self.preview_limit]
        return {
            "subject_prefix": self.subject_prefix,
            "total": len(jobs),
            "remaining": len(jobs) - len(shown),
            "generated_at": (now or utc_now()).strftime("%Y-%m-%d %H:%M UTC"),
            "entries": [
                {
                    "title": job.title,
                    "company": job.company,
                    "location": job.location,
                    "contract": job.contract_type,
                    "url": job.url,
                }
                for job in shown
            ],
        }

    def compose(self, now: Optional[datetime] = None) -> Optional[DigestMessage]:
        """Render the digest, or None when nothing was accumulated.

        Raises:
            NotificationTemplateError: If rendering fails
        """
        context = self.build_context(now)
        if not context["total"]:
            return None

        rendered = self.renderer.render(context)
        return DigestMessage(
            subject=rendered["subject"],
            body=rendered["text_body"],
            total=context["total"],
            shown=len(context["entries"]),
        )
