"""Ashby job board adapter."""

from typing import Any, Dict, List

from jobwatch.domain.models import Job
from jobwatch.utils.timestamps import parse_iso_datetime

from .base import BaseAdapter


class AshbyAdapter(BaseAdapter):
    """Adapter for an Ashby hosted job board.

    API Details:
        Endpoint: https://api.ashbyhq.com/posting-api/job-board/{identifier}
        Method: GET
        Authentication: None for public boards
        Response: JSON object with 'jobs' array; unlisted postings are skipped
    """

    ADAPTER_NAME = "ashby"
    API_BASE_URL = "https://api.ashbyhq.com/posting-api/job-board"

    def _fetch_items(self) -> List[Dict[str, Any]]:
        url = f"{self.API_BASE_URL}/{self.source_config.identifier}"
        response = self._make_request(url)

        self._expect_object(response)
        jobs = self._expect_list(response.get("jobs", []), "jobs")
        return [job for job in jobs if not isinstance(job, dict) or job.get("isListed", True)]

    def _transform_job(self, item: Dict[str, Any]) -> Job:
        """Field mapping:
            id → external id
            title → title
            location (string or {name}) → location
            employmentType → contract_type ('FullTime' → 'Full Time')
            descriptionPlain, else descriptionHtml cleaned → description
            jobUrl (or applyUrl) → url
            publishedAt → posted_at
        """
        location = item.get("location")
        if isinstance(location, dict):
            location = location.get("name")
        if item.get("isRemote") and location and "remote" not in location.lower():
            location = f"{location} (Remote)"

        description = (item.get("descriptionPlain") or "").strip() or self._clean_html(
            item.get("descriptionHtml") or item.get("description")
        )

        return self._build_job(
            external_id=item["id"],
            title=item.get("title"),
            url=item.get("jobUrl") or item.get("applyUrl") or item.get("externalLink"),
            location=location,
            description=description,
            contract_type=self._humanize_employment_type(item.get("employmentType")),
            posted_at=parse_iso_datetime(item.get("publishedAt") or item.get("publishedDate")),
        )

    @staticmethod
    def _humanize_employment_type(value: Any) -> Any:
        if not isinstance(value, str):
            return value
        spaced = "".join(f" {c}" if c.isupper() and i else c for i, c in enumerate(value))
        return spaced.strip()
