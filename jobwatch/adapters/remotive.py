"""Remotive remote-jobs feed adapter."""

from typing import Any, Dict, List

from jobwatch.domain.models import Job
from jobwatch.utils.timestamps import parse_iso_datetime

from .base import BaseAdapter


class RemotiveAdapter(BaseAdapter):
    """Adapter for the Remotive public feed.

    The source identifier is a Remotive category slug (``software-dev``,
    ``devops``) or ``all`` for the unfiltered feed. Unlike the board
    adapters, postings here carry their own company name.

    API Details:
        Endpoint: https://remotive.com/api/remote-jobs?category={identifier}
        Method: GET
        Authentication: None (public)
        Response: JSON object with 'jobs' array
    """

    ADAPTER_NAME = "remotive"
    API_URL = "https://remotive.com/api/remote-jobs"

    def _fetch_items(self) -> List[Dict[str, Any]]:
        identifier = self.source_config.identifier
        params = None if identifier.lower() == "all" else {"category": identifier}
        response = self._make_request(self.API_URL, params=params)

        self._expect_object(response)
        return self._expect_list(response.get("jobs", []), "jobs")

    def _transform_job(self, item: Dict[str, Any]) -> Job:
        """Field mapping:
            id → external id
            title → title
            company_name → company
            candidate_required_location → location
            job_type ('full_time', 'contract') → contract_type
            description → description (HTML cleaned)
            url → url
            publication_date → posted_at
        """
        job_type = item.get("job_type")
        if isinstance(job_type, str):
            job_type = job_type.replace("_", " ").strip().title()

        return self._build_job(
            external_id=item["id"],
            title=item.get("title"),
            url=item.get("url"),
            company=item.get("company_name"),
            location=item.get("candidate_required_location"),
            description=self._clean_html(item.get("description")),
            contract_type=job_type,
            posted_at=parse_iso_datetime(item.get("publication_date")),
        )
