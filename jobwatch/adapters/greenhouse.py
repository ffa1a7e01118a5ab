"""Greenhouse job board adapter."""

from typing import Any, Dict, List, Optional

from jobwatch.domain.models import Job
from jobwatch.utils.timestamps import parse_iso_datetime

from .base import BaseAdapter


class GreenhouseAdapter(BaseAdapter):
    """Adapter for a Greenhouse public job board.

    API Details:
        Endpoint: https://boards-api.greenhouse.io/v1/boards/{identifier}/jobs?content=true
        Method: GET
        Authentication: None (public)
        Response: JSON object with 'jobs' array
    """

    ADAPTER_NAME = "greenhouse"
    API_BASE_URL = "https://boards-api.greenhouse.io/v1/boards"

    # Metadata fields folded into the description so keywords in them can match.
    METADATA_FIELDS = {
        "Career Site Department": "Department",
        "Department": "Department",
        "Employment Type": "Employment Type",
    }

    def _fetch_items(self) -> List[Dict[str, Any]]:
        url = f"{self.API_BASE_URL}/{self.source_config.identifier}/jobs"
        response = self._make_request(url, params={"content": "true"})

        self._expect_object(response)
        return self._expect_list(response.get("jobs", []), "jobs")

    def _transform_job(self, item: Dict[str, Any]) -> Job:
        """Field mapping:
            id → external id
            title → title
            location.name (+ 'Job Posting Location' metadata) → location
            content + selected metadata → description (HTML cleaned)
            absolute_url → url
            metadata 'Employment Type' → contract_type
            first_published (or updated_at) → posted_at
        """
        metadata = item.get("metadata") or []
        description = "\n\n".join(
            part
            for part in (
                self._clean_html(item.get("content") or item.get("description")),
                self._metadata_text(metadata),
            )
            if part
        )

        return self._build_job(
            external_id=item["id"],
            title=item.get("title"),
            url=item.get("absolute_url"),
            location=self._combined_location(item),
            description=description,
            contract_type=self._metadata_value(metadata, "Employment Type"),
            posted_at=parse_iso_datetime(item.get("first_published") or item.get("updated_at")),
        )

    @staticmethod
    def _metadata_value(metadata: List[Dict[str, Any]], name: str) -> Optional[str]:
        for entry in metadata:
            if entry.get("name") != name or not entry.get("value"):
                continue
            value = entry["value"]
            if isinstance(value, list):
                return ", ".join(str(v) for v in value if v) or None
            return str(value)
        return None

    def _metadata_text(self, metadata: List[Dict[str, Any]]) -> str:
        lines = []
        for name, label in self.METADATA_FIELDS.items():
            value = self._metadata_value(metadata, name)
            if value:
                lines.append(f"{label}: {value}")
        return "\n".join(lines)

    def _combined_location(self, item: Dict[str, Any]) -> Optional[str]:
        """Top-level location, with the metadata location appended when it differs."""
        top_level = (item.get("location") or {}).get("name")
        from_metadata = self._metadata_value(item.get("metadata") or [], "Job Posting Location")

        if top_level and from_metadata and top_level.lower() != from_metadata.lower():
            return f"{top_level} ({from_metadata})"
        return top_level or from_metadata
