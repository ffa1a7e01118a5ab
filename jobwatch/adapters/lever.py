"""Lever postings adapter."""

from typing import Any, Dict, List

from jobwatch.domain.models import Job
from jobwatch.utils.timestamps import from_unix_millis

from .base import BaseAdapter


class LeverAdapter(BaseAdapter):
    """Adapter for a company's Lever postings.

    API Details:
        Endpoint: https://api.lever.co/v0/postings/{identifier}?mode=json
        Method: GET
        Authentication: None (public)
        Response: JSON array of posting objects (not wrapped in object)
    """

    ADAPTER_NAME = "lever"
    API_BASE_URL = "https://api.lever.co/v0/postings"

    def _fetch_items(self) -> List[Dict[str, Any]]:
        url = f"{self.API_BASE_URL}/{self.source_config.identifier}"
        response = self._make_request(url, params={"mode": "json"})

        # Lever returns a bare array; accept a wrapped object too.
        if isinstance(response, dict):
            response = response.get("postings", [])
        return self._expect_list(response, "postings")

    def _transform_job(self, item: Dict[str, Any]) -> Job:
        """Field mapping:
            id → external id
            text → title
            categories.location → location
            categories.commitment → contract_type
            descriptionPlain + additionalPlain → description (HTML fallback)
            hostedUrl → url
            createdAt (epoch ms) → posted_at
        """
        categories = item.get("categories") or {}
        if not isinstance(categories, dict):
            categories = {}

        return self._build_job(
            external_id=item["id"],
            title=item.get("text"),
            url=item.get("hostedUrl"),
            location=categories.get("location"),
            description=self._description(item),
            contract_type=categories.get("commitment"),
            posted_at=from_unix_millis(item.get("createdAt")),
        )

    def _description(self, item: Dict[str, Any]) -> str:
        """Prefer the plain-text fields; fall back to cleaning the HTML ones."""
        plain = [(item.get(k) or "").strip() for k in ("descriptionPlain", "additionalPlain")]
        if any(plain):
            return "\n\n".join(p for p in plain if p)

        html_parts = [(item.get(k) or "").strip() for k in ("description", "additional")]
        return self._clean_html("\n\n".join(p for p in html_parts if p))
