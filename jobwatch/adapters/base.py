"""Base adapter class with shared functionality for all source adapters.

An adapter is bound to exactly one configured source (one Greenhouse board,
one Lever company, one Remotive category) and exposes a single operation,
``fetch()``, returning canonical ``Job`` records. Subclasses supply the
request (``_fetch_items``) and the per-item mapping (``_transform_job``);
the base class owns HTTP, truncation, per-item error isolation and logging.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from jobwatch.config.models import SourceConfig
from jobwatch.domain.models import Job
from jobwatch.logging import get_logger
from jobwatch.utils.text import clean_html, truncate_text

from .exceptions import (
    AdapterConfigurationError,
    AdapterHTTPError,
    AdapterResponseError,
    AdapterTimeoutError,
)

logger = get_logger(__name__, component="adapter")


class BaseAdapter(ABC):
    """Base class for all source adapters.

    Attributes:
        source_config: The source this adapter reads
        timeout: HTTP request timeout in seconds
        user_agent: User-Agent header for HTTP requests
        max_jobs: Maximum items to normalise per fetch (0 = unlimited)
        description_max_length: Description cut-off in characters (0 = unlimited)
    """

    ADAPTER_NAME = "base"

    def __init__(
        self,
        source_config: SourceConfig,
        timeout: int = 30,
        user_agent: str = "jobwatch/0.1",
        max_jobs: int = 1000,
        description_max_length: int = 1000,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize adapter with configuration.

        Args:
            source_config: Source to read
            timeout: HTTP request timeout in seconds (range 5-300)
            user_agent: User-Agent header for requests
            max_jobs: Maximum jobs to return (0 = unlimited)
            description_max_length: Description cut-off (0 = unlimited)
            session: Optional pre-built session (tests); one is created otherwise

        Raises:
            AdapterConfigurationError: If timeout is outside valid range or user_agent is empty
        """
        if not 5 <= timeout <= 300:
            raise AdapterConfigurationError(
                f"Timeout must be between 5 and 300 seconds, got: {timeout}"
            )
        if not user_agent or not user_agent.strip():
            raise AdapterConfigurationError("user_agent cannot be empty")

        self.source_config = source_config
        self.timeout = timeout
        self.user_agent = user_agent.strip()
        self.max_jobs = max_jobs
        self.description_max_length = description_max_length

        # One session per adapter: adapters never share connection state.
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})

    @property
    def source_id(self) -> str:
        return self.source_config.source_id

    def fetch(self) -> List[Job]:
        """Fetch and normalise every posting from this source.

        Malformed items are logged and skipped. Only a failure to read the
        source as a whole raises.

        Returns:
            List of Job models, possibly empty

        Raises:
            AdapterError: On connection, HTTP status, timeout or body-level parse failure
        """
        logger.info(
            f"Fetching jobs from {self.source_id}",
            extra={"event": "source.fetch.started", "source": self.source_id},
        )

        items = self._truncate_items(self._fetch_items())

        jobs = []
        skipped = 0
        for item in items:
            try:
                jobs.append(self._transform_job(item))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                skipped += 1
                logger.warning(
                    "Skipping malformed item",
                    extra={
                        "event": "source.item.skipped",
                        "source": self.source_id,
                        "item_id": item.get("id") if isinstance(item, dict) else None,
                        "error": str(e),
                    },
                )

        logger.debug(
            "Normalised source items",
            extra={
                "event": "source.fetch.normalised",
                "source": self.source_id,
                "count": len(jobs),
                "skipped": skipped,
            },
        )
        return jobs

    def close(self) -> None:
        self._session.close()

    @abstractmethod
    def _fetch_items(self) -> List[Dict[str, Any]]:
        """Perform the request(s) and return the raw provider items.

        Raises:
            AdapterError: If the body does not have the expected shape
        """

    @abstractmethod
    def _transform_job(self, item: Dict[str, Any]) -> Job:
        """Map one raw provider item to a Job.

        Raises:
            KeyError, ValueError, TypeError: On a malformed item (skipped by ``fetch``)
        """

    def _build_job(
        self,
        external_id: Any,
        title: Optional[str],
        url: Optional[str],
        company: Optional[str] = None,
        location: Optional[str] = None,
        description: Optional[str] = None,
        contract_type: Optional[str] = None,
        posted_at: Optional[datetime] = None,
    ) -> Job:
        """Assemble a Job with source-qualified id, company fallback and truncation."""
        external = str(external_id).strip() if external_id is not None else ""
        if not external:
            raise ValueError("Item has no id")

        return Job(
            id=f"{self.source_id}:{external}",
            source=self.source_id,
            title=title,
            company=company or self.source_config.name,
            location=location,
            description=truncate_text(description or "", self.description_max_length),
            url=url,
            contract_type=contract_type,
            posted_at=posted_at,
        )

    def _make_request(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Make HTTP request with error handling.

        Returns:
            Parsed JSON response (dict or list)

        Raises:
            AdapterHTTPError: On 4xx/5xx status or connection failure
            AdapterTimeoutError: On request timeout
            AdapterResponseError: On invalid JSON
        """
        try:
            logger.debug(
                f"HTTP {method} request to {url}",
                extra={
                    "event": "source.fetch.request",
                    "source": self.source_id,
                    "method": method,
                    "url": url,
                    "timeout": self.timeout,
                },
            )

            response = self._session.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise AdapterTimeoutError(
                f"Request to {url} timed out after {self.timeout} seconds",
                url=url,
                source=self.source_id,
            ) from e
        except requests.exceptions.RequestException as e:
            raise AdapterHTTPError(
                f"Request to {url} failed: {e}",
                status_code=0,
                url=url,
                source=self.source_id,
            ) from e

        if response.status_code >= 400:
            log_level = logging.WARNING if response.status_code >= 500 else logging.ERROR
            logger.log(
                log_level,
                f"HTTP {response.status_code} error from {url}",
                extra={
                    "event": "source.fetch.http_error",
                    "source": self.source_id,
                    "status_code": response.status_code,
                    "url": url,
                },
            )
            raise AdapterHTTPError(
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code,
                url=url,
                source=self.source_id,
            )

        try:
            return response.json()
        except ValueError as e:
            raise AdapterResponseError(
                f"Failed to parse JSON response from {url}: {e}", source=self.source_id
            ) from e

    def _expect_object(self, value: Any) -> Dict[str, Any]:
        if not isinstance(value, dict):
            raise AdapterResponseError(
                f"Expected JSON object response, got {type(value).__name__}",
                source=self.source_id,
            )
        return value

    def _expect_list(self, value: Any, field: str) -> List[Dict[str, Any]]:
        if not isinstance(value, list):
            raise AdapterResponseError(
                f"Expected '{field}' to be array, got {type(value).__name__}",
                source=self.source_id,
            )
        return value

    def _truncate_items(self, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Cut the raw item list to ``max_jobs`` if configured."""
        if self.max_jobs > 0 and len(items) > self.max_jobs:
            logger.warning(
                "Truncating jobs to max_jobs limit",
                extra={
                    "event": "source.fetch.truncated",
                    "source": self.source_id,
                    "total": len(items),
                    "max": self.max_jobs,
                },
            )
            return items[: self.max_jobs]
        return items

    @staticmethod
    def _clean_html(html_text: Optional[str]) -> str:
        return clean_html(html_text)
