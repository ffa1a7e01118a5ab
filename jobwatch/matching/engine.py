"""Keyword match filter.

A job matches when all three predicates hold:

    roleOk AND (employmentOk OR text contains "contract") AND locationOk

Every comparison is case-insensitive substring containment, not word
matching: the keyword "java" also matches "javascript". Keywords are
lower-cased once at config load (see MatchCriteria), the job text once per
evaluation.
"""

from typing import List, Sequence

from jobwatch.config.models import MatchCriteria
from jobwatch.domain.models import Job
from jobwatch.logging import get_logger

from .models import MatchResult

logger = get_logger(__name__, component="matcher")

CONTRACT_FALLBACK_TERM = "contract"


def _found(keywords: Sequence[str], text: str) -> List[str]:
    return [keyword for keyword in keywords if keyword in text]


class MatchFilter:
    """Evaluates jobs against one immutable MatchCriteria."""

    def __init__(self, criteria: MatchCriteria):
        self.criteria = criteria

    def matches(self, job: Job) -> bool:
        return self.evaluate(job).is_match

    def evaluate(self, job: Job) -> MatchResult:
        """Evaluate all three predicates and record which keywords fired."""
        text = job.searchable_text()
        location = job.location.lower()

        matched_roles = _found(self.criteria.role_keywords, text)
        matched_employment = _found(self.criteria.employment_keywords, text)
        contract_fallback = not matched_employment and CONTRACT_FALLBACK_TERM in text

        role_ok = bool(matched_roles)
        employment_ok = bool(matched_employment) or contract_fallback
        location_ok = not self.criteria.allowed_locations or bool(
            _found(self.criteria.allowed_locations, location)
        )

        result = MatchResult(
            is_match=role_ok and employment_ok and location_ok,
            role_ok=role_ok,
            employment_ok=employment_ok,
            location_ok=location_ok,
            matched_role_keywords=matched_roles,
            matched_employment_keywords=matched_employment,
            contract_fallback=contract_fallback,
        )

        logger.debug(
            "Job evaluated",
            extra={
                "event": "match.evaluated",
                "job_id": job.id,
                "is_match": result.is_match,
                "summary": result.summary,
            },
        )
        return result
