"""Data models for the matching engine."""

from dataclasses import dataclass, field
from typing import List


@dataclass
class MatchResult:
    """Outcome of evaluating one job against one MatchCriteria.

    Attributes:
        is_match: roleOk AND (employmentOk OR contract fallback) AND locationOk
        role_ok: At least one role keyword occurs in the job text
        employment_ok: An employment keyword occurs, or the text mentions "contract"
        location_ok: Location list is empty, or the location contains one of its entries
        matched_role_keywords: Role keywords found
        matched_employment_keywords: Employment keywords found
        contract_fallback: employment_ok came only from the "contract" fallback
    """

    is_match: bool
    role_ok: bool = False
    employment_ok: bool = False
    location_ok: bool = False
    matched_role_keywords: List[str] = field(default_factory=list)
    matched_employment_keywords: List[str] = field(default_factory=list)
    contract_fallback: bool = False

    @property
    def summary(self) -> str:
        """One-line explanation, e.g. ``role=backend java; employment=c2c; location=ok``."""
        employment = ", ".join(self.matched_employment_keywords) or (
            "contract (fallback)" if self.contract_fallback else "none"
        )
        return (
            f"role={', '.join(self.matched_role_keywords) or 'none'}; "
            f"employment={employment}; "
            f"location={'ok' if self.location_ok else 'rejected'}"
        )
