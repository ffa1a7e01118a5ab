"""Recipient interest registry.

Maps each recipient id to the MatchFilter that decides whether a job is
relevant to them. Recipients without their own criteria share the global
filter.
"""

from typing import Dict, Iterable, List, Tuple

from jobwatch.config.models import AppConfig, MatchCriteria
from jobwatch.domain.models import Job

from .engine import MatchFilter


class SubscriptionRegistry:
    """recipient_id → MatchFilter."""

    def __init__(self, subscriptions: Iterable[Tuple[str, MatchCriteria]]):
        self._filters: Dict[str, MatchFilter] = {}
        for recipient_id, criteria in subscriptions:
            if recipient_id in self._filters:
                raise ValueError(f"Duplicate recipient id: {recipient_id}")
            self._filters[recipient_id] = MatchFilter(criteria)

    @classmethod
    def from_config(cls, app_config: AppConfig) -> "SubscriptionRegistry":
        return cls(
            (recipient.recipient_id, recipient.match or app_config.match)
            for recipient in app_config.recipients
        )

    @property
    def recipients(self) -> List[str]:
        return list(self._filters)

    def filter_for(self, recipient_id: str) -> MatchFilter:
        return self._filters[recipient_id]

    def interested_recipients(self, job: Job) -> List[str]:
        """Recipients whose criteria match ``job``, in registration order."""
        return [rid for rid, match_filter in self._filters.items() if match_filter.matches(job)]

    def __len__(self) -> int:
        return len(self._filters)
