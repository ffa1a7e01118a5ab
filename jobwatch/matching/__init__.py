"""Match filtering: keyword predicates and per-recipient subscriptions."""

from .engine import CONTRACT_FALLBACK_TERM, MatchFilter
from .models import MatchResult
from .subscriptions import SubscriptionRegistry

__all__ = ["MatchFilter", "MatchResult", "SubscriptionRegistry", "CONTRACT_FALLBACK_TERM"]
