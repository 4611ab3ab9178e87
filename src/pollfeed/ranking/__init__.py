"""Pure ranking functions: engagement decay and personalized feed ordering."""

from .feed import FeedCandidate, FeedWindow, rank_candidates, relevance_score, resolve_window
from .scoring import EngagementSnapshot, engagement_score

__all__ = [
    "EngagementSnapshot",
    "FeedCandidate",
    "FeedWindow",
    "engagement_score",
    "rank_candidates",
    "relevance_score",
    "resolve_window",
]
