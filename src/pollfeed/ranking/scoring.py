"""Engagement scoring with exponential age decay.

The score is a heuristic: a weighted blend of a post's counters multiplied by
``exp(-age_hours / DECAY_HOURS)``. Shares weigh the most and views the least.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pollfeed.core.errors import InvalidEngagementStateError
from pollfeed.db.time import as_utc

VOTE_WEIGHT = 1.0
LIKE_WEIGHT = 0.5
SHARE_WEIGHT = 2.0
VIEW_WEIGHT = 0.1

# Decay rate parameter in hours, not a half-life.
DECAY_HOURS = 48.0

SECONDS_PER_HOUR = 3600.0

_COUNTER_FIELDS = ("total_votes", "likes_count", "shares", "views")


@dataclass(frozen=True, slots=True)
class EngagementSnapshot:
    """Validated counters and creation time of a single post."""

    total_votes: int
    likes_count: int
    shares: int
    views: int
    created_at: datetime

    @classmethod
    def from_post(cls, post: Any) -> EngagementSnapshot:
        """Build a snapshot from any object exposing post counter attributes.

        Raises:
            InvalidEngagementStateError: If a counter is missing or negative, or the
                creation timestamp is missing.
        """
        counters: dict[str, int] = {}
        for name in _COUNTER_FIELDS:
            value = getattr(post, name, None)
            if value is None or value < 0:
                raise InvalidEngagementStateError(
                    f"Post {getattr(post, 'id', '?')} has invalid {name}: {value!r}"
                )
            counters[name] = int(value)

        created_at = getattr(post, "created_at", None)
        if not isinstance(created_at, datetime):
            raise InvalidEngagementStateError(
                f"Post {getattr(post, 'id', '?')} has no creation timestamp"
            )
        return cls(created_at=as_utc(created_at), **counters)

    @property
    def raw_score(self) -> float:
        """Return the undecayed weighted counter blend."""
        return (
            self.total_votes * VOTE_WEIGHT
            + self.likes_count * LIKE_WEIGHT
            + self.shares * SHARE_WEIGHT
            + self.views * VIEW_WEIGHT
        )


def age_in_hours(created_at: datetime, now: datetime) -> float:
    """Return the non-negative age in hours between ``created_at`` and ``now``."""
    seconds = (as_utc(now) - as_utc(created_at)).total_seconds()
    return max(0.0, seconds / SECONDS_PER_HOUR)


def decay_factor(created_at: datetime, now: datetime) -> float:
    """Return the exponential decay multiplier for a post of the given age."""
    return math.exp(-age_in_hours(created_at, now) / DECAY_HOURS)


def engagement_score(snapshot: EngagementSnapshot, now: datetime) -> float:
    """Score a post's engagement at ``now``.

    Example:
        10 votes, 4 likes, 3 shares and 50 views at 24 hours old give
        ``23 * exp(-0.5)``, roughly 13.95.
    """
    return snapshot.raw_score * decay_factor(snapshot.created_at, now)
