"""Personalized feed ordering.

Relevance of a candidate post for a user is::

    TAG_MATCH_WEIGHT * |tags(post) & interests(user)| + trending_score(post)

plus, when enabled, a recency term of ``age_ms / RECENCY_BONUS_DIVISOR``.
Candidates are ordered by relevance, then by creation time, newest first.
Posts the user already interacted with are never candidates.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pollfeed.db.time import as_utc

TAG_MATCH_WEIGHT = 10.0
RECENCY_BONUS_DIVISOR = 1e9

DEFAULT_LIMIT = 20
DEFAULT_OFFSET = 0


@dataclass(frozen=True, slots=True)
class FeedWindow:
    """Non-negative ``[offset, offset + limit)`` slice over an ordered feed."""

    limit: int
    offset: int

    def apply(self, items: list[Any]) -> list[Any]:
        return items[self.offset:self.offset + self.limit]


@dataclass(frozen=True, slots=True)
class FeedCandidate:
    """The ranking inputs of a post plus the object handed back to the caller."""

    post_id: int
    tags: frozenset[str]
    trending_score: float
    created_at: datetime
    post: Any = None

    @classmethod
    def from_post(cls, post: Any) -> FeedCandidate:
        return cls(
            post_id=post.id,
            tags=frozenset(post.tags),
            trending_score=float(post.trending_score or 0.0),
            created_at=as_utc(post.created_at),
            post=post,
        )


def _coerce_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def resolve_window(
    limit: Any,
    offset: Any,
    *,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int | None = None,
) -> FeedWindow:
    """Turn raw ``limit``/``offset`` query values into a usable window.

    Missing, malformed or non-positive limits fall back to ``default_limit``;
    missing, malformed or negative offsets fall back to zero.
    """
    parsed_limit = _coerce_int(limit)
    if parsed_limit is None or parsed_limit <= 0:
        parsed_limit = default_limit
    if max_limit is not None:
        parsed_limit = min(parsed_limit, max_limit)

    parsed_offset = _coerce_int(offset)
    if parsed_offset is None or parsed_offset < 0:
        parsed_offset = DEFAULT_OFFSET

    return FeedWindow(limit=parsed_limit, offset=parsed_offset)


def relevance_score(
    candidate: FeedCandidate,
    interests: Collection[str],
    now: datetime,
    *,
    recency_bonus: bool = False,
) -> float:
    """Score a candidate post for a user with the given interest set."""
    matches = len(candidate.tags.intersection(interests))
    score = TAG_MATCH_WEIGHT * matches + candidate.trending_score
    if recency_bonus:
        age_ms = (as_utc(now) - candidate.created_at).total_seconds() * 1000.0
        score += age_ms / RECENCY_BONUS_DIVISOR
    return score


def rank_candidates(
    candidates: Iterable[FeedCandidate],
    interests: Collection[str],
    seen_post_ids: Collection[int],
    window: FeedWindow,
    now: datetime,
    *,
    recency_bonus: bool = False,
) -> list[FeedCandidate]:
    """Return the requested page of unseen candidates in relevance order."""
    interest_set = frozenset(interests)
    seen = frozenset(seen_post_ids)
    scored = [
        (relevance_score(candidate, interest_set, now, recency_bonus=recency_bonus), candidate)
        for candidate in candidates
        if candidate.post_id not in seen
    ]
    # Post id breaks remaining ties so pages never overlap on a frozen score set.
    scored.sort(
        key=lambda item: (item[0], item[1].created_at, item[1].post_id),
        reverse=True,
    )
    return window.apply([candidate for _, candidate in scored])
