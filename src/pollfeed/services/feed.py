"""Personalized and trending feed queries.

Unknown users are not an error here: their feed falls back to the global
trending order, so anonymous and cold-start clients see the same page
``GET /posts/trending`` returns for the same window.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from pollfeed.core.settings import settings
from pollfeed.db.time import utcnow
from pollfeed.models import Post
from pollfeed.ranking.feed import FeedCandidate, FeedWindow, rank_candidates
from pollfeed.repositories import PostRepository, UserRepository

logger = logging.getLogger(__name__)


def get_trending(db: Session, window: FeedWindow) -> list[Post]:
    """Return posts by trending score descending, newest first on ties."""
    return PostRepository(db).list_trending(window.limit, window.offset)


def get_personalized_feed(
    db: Session,
    user_identifier: str,
    window: FeedWindow,
    *,
    now: datetime | None = None,
    recency_bonus: bool | None = None,
) -> list[Post]:
    """Return a page of posts ranked for ``user_identifier``.

    Posts present in the user's interaction log, of any kind, are excluded.
    The remaining posts are scored by tag overlap with the user's interests
    plus their trending score and ordered in memory.
    """
    users = UserRepository(db)
    user = users.get_by_external_id(user_identifier)
    if user is None:
        logger.debug("Feed for unknown user %s falls back to trending", user_identifier)
        return get_trending(db, window)

    if recency_bonus is None:
        recency_bonus = settings.feed_recency_bonus_enabled

    candidates = [
        FeedCandidate.from_post(post)
        for post in PostRepository(db).list_unseen_by(user.id)
    ]
    ranked = rank_candidates(
        candidates,
        set(user.interests),
        # list_unseen_by already dropped interacted posts in SQL.
        (),
        window,
        now or utcnow(),
        recency_bonus=recency_bonus,
    )
    return [candidate.post for candidate in ranked]
