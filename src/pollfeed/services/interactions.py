"""Vote, like, share and view handlers.

These handlers are the only writers of the counters and interaction state the
ranker reads. Each one mutates a post through atomic column increments inside
a single transaction and, when the acting user is known, appends one record
to that user's interaction log. Unliking is deliberately not logged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pollfeed.core.errors import (
    AlreadyVotedError,
    ConflictError,
    InvalidOptionError,
    PostNotFoundError,
)
from pollfeed.db.time import utcnow
from pollfeed.models import Post
from pollfeed.models.user import (
    INTERACTION_LIKE,
    INTERACTION_SHARE,
    INTERACTION_VIEW,
    INTERACTION_VOTE,
)
from pollfeed.repositories import PostRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass
class LikeResult:
    """Outcome of a like toggle."""

    post: Post
    liked: bool


def _get_post_or_raise(repo: PostRepository, post_id: int) -> Post:
    post = repo.get_by_id(post_id)
    if post is None:
        raise PostNotFoundError()
    return post


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Concurrent update, retry the request") from exc


def _record_interaction(
    db: Session,
    user_identifier: str | None,
    post_id: int,
    kind: str,
    at: datetime,
) -> None:
    if not user_identifier:
        return
    users = UserRepository(db)
    user = users.get_by_external_id(user_identifier)
    if user is None:
        logger.debug("Skipping %s interaction for unknown user %s", kind, user_identifier)
        return
    users.append_interaction(user, post_id, kind, at)


def cast_vote(
    db: Session,
    post_id: int,
    user_identifier: str,
    option_index: int,
    now: datetime | None = None,
) -> Post:
    """Record a vote for one option of a post.

    A user votes at most once per post and can never change their vote. On
    success the post's tags are unioned into the voter's interest set.

    Raises:
        PostNotFoundError: If the post does not exist.
        InvalidOptionError: If ``option_index`` is outside the post's options.
        AlreadyVotedError: If the user already voted on any option of the post.
    """
    at = now or utcnow()
    repo = PostRepository(db)
    post = _get_post_or_raise(repo, post_id)

    if not 0 <= option_index < len(post.options):
        raise InvalidOptionError(
            f"Option index {option_index} out of range for {len(post.options)} options"
        )
    if repo.has_voted(post_id, user_identifier):
        logger.debug("Rejected duplicate vote by %s on post %s", user_identifier, post_id)
        raise AlreadyVotedError()

    tags = list(post.tags)
    try:
        repo.add_vote(post_id, user_identifier, option_index)
    except IntegrityError as exc:
        # Lost a race against a concurrent vote by the same user.
        db.rollback()
        raise AlreadyVotedError() from exc

    users = UserRepository(db)
    user = users.get_by_external_id(user_identifier)
    if user is not None:
        users.append_interaction(user, post_id, INTERACTION_VOTE, at)
        users.add_interests(user, tags)

    _commit(db)
    return _get_post_or_raise(repo, post_id)


def toggle_like(
    db: Session,
    post_id: int,
    user_identifier: str,
    now: datetime | None = None,
) -> LikeResult:
    """Flip the user's presence in the post's like set.

    Only the off-to-on transition appends a ``like`` interaction.

    Raises:
        PostNotFoundError: If the post does not exist.
        ConflictError: If a concurrent like by the same user won the race.
    """
    at = now or utcnow()
    repo = PostRepository(db)
    _get_post_or_raise(repo, post_id)

    if repo.has_liked(post_id, user_identifier):
        repo.remove_like(post_id, user_identifier)
        liked = False
    else:
        try:
            repo.add_like(post_id, user_identifier)
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError("Like state changed concurrently") from exc
        _record_interaction(db, user_identifier, post_id, INTERACTION_LIKE, at)
        liked = True

    _commit(db)
    return LikeResult(post=_get_post_or_raise(repo, post_id), liked=liked)


def record_share(
    db: Session,
    post_id: int,
    user_identifier: str | None = None,
    now: datetime | None = None,
) -> Post:
    """Count a share and log it for the sharing user, if any.

    Raises:
        PostNotFoundError: If the post does not exist.
    """
    at = now or utcnow()
    repo = PostRepository(db)
    if not repo.increment_shares(post_id):
        raise PostNotFoundError()
    _record_interaction(db, user_identifier, post_id, INTERACTION_SHARE, at)
    _commit(db)
    return _get_post_or_raise(repo, post_id)


def record_view(
    db: Session,
    post_id: int,
    user_identifier: str | None = None,
    now: datetime | None = None,
) -> Post:
    """Count a view and log it for the viewing user, if any.

    Raises:
        PostNotFoundError: If the post does not exist.
    """
    at = now or utcnow()
    repo = PostRepository(db)
    if not repo.increment_views(post_id):
        raise PostNotFoundError()
    _record_interaction(db, user_identifier, post_id, INTERACTION_VIEW, at)
    _commit(db)
    return _get_post_or_raise(repo, post_id)
