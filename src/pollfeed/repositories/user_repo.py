"""Data access helpers for users, interests and the interaction log."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pollfeed.db.time import utcnow
from pollfeed.models.user import Interaction, User, UserInterest

logger = logging.getLogger(__name__)

__all__ = ["UserRepository"]


class UserRepository:
    """Thin wrapper around database access for user entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_external_id(self, external_id: str) -> User | None:
        """Return the user with the given external identifier."""
        return self.session.execute(
            select(User).where(User.external_id == external_id)
        ).scalars().first()

    def create(
        self,
        *,
        external_id: str,
        username: str,
        email: str | None = None,
        profile_pic: str | None = None,
    ) -> User:
        user = User(
            external_id=external_id,
            username=username,
            email=email,
            profile_pic=profile_pic or "",
        )
        self.session.add(user)
        self.session.flush()
        return user

    def append_interaction(
        self,
        user: User,
        post_id: int,
        kind: str,
        at: datetime | None = None,
    ) -> Interaction:
        """Append one record to the user's interaction log."""
        interaction = Interaction(
            user_id=user.id,
            post_id=post_id,
            kind=kind,
            created_at=at or utcnow(),
        )
        self.session.add(interaction)
        return interaction

    def interest_tags(self, user: User) -> set[str]:
        """Return the stored interest tags of ``user``."""
        result = self.session.execute(
            select(UserInterest.tag).where(UserInterest.user_id == user.id)
        )
        return set(result.scalars())

    def add_interests(self, user: User, tags: Iterable[str]) -> list[str]:
        """Union ``tags`` into the user's interest set and return the new ones.

        Each insert runs in its own savepoint, so a tag stored concurrently by
        another transaction is skipped instead of failing the caller's work.
        """
        existing = self.interest_tags(user)
        added: list[str] = []
        for tag in tags:
            if tag in existing:
                continue
            existing.add(tag)
            try:
                with self.session.begin_nested():
                    self.session.add(UserInterest(user_id=user.id, tag=tag))
            except IntegrityError:
                logger.debug("Interest %s already stored for user %s", tag, user.id)
                continue
            added.append(tag)
        return added
