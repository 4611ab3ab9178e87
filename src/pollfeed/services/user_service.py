"""Helpers for registering and looking up users."""
from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pollfeed.core.errors import UserNotFoundError
from pollfeed.models.user import User
from pollfeed.repositories.user_repo import UserRepository
from pollfeed.schemas.user import UserCreate

__all__ = ["get_user", "upsert_user"]


def get_user(db: Session, external_id: str) -> User:
    """Return a user by external identifier.

    Raises:
        UserNotFoundError: If no user has that identifier.
    """
    user = UserRepository(db).get_by_external_id(external_id)
    if user is None:
        raise UserNotFoundError()
    return user


def upsert_user(db: Session, user_data: UserCreate) -> tuple[User, bool]:
    """Return the user keyed by ``user_data.user_id``, creating it if needed.

    Existing users are returned unchanged. The boolean is True when a new
    record was inserted.
    """
    repo = UserRepository(db)
    user = repo.get_by_external_id(user_data.user_id)
    if user is not None:
        return user, False

    try:
        user = repo.create(
            external_id=user_data.user_id,
            username=user_data.username,
            email=user_data.email,
            profile_pic=user_data.profile_pic,
        )
        db.commit()
    except IntegrityError:
        # A concurrent first contact inserted the same identifier.
        db.rollback()
        return get_user(db, user_data.user_id), False
    db.refresh(user)
    return user, True
