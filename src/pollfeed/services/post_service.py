"""Service-level helpers for creating, listing and deleting posts."""
from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from pollfeed.core.errors import ForbiddenError, PostNotFoundError
from pollfeed.models.post import Post
from pollfeed.repositories.post_repo import PostRepository
from pollfeed.schemas.post import PostCreate


def create_post(db: Session, post_data: PostCreate) -> Post:
    """Persist a new poll with zeroed counters.

    The creator's display name is stored as given and never refreshed.
    """
    repo = PostRepository(db)
    post = repo.create(
        creator_id=post_data.creator_id,
        creator_name=post_data.creator_name,
        title=post_data.title,
        image=post_data.image,
        options=post_data.options,
        tags=post_data.tags,
    )
    db.commit()
    db.refresh(post)
    return post


def list_posts(db: Session, limit: int, offset: int) -> tuple[list[Post], int]:
    """Return a newest-first page of posts and the total post count."""
    repo = PostRepository(db)
    return repo.list_recent(limit, offset), repo.count()


def list_user_posts(db: Session, creator_id: str) -> Sequence[Post]:
    """Return the posts created by ``creator_id``."""
    return PostRepository(db).list_by_creator(creator_id)


def delete_post(db: Session, post_id: int, user_identifier: str | None) -> None:
    """Delete a post on behalf of its creator.

    Raises:
        PostNotFoundError: If the post does not exist.
        ForbiddenError: If ``user_identifier`` is not the post's creator.
    """
    repo = PostRepository(db)
    post = repo.get_by_id(post_id)
    if post is None:
        raise PostNotFoundError()
    if not user_identifier or post.creator_id != user_identifier:
        raise ForbiddenError()
    repo.delete(post)
    db.commit()
