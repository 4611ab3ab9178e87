"""Data access helpers for working with posts."""
from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy import Row, delete, func, select, update
from sqlalchemy.orm import Session

from pollfeed.models.post import OptionVote, Post, PostLike, PostOption, PostTag
from pollfeed.models.user import Interaction

__all__ = ["PostRepository"]


class PostRepository:
    """Thin wrapper around database access for post entities.

    Counter mutations are issued as single ``UPDATE ... SET col = col + n``
    statements so concurrent writers never lose increments; membership rows
    (votes, likes) rely on composite primary keys for uniqueness. Callers own
    the transaction and must commit or roll back.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier."""
        return self.session.get(Post, post_id, populate_existing=True)

    def list_recent(self, limit: int, offset: int = 0) -> list[Post]:
        """Return posts sorted newest first."""
        result = self.session.execute(
            select(Post)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars())

    def count(self) -> int:
        """Return the total number of posts."""
        return self.session.execute(select(func.count()).select_from(Post)).scalar_one()

    def list_by_creator(self, creator_id: str) -> list[Post]:
        """Return every post created by ``creator_id``, newest first."""
        result = self.session.execute(
            select(Post)
            .where(Post.creator_id == creator_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        return list(result.scalars())

    def list_trending(self, limit: int, offset: int = 0) -> list[Post]:
        """Return posts by trending score, then newest first."""
        result = self.session.execute(
            select(Post)
            .order_by(Post.trending_score.desc(), Post.created_at.desc(), Post.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars())

    def list_unseen_by(self, user_pk: int) -> list[Post]:
        """Return posts the user has no interaction record for."""
        seen = select(Interaction.post_id).where(Interaction.user_id == user_pk)
        result = self.session.execute(select(Post).where(Post.id.not_in(seen)))
        return list(result.scalars())

    def engagement_rows(self) -> Sequence[Row]:
        """Return id, counters and creation time of every post."""
        result = self.session.execute(
            select(
                Post.id,
                Post.total_votes,
                Post.likes_count,
                Post.shares,
                Post.views,
                Post.created_at,
            ).order_by(Post.id)
        )
        return result.all()

    def create(
        self,
        *,
        creator_id: str,
        creator_name: str,
        title: str,
        options: Iterable[str],
        tags: Iterable[str] = (),
        image: str | None = None,
    ) -> Post:
        """Insert a new post with zeroed counters and return it.

        Duplicate tags are collapsed; option order is preserved and becomes the
        vote index.
        """
        post = Post(
            creator_id=creator_id,
            creator_name=creator_name,
            title=title,
            image=image,
            total_votes=0,
            likes_count=0,
            shares=0,
            views=0,
            engagement_score=0.0,
            trending_score=0.0,
        )
        post.options = [
            PostOption(position=position, text=text, vote_count=0)
            for position, text in enumerate(options)
        ]
        post.tag_rows = [PostTag(tag=tag) for tag in dict.fromkeys(tags)]
        self.session.add(post)
        self.session.flush()
        return post

    def delete(self, post: Post) -> None:
        """Delete a post and its dependent rows."""
        self.session.delete(post)
        self.session.flush()

    def has_voted(self, post_id: int, voter_id: str) -> bool:
        """Return True if ``voter_id`` appears in any option's voter set."""
        stmt = select(OptionVote.post_id).where(
            OptionVote.post_id == post_id, OptionVote.voter_id == voter_id
        )
        return self.session.execute(stmt.limit(1)).first() is not None

    def add_vote(self, post_id: int, voter_id: str, position: int) -> None:
        """Record a vote and bump the option and post totals together.

        Raises:
            sqlalchemy.exc.IntegrityError: If the voter already voted on this post.
        """
        self.session.add(OptionVote(post_id=post_id, voter_id=voter_id, position=position))
        self.session.flush()
        self.session.execute(
            update(PostOption)
            .where(PostOption.post_id == post_id, PostOption.position == position)
            .values(vote_count=PostOption.vote_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(total_votes=Post.total_votes + 1)
            .execution_options(synchronize_session=False)
        )

    def has_liked(self, post_id: int, user_id: str) -> bool:
        """Return True if ``user_id`` is in the post's like set."""
        stmt = select(PostLike.post_id).where(
            PostLike.post_id == post_id, PostLike.user_id == user_id
        )
        return self.session.execute(stmt.limit(1)).first() is not None

    def add_like(self, post_id: int, user_id: str) -> None:
        """Add ``user_id`` to the like set and bump ``likes_count``.

        Raises:
            sqlalchemy.exc.IntegrityError: If the user already likes the post.
        """
        self.session.add(PostLike(post_id=post_id, user_id=user_id))
        self.session.flush()
        self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(likes_count=Post.likes_count + 1)
            .execution_options(synchronize_session=False)
        )

    def remove_like(self, post_id: int, user_id: str) -> bool:
        """Remove ``user_id`` from the like set; return False if it was absent."""
        result = self.session.execute(
            delete(PostLike).where(PostLike.post_id == post_id, PostLike.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(likes_count=Post.likes_count - 1)
            .execution_options(synchronize_session=False)
        )
        return True

    def increment_shares(self, post_id: int) -> bool:
        """Bump the share counter; return False if the post does not exist."""
        result = self.session.execute(
            update(Post).where(Post.id == post_id).values(shares=Post.shares + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def increment_views(self, post_id: int) -> bool:
        """Bump the view counter; return False if the post does not exist."""
        result = self.session.execute(
            update(Post).where(Post.id == post_id).values(views=Post.views + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def update_scores(self, post_id: int, engagement_score: float, trending_score: float) -> bool:
        """Persist the derived score fields only; counters are left untouched."""
        result = self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(engagement_score=engagement_score, trending_score=trending_score)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
