"""SQLAlchemy models for poll posts and their engagement state."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
)
from sqlalchemy.ext.associationproxy import AssociationProxy, association_proxy
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pollfeed.db.session import Base
from pollfeed.db.time import utcnow


class Post(Base):
    """A poll with a fixed list of options plus engagement counters.

    Counters (``total_votes``, ``likes_count``, ``shares``, ``views``) are
    authoritative and only move through atomic column increments. The two
    score columns are derived and only written by the trending job.
    """

    __tablename__ = "post"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    creator_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    # Snapshot taken at creation; later profile edits are not propagated.
    creator_name: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)

    total_votes: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    likes_count: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    shares: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    views: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    engagement_score: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    trending_score: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    options: Mapped[list[PostOption]] = relationship(
        "PostOption",
        order_by="PostOption.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    votes: Mapped[list[OptionVote]] = relationship(
        "OptionVote",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    like_rows: Mapped[list[PostLike]] = relationship(
        "PostLike",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    tag_rows: Mapped[list[PostTag]] = relationship(
        "PostTag",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    tags: AssociationProxy[list[str]] = association_proxy(
        "tag_rows",
        "tag",
        creator=lambda tag: PostTag(tag=tag),
    )
    likes: AssociationProxy[list[str]] = association_proxy("like_rows", "user_id")

    def voters_for(self, position: int) -> list[str]:
        """Return the identifiers of users who voted for the option at ``position``."""
        return [vote.voter_id for vote in self.votes if vote.position == position]


# Serves the trending order: score, then newest first.
Index("ix_post_trending", Post.trending_score.desc(), Post.created_at.desc())


class PostOption(Base):
    """A single choice of a poll; ``position`` is the stable vote index."""

    __tablename__ = "post_option"

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, primary_key=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    vote_count: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)


class OptionVote(Base):
    """Membership of a voter in one option's voter set.

    The primary key spans the post and the voter, not the option, so a user
    can appear in at most one option's voter set per post.
    """

    __tablename__ = "option_vote"

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    voter_id: Mapped[str] = mapped_column(Text, primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)


class PostLike(Base):
    """Membership of a user in a post's like set."""

    __tablename__ = "post_like"

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(Text, primary_key=True)


class PostTag(Base):
    """Tag attached to a post."""

    __tablename__ = "post_tag"

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag: Mapped[str] = mapped_column(Text, primary_key=True, index=True)
