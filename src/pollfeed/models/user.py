"""SQLAlchemy models for users, their interests and interaction history."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.ext.associationproxy import AssociationProxy, association_proxy
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pollfeed.db.session import Base
from pollfeed.db.time import utcnow

INTERACTION_VIEW = "view"
INTERACTION_VOTE = "vote"
INTERACTION_LIKE = "like"
INTERACTION_SHARE = "share"
INTERACTION_KINDS = (INTERACTION_VIEW, INTERACTION_VOTE, INTERACTION_LIKE, INTERACTION_SHARE)


class User(Base):
    """A participant keyed by an external identifier supplied by the client."""

    __tablename__ = "app_user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    username: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_pic: Mapped[str] = mapped_column(Text, default="", nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    interest_rows: Mapped[list[UserInterest]] = relationship(
        "UserInterest",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    interactions: Mapped[list[Interaction]] = relationship(
        "Interaction",
        order_by="Interaction.id",
        cascade="all, delete-orphan",
        lazy="select",
    )

    interests: AssociationProxy[list[str]] = association_proxy(
        "interest_rows",
        "tag",
        creator=lambda tag: UserInterest(tag=tag),
    )


class UserInterest(Base):
    """Tag accumulated into a user's interest set; never removed."""

    __tablename__ = "user_interest"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("app_user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag: Mapped[str] = mapped_column(Text, primary_key=True)


class Interaction(Base):
    """Append-only record of a user engaging with a post."""

    __tablename__ = "interaction"
    __table_args__ = (
        CheckConstraint(
            "kind IN ('view', 'vote', 'like', 'share')",
            name="ck_interaction_kind",
        ),
        Index("ix_interaction_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("app_user.id", ondelete="CASCADE"),
        nullable=False,
    )
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    kind: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
