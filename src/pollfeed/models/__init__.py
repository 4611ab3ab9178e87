"""SQLAlchemy models for the Pollfeed application."""

from .post import OptionVote, Post, PostLike, PostOption, PostTag
from .user import INTERACTION_KINDS, Interaction, User, UserInterest

__all__ = [
    "OptionVote", "Post", "PostLike", "PostOption", "PostTag",
    "INTERACTION_KINDS", "Interaction", "User", "UserInterest",
]
