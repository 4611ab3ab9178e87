"""Post-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator, model_validator

from .common import ApiModel


def _post_fields(data: Any, field_names: list[str]) -> Any:
    """Flatten an ORM post into a plain dict, resolving proxied collections."""
    if isinstance(data, dict):
        return data

    extracted: dict[str, Any] = {}
    for field_name in field_names:
        extracted[field_name] = getattr(data, field_name, None)
    extracted["tags"] = list(getattr(data, "tags", []) or [])
    if "likes" in field_names:
        extracted["likes"] = list(getattr(data, "likes", []) or [])
    if "options" in field_names and hasattr(data, "voters_for"):
        extracted["options"] = [
            {
                "text": option.text,
                "vote_count": option.vote_count,
                "voters": data.voters_for(option.position),
            }
            for option in data.options
        ]
    return extracted


class PostCreate(ApiModel):
    """Schema for creating a new poll."""

    creator_id: str = Field(..., min_length=1, description="Identifier of the creating user")
    creator_name: str = Field(..., min_length=1, description="Display name captured at creation")
    title: str = Field(..., min_length=1, max_length=500)
    image: str | None = Field(None, description="Optional image URL")
    options: list[str] = Field(..., min_length=2, description="Option texts in vote-index order")
    tags: list[str] = Field(default_factory=list)

    @field_validator("options")
    @classmethod
    def _options_not_blank(cls, value: list[str]) -> list[str]:
        if any(not option.strip() for option in value):
            raise ValueError("options must not be blank")
        return value

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(tag.strip() for tag in value if tag.strip()))


class OptionSummary(ApiModel):
    text: str
    vote_count: int


class OptionDetail(OptionSummary):
    voters: list[str] = Field(default_factory=list)


class PostSummary(ApiModel):
    """Post fields exposed in feeds and listings."""

    id: int
    creator_id: str
    creator_name: str
    title: str
    image: str | None = None
    tags: list[str] = Field(default_factory=list)
    options: list[OptionSummary]
    total_votes: int
    likes_count: int
    shares: int
    views: int
    engagement_score: float
    trending_score: float
    created_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _from_orm_post(cls, data: Any) -> Any:
        return _post_fields(data, list(cls.model_fields))


class PostDetail(PostSummary):
    """Full post state including voter and like sets."""

    options: list[OptionDetail]
    likes: list[str] = Field(default_factory=list)


class PostActionResponse(ApiModel):
    """Result of a create or interaction request."""

    message: str
    post: PostDetail


class PostEnvelope(ApiModel):
    post: PostDetail


class PostListResponse(ApiModel):
    posts: list[PostSummary]
    total: int
    limit: int
    skip: int


class FeedResponse(ApiModel):
    posts: list[PostSummary]
