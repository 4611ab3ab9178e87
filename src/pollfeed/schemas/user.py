"""User-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, model_validator

from .common import ApiModel


class UserCreate(ApiModel):
    """Schema for registering a user on first contact."""

    user_id: str = Field(..., min_length=1, description="Stable external identifier")
    username: str = Field(..., min_length=1)
    email: str | None = None
    profile_pic: str | None = None


class InteractionResponse(ApiModel):
    post_id: int
    type: str
    timestamp: datetime

    @model_validator(mode="before")
    @classmethod
    def _from_orm_interaction(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return data
        return {"post_id": data.post_id, "type": data.kind, "timestamp": data.created_at}


class UserResponse(ApiModel):
    """Schema for user information returned by the API."""

    user_id: str
    username: str
    email: str | None = None
    profile_pic: str = ""
    created_at: datetime
    interests: list[str] = Field(default_factory=list)
    interactions: list[InteractionResponse] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _from_orm_user(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return data
        return {
            "user_id": data.external_id,
            "username": data.username,
            "email": data.email,
            "profile_pic": data.profile_pic,
            "created_at": data.created_at,
            "interests": list(data.interests),
            "interactions": list(data.interactions),
        }


class UserEnvelope(ApiModel):
    user: UserResponse


class UserReadyResponse(ApiModel):
    message: str
    user: UserResponse
    created: bool
