"""Request schemas for vote, like and share interactions."""

from pydantic import AliasChoices, Field

from .common import ApiModel

_USER_ALIASES = AliasChoices("userIdentifier", "userId", "user_identifier")


class VoteRequest(ApiModel):
    """Schema for casting a vote on one option of a post."""

    option_index: int = Field(
        ...,
        strict=True,
        description="Zero-based index of the chosen option",
    )
    user_identifier: str = Field(..., min_length=1, validation_alias=_USER_ALIASES)


class LikeRequest(ApiModel):
    """Schema for toggling a like."""

    user_identifier: str = Field(..., min_length=1, validation_alias=_USER_ALIASES)


class ShareRequest(ApiModel):
    """Schema for recording a share; anonymous shares are counted but not logged."""

    user_identifier: str | None = Field(None, validation_alias=_USER_ALIASES)
