"""Post-related endpoints for the Pollfeed API."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from pollfeed.models import Post
from pollfeed.schemas.interaction import LikeRequest, ShareRequest, VoteRequest
from pollfeed.schemas.post import (
    FeedResponse,
    PostActionResponse,
    PostCreate,
    PostEnvelope,
    PostListResponse,
)
from pollfeed.services import feed, interactions, post_service

from ..dependencies import SessionDep, WindowDep
from ..errors import ERROR_RESPONSES

router = APIRouter(prefix="/posts", tags=["posts"], responses=ERROR_RESPONSES)

UserQuery = Annotated[str | None, Query(alias="userId", description="Acting user identifier")]


@router.get("", response_model=PostListResponse)
def list_posts(db: SessionDep, window: WindowDep) -> dict[str, object]:
    """List posts newest first with offset pagination."""
    posts, total = post_service.list_posts(db, window.limit, window.offset)
    return {"posts": posts, "total": total, "limit": window.limit, "skip": window.offset}


@router.post("", response_model=PostActionResponse, status_code=status.HTTP_201_CREATED)
def create_post(post_data: PostCreate, db: SessionDep) -> dict[str, object]:
    """Create a new poll with zeroed counters."""
    post = post_service.create_post(db, post_data)
    return {"message": "Post created", "post": post}


@router.get("/trending", response_model=FeedResponse)
def get_trending_posts(db: SessionDep, window: WindowDep) -> dict[str, list[Post]]:
    """Return posts by trending score, newest first on ties."""
    return {"posts": feed.get_trending(db, window)}


@router.get("/{post_id}", response_model=PostEnvelope)
def get_post(post_id: int, db: SessionDep, user_id: UserQuery = None) -> dict[str, Post]:
    """Return a post, counting the read as a view.

    When ``userId`` names a known user a ``view`` interaction is logged, which
    removes the post from that user's personalized feed.
    """
    post = interactions.record_view(db, post_id, user_id)
    return {"post": post}


@router.post("/{post_id}/vote", response_model=PostActionResponse)
def vote_on_post(post_id: int, vote_data: VoteRequest, db: SessionDep) -> dict[str, object]:
    """Cast a once-per-post vote for one option."""
    post = interactions.cast_vote(
        db,
        post_id,
        vote_data.user_identifier,
        vote_data.option_index,
    )
    return {"message": "Vote recorded", "post": post}


@router.post("/{post_id}/like", response_model=PostActionResponse)
def like_post(post_id: int, like_data: LikeRequest, db: SessionDep) -> dict[str, object]:
    """Toggle the caller's like on a post."""
    result = interactions.toggle_like(db, post_id, like_data.user_identifier)
    return {"message": "Liked" if result.liked else "Unliked", "post": result.post}


@router.post("/{post_id}/share", response_model=PostActionResponse)
def share_post(
    post_id: int,
    db: SessionDep,
    share_data: ShareRequest | None = None,
) -> dict[str, object]:
    """Count a share of a post."""
    user_identifier = share_data.user_identifier if share_data else None
    post = interactions.record_share(db, post_id, user_identifier)
    return {"message": "Share recorded", "post": post}


@router.delete("/{post_id}")
def delete_post(post_id: int, db: SessionDep, user_id: UserQuery = None) -> dict[str, str]:
    """Delete a post; only its creator may do so."""
    post_service.delete_post(db, post_id, user_id)
    return {"message": "Post deleted"}
