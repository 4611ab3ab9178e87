"""User endpoints: first-contact registration and lookups."""

from __future__ import annotations

from fastapi import APIRouter

from pollfeed.models import Post, User
from pollfeed.schemas.post import FeedResponse
from pollfeed.schemas.user import UserCreate, UserEnvelope, UserReadyResponse
from pollfeed.services import post_service, user_service

from ..dependencies import SessionDep
from ..errors import ERROR_RESPONSES

router = APIRouter(prefix="/users", tags=["users"], responses=ERROR_RESPONSES)


@router.post("", response_model=UserReadyResponse)
def register_user(user_data: UserCreate, db: SessionDep) -> dict[str, object]:
    """Create the user on first contact; later calls return the stored record."""
    user, created = user_service.upsert_user(db, user_data)
    return {"message": "User ready", "user": user, "created": created}


@router.get("/{user_id}", response_model=UserEnvelope)
def get_user(user_id: str, db: SessionDep) -> dict[str, User]:
    return {"user": user_service.get_user(db, user_id)}


@router.get("/{user_id}/posts", response_model=FeedResponse)
def get_user_posts(user_id: str, db: SessionDep) -> dict[str, list[Post]]:
    """Return posts created by ``user_id``, newest first."""
    return {"posts": list(post_service.list_user_posts(db, user_id))}
