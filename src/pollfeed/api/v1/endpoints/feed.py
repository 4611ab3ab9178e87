"""Personalized feed endpoint."""

from fastapi import APIRouter

from pollfeed.models import Post
from pollfeed.schemas.post import FeedResponse
from pollfeed.services import feed

from ..dependencies import SessionDep, WindowDep
from ..errors import ERROR_RESPONSES

router = APIRouter(prefix="/feed", tags=["feed"], responses=ERROR_RESPONSES)


@router.get("/{user_id}", response_model=FeedResponse)
def get_feed(user_id: str, db: SessionDep, window: WindowDep) -> dict[str, list[Post]]:
    """Return posts ranked for ``user_id``, or trending posts for unknown users."""
    return {"posts": feed.get_personalized_feed(db, user_id, window)}
