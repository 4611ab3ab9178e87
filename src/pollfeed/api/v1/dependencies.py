"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from pollfeed.core.settings import settings
from pollfeed.db.session import get_db
from pollfeed.ranking.feed import FeedWindow, resolve_window

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_window(
    limit: Annotated[str | None, Query(description="Page size")] = None,
    skip: Annotated[str | None, Query(description="Number of items to skip")] = None,
) -> FeedWindow:
    """Parse paging parameters leniently; malformed values fall back to defaults."""
    return resolve_window(
        limit,
        skip,
        default_limit=settings.feed_default_limit,
        max_limit=settings.feed_max_limit,
    )


WindowDep = Annotated[FeedWindow, Depends(get_window)]
