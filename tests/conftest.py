# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("TRENDING_JOB_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from pollfeed.db.session import Base
from pollfeed.db.session import get_db as app_get_session
from pollfeed.db.time import utcnow
from pollfeed.main import app as fastapi_app
from pollfeed.models import Post, User
from pollfeed.repositories import PostRepository, UserRepository

TEST_DB_URL = "sqlite://"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> Iterator[sessionmaker[Session]]:
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    try:
        yield factory
    finally:
        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def now() -> datetime:
    return utcnow()


@pytest.fixture()
def user_factory(db_session: Session) -> Callable[..., User]:
    """Return a helper persisting users with optional interests."""

    def _make(
        external_id: str,
        username: str | None = None,
        interests: tuple[str, ...] = (),
    ) -> User:
        repo = UserRepository(db_session)
        user = repo.create(external_id=external_id, username=username or external_id)
        repo.add_interests(user, interests)
        db_session.commit()
        return user

    return _make


@pytest.fixture()
def post_factory(db_session: Session, now: datetime) -> Callable[..., Post]:
    """Return a helper persisting posts with explicit counters and age."""

    def _make(
        title: str = "Best season?",
        *,
        creator_id: str = "creator",
        options: tuple[str, ...] = ("Summer", "Winter"),
        tags: tuple[str, ...] = (),
        age: timedelta = timedelta(0),
        trending_score: float = 0.0,
        **counters: Any,
    ) -> Post:
        post = PostRepository(db_session).create(
            creator_id=creator_id,
            creator_name=creator_id.title(),
            title=title,
            options=options,
            tags=tags,
        )
        post.created_at = now - age
        post.trending_score = trending_score
        post.engagement_score = trending_score
        for name, value in counters.items():
            setattr(post, name, value)
        db_session.commit()
        return post

    return _make
