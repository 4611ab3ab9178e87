"""Tests for personalized and trending feed queries."""

from datetime import timedelta

from sqlalchemy.dialects import sqlite
from sqlalchemy.schema import CreateIndex

from pollfeed.models import Post
from pollfeed.models.user import INTERACTION_VIEW
from pollfeed.ranking.feed import FeedWindow
from pollfeed.services import feed, interactions


def _ids(posts) -> list[int]:
    return [post.id for post in posts]


def test_trending_orders_by_score_then_newest(db_session, post_factory) -> None:
    older = post_factory("older", age=timedelta(hours=2), trending_score=5.0)
    newer = post_factory("newer", age=timedelta(hours=1), trending_score=5.0)
    top = post_factory("top", age=timedelta(hours=3), trending_score=9.0)

    posts = feed.get_trending(db_session, FeedWindow(limit=20, offset=0))

    assert _ids(posts) == [top.id, newer.id, older.id]


def test_trending_index_is_descending() -> None:
    index = next(ix for ix in Post.__table__.indexes if ix.name == "ix_post_trending")

    ddl = str(CreateIndex(index).compile(dialect=sqlite.dialect()))

    assert "trending_score DESC" in ddl
    assert "created_at DESC" in ddl


def test_unknown_user_feed_matches_trending(db_session, post_factory) -> None:
    for index in range(5):
        post_factory(f"post {index}", trending_score=float(index), age=timedelta(minutes=index))
    window = FeedWindow(limit=3, offset=1)

    personalized = feed.get_personalized_feed(db_session, "nobody", window)
    trending = feed.get_trending(db_session, window)

    assert _ids(personalized) == _ids(trending)
    assert len(personalized) == 3


def test_interest_match_outranks_higher_trending(db_session, post_factory, user_factory, now) -> None:
    user_factory("alice", interests=("sports", "music"))
    matching = post_factory("match", tags=("sports", "music"), trending_score=5.0)
    popular = post_factory("popular", tags=("cooking",), trending_score=19.0)

    posts = feed.get_personalized_feed(
        db_session, "alice", FeedWindow(limit=20, offset=0), now=now, recency_bonus=False
    )

    # 10 * 2 + 5 beats 0 + 19.
    assert _ids(posts) == [matching.id, popular.id]


def test_feed_excludes_posts_with_any_interaction(db_session, post_factory, user_factory) -> None:
    user_factory("bob")
    viewed = post_factory("viewed")
    voted = post_factory("voted")
    fresh = post_factory("fresh")

    interactions.record_view(db_session, viewed.id, "bob")
    interactions.cast_vote(db_session, voted.id, "bob", 0)

    posts = feed.get_personalized_feed(db_session, "bob", FeedWindow(limit=20, offset=0))

    assert _ids(posts) == [fresh.id]


def test_feed_excludes_unliked_posts(db_session, post_factory, user_factory) -> None:
    user_factory("carol")
    post = post_factory()
    interactions.toggle_like(db_session, post.id, "carol")
    interactions.toggle_like(db_session, post.id, "carol")

    posts = feed.get_personalized_feed(db_session, "carol", FeedWindow(limit=20, offset=0))

    assert posts == []


def test_feed_pages_through_ranked_results(db_session, post_factory, user_factory, now) -> None:
    user_factory("dave", interests=("python",))
    created = [
        post_factory(f"p{index}", tags=("python",) if index % 2 else (), trending_score=float(index))
        for index in range(6)
    ]

    full = feed.get_personalized_feed(db_session, "dave", FeedWindow(limit=20, offset=0), now=now)
    first = feed.get_personalized_feed(db_session, "dave", FeedWindow(limit=4, offset=0), now=now)
    second = feed.get_personalized_feed(db_session, "dave", FeedWindow(limit=4, offset=4), now=now)

    assert len(full) == len(created)
    assert _ids(first) + _ids(second) == _ids(full)
    # Tag matches first, each group by trending score.
    assert _ids(full)[:3] == [created[5].id, created[3].id, created[1].id]


def test_recency_bonus_breaks_equal_scores(db_session, post_factory, user_factory, now) -> None:
    user_factory("erin")
    old = post_factory("old", age=timedelta(days=30), trending_score=1.0)
    new = post_factory("new", age=timedelta(hours=1), trending_score=1.0)

    with_bonus = feed.get_personalized_feed(
        db_session, "erin", FeedWindow(limit=20, offset=0), now=now, recency_bonus=True
    )

    # The bonus grows with age in milliseconds, so the older post gains more.
    assert _ids(with_bonus) == [old.id, new.id]


def test_view_is_only_logged_for_known_users(db_session, post_factory, user_factory) -> None:
    user = user_factory("frank")
    post = post_factory()

    interactions.record_view(db_session, post.id, "frank")
    interactions.record_view(db_session, post.id, "stranger")

    db_session.refresh(user)
    assert [(item.post_id, item.kind) for item in user.interactions] == [
        (post.id, INTERACTION_VIEW)
    ]
