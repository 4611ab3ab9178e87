"""Tests for vote, like, share and view handlers."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine, insert, select
from sqlalchemy.orm import Session, sessionmaker

from pollfeed.core.errors import (
    AlreadyVotedError,
    ConflictError,
    InvalidOptionError,
    PostNotFoundError,
)
from pollfeed.db.session import Base
from pollfeed.models import Interaction, Post, UserInterest
from pollfeed.repositories import PostRepository, UserRepository
from pollfeed.services import interactions


def _assert_counter_invariants(post: Post) -> None:
    assert post.total_votes == sum(option.vote_count for option in post.options)
    assert post.likes_count == len(post.likes)
    voters = [vote.voter_id for vote in post.votes]
    assert len(voters) == len(set(voters))


def _interaction_kinds(db: Session, user_pk: int) -> list[tuple[int, str]]:
    rows = db.execute(
        select(Interaction.post_id, Interaction.kind)
        .where(Interaction.user_id == user_pk)
        .order_by(Interaction.id)
    )
    return [tuple(row) for row in rows]


def test_vote_updates_option_and_total(db_session, post_factory, user_factory) -> None:
    post = post_factory(options=("Yes", "No", "Maybe"))
    user_factory("alice")

    updated = interactions.cast_vote(db_session, post.id, "alice", 2)

    assert updated.total_votes == 1
    assert [option.vote_count for option in updated.options] == [0, 0, 1]
    assert updated.voters_for(2) == ["alice"]
    _assert_counter_invariants(updated)


def test_second_vote_is_rejected_even_for_another_option(db_session, post_factory) -> None:
    post = post_factory()
    interactions.cast_vote(db_session, post.id, "bob", 0)

    with pytest.raises(AlreadyVotedError):
        interactions.cast_vote(db_session, post.id, "bob", 1)

    refreshed = PostRepository(db_session).get_by_id(post.id)
    assert refreshed.total_votes == 1
    assert refreshed.voters_for(0) == ["bob"]
    assert refreshed.voters_for(1) == []
    _assert_counter_invariants(refreshed)


@pytest.mark.parametrize("option_index", [-1, 2, 99])
def test_out_of_range_option_mutates_nothing(db_session, post_factory, option_index) -> None:
    post = post_factory()

    with pytest.raises(InvalidOptionError):
        interactions.cast_vote(db_session, post.id, "carol", option_index)

    refreshed = PostRepository(db_session).get_by_id(post.id)
    assert refreshed.total_votes == 0
    assert refreshed.votes == []


def test_vote_on_missing_post(db_session) -> None:
    with pytest.raises(PostNotFoundError):
        interactions.cast_vote(db_session, 12345, "dave", 0)


def test_vote_logs_interaction_and_accumulates_interests(
    db_session, post_factory, user_factory
) -> None:
    user = user_factory("erin", interests=("news",))
    first = post_factory(tags=("news", "sports"))
    second = post_factory(tags=("sports", "tech"))

    interactions.cast_vote(db_session, first.id, "erin", 0)
    interactions.cast_vote(db_session, second.id, "erin", 1)

    db_session.refresh(user)
    assert sorted(user.interests) == ["news", "sports", "tech"]
    assert _interaction_kinds(db_session, user.id) == [(first.id, "vote"), (second.id, "vote")]


def test_interest_union_skips_tag_stored_by_concurrent_vote(
    db_session, user_factory, mocker
) -> None:
    user = user_factory("ivy")
    # Another transaction stored "sports" after this one read the interest set.
    db_session.execute(insert(UserInterest).values(user_id=user.id, tag="sports"))
    mocker.patch.object(UserRepository, "interest_tags", return_value=set())

    added = UserRepository(db_session).add_interests(user, ["sports", "tech"])
    db_session.commit()

    assert added == ["tech"]
    stored = db_session.execute(
        select(UserInterest.tag).where(UserInterest.user_id == user.id)
    ).scalars()
    assert sorted(stored) == ["sports", "tech"]


def test_vote_by_unregistered_identifier_still_counts(db_session, post_factory) -> None:
    post = post_factory()
    updated = interactions.cast_vote(db_session, post.id, "ghost", 1)
    assert updated.total_votes == 1
    assert db_session.execute(select(Interaction)).first() is None


def test_like_toggle_keeps_count_in_sync_and_only_logs_likes(
    db_session, post_factory, user_factory
) -> None:
    user = user_factory("frank")
    post = post_factory()

    liked = interactions.toggle_like(db_session, post.id, "frank")
    assert liked.liked is True
    assert liked.post.likes_count == 1
    assert list(liked.post.likes) == ["frank"]

    unliked = interactions.toggle_like(db_session, post.id, "frank")
    assert unliked.liked is False
    assert unliked.post.likes_count == 0
    assert list(unliked.post.likes) == []

    relike = interactions.toggle_like(db_session, post.id, "frank")
    _assert_counter_invariants(relike.post)
    assert _interaction_kinds(db_session, user.id) == [(post.id, "like"), (post.id, "like")]


def test_likes_from_several_users(db_session, post_factory) -> None:
    post = post_factory()
    for name in ("a", "b", "c"):
        interactions.toggle_like(db_session, post.id, name)
    result = interactions.toggle_like(db_session, post.id, "b")

    assert result.post.likes_count == 2
    assert sorted(result.post.likes) == ["a", "c"]


def test_like_on_missing_post(db_session) -> None:
    with pytest.raises(PostNotFoundError):
        interactions.toggle_like(db_session, 404, "anyone")


def test_share_and_view_increment_and_log(db_session, post_factory, user_factory) -> None:
    user = user_factory("gina")
    post = post_factory()

    interactions.record_view(db_session, post.id, "gina")
    interactions.record_view(db_session, post.id, "gina")
    shared = interactions.record_share(db_session, post.id, "gina")

    assert shared.views == 2
    assert shared.shares == 1
    assert _interaction_kinds(db_session, user.id) == [
        (post.id, "view"),
        (post.id, "view"),
        (post.id, "share"),
    ]


def test_anonymous_share_and_view_are_counted(db_session, post_factory) -> None:
    post = post_factory()
    interactions.record_share(db_session, post.id)
    viewed = interactions.record_view(db_session, post.id, None)
    assert (viewed.shares, viewed.views) == (1, 1)


def test_share_and_view_on_missing_post(db_session) -> None:
    with pytest.raises(PostNotFoundError):
        interactions.record_share(db_session, 77, "x")
    with pytest.raises(PostNotFoundError):
        interactions.record_view(db_session, 77, "x")


def test_concurrent_votes_and_likes_preserve_invariants(tmp_path) -> None:
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    with factory() as db:
        post = PostRepository(db).create(
            creator_id="owner",
            creator_name="Owner",
            title="Concurrent poll",
            options=["one", "two", "three"],
        )
        db.commit()
        post_id = post.id

    voters = [f"user-{i % 6}" for i in range(18)]

    def _vote(args: tuple[int, str]) -> str:
        index, voter = args
        with factory() as db:
            try:
                interactions.cast_vote(db, post_id, voter, index % 3)
            except AlreadyVotedError:
                return "duplicate"
            try:
                interactions.toggle_like(db, post_id, voter)
            except ConflictError:
                return "like-conflict"
            return "ok"

    with ThreadPoolExecutor(max_workers=6) as pool:
        outcomes = list(pool.map(_vote, enumerate(voters)))

    assert outcomes.count("ok") == 6
    with factory() as db:
        post = PostRepository(db).get_by_id(post_id)
        assert post.total_votes == 6
        _assert_counter_invariants(post)
    engine.dispose()
