from fastapi import status

API = "/api/v1/users"


def test_register_is_idempotent(client) -> None:
    payload = {"userId": "u-1", "username": "alice", "email": "alice@example.com"}

    first = client.post(API, json=payload)
    second = client.post(API, json={**payload, "username": "renamed"})

    assert first.status_code == second.status_code == status.HTTP_200_OK
    assert first.json()["created"] is True
    assert second.json()["created"] is False
    assert second.json()["user"]["username"] == "alice"
    assert second.json()["user"]["profilePic"] == ""


def test_get_user_includes_interests_and_interactions(client, post_factory, user_factory) -> None:
    user_factory("bob", interests=("music",))
    post = post_factory(tags=("jazz",))
    client.post(f"/api/v1/posts/{post.id}/vote", json={"optionIndex": 0, "userIdentifier": "bob"})

    response = client.get(f"{API}/bob")

    assert response.status_code == status.HTTP_200_OK
    user = response.json()["user"]
    assert user["userId"] == "bob"
    assert sorted(user["interests"]) == ["jazz", "music"]
    assert [(item["postId"], item["type"]) for item in user["interactions"]] == [(post.id, "vote")]


def test_get_unknown_user(client) -> None:
    response = client.get(f"{API}/nobody")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "User not found"}


def test_user_posts(client, post_factory) -> None:
    mine = post_factory("mine", creator_id="carol")
    post_factory("theirs", creator_id="dave")

    response = client.get(f"{API}/carol/posts")

    assert [post["id"] for post in response.json()["posts"]] == [mine.id]
