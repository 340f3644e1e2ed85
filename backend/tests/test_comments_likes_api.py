"""
API tests for comments and the like toggle.
"""

import asyncio
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError

from app.api.v1.likes import toggle_like
from app.models import Like


# -----------------------------------------------------------------------------
# Comments
# -----------------------------------------------------------------------------
def test_comment_lifecycle(client, onboard, create_post):
    user_id = onboard("alice")
    post_id = create_post(user_id)

    created = client.post(
        f"/api/posts/{post_id}/comments",
        json={"userId": user_id, "content": "첫 댓글"},
    )
    assert created.status_code == 201
    data = created.json()
    assert data["postId"] == post_id
    assert data["userId"] == user_id
    assert data["content"] == "첫 댓글"
    comment_id = data["commentId"]

    listed = client.get(f"/api/posts/{post_id}/comments").json()["comments"]
    assert [comment["id"] for comment in listed] == [comment_id]
    assert listed[0]["nickname"] == "alice"

    updated = client.put(
        f"/api/posts/comments/{comment_id}",
        json={"userId": user_id, "content": "수정된 댓글"},
    )
    assert updated.status_code == 200
    assert updated.json()["message"] == "Comment updated successfully!"
    listed = client.get(f"/api/posts/{post_id}/comments").json()["comments"]
    assert listed[0]["content"] == "수정된 댓글"

    deleted = client.request(
        "DELETE", f"/api/posts/comments/{comment_id}", json={"userId": user_id}
    )
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Comment deleted successfully!"
    assert client.get(f"/api/posts/{post_id}/comments").json()["comments"] == []


def test_comments_are_listed_oldest_first(client, onboard, create_post):
    alice = onboard("alice")
    bob = onboard("bob")
    post_id = create_post(alice)
    first = client.post(f"/api/posts/{post_id}/comments", json={"userId": alice, "content": "1"}).json()
    second = client.post(f"/api/posts/{post_id}/comments", json={"userId": bob, "content": "2"}).json()

    listed = client.get(f"/api/posts/{post_id}/comments").json()["comments"]

    assert [comment["id"] for comment in listed] == [first["commentId"], second["commentId"]]
    assert [comment["nickname"] for comment in listed] == ["alice", "bob"]


def test_comment_on_missing_post(client, onboard):
    user_id = onboard("alice")
    response = client.post("/api/posts/9999/comments", json={"userId": user_id, "content": "x"})
    assert response.status_code == 404


def test_comment_by_unknown_user(client, onboard, create_post):
    post_id = create_post(onboard("alice"))
    response = client.post(
        f"/api/posts/{post_id}/comments",
        json={"userId": str(uuid.uuid4()), "content": "x"},
    )
    assert response.status_code == 404


def test_only_the_author_can_edit_or_delete_a_comment(client, onboard, create_post):
    alice = onboard("alice")
    bob = onboard("bob")
    post_id = create_post(alice)
    comment_id = client.post(
        f"/api/posts/{post_id}/comments", json={"userId": alice, "content": "original"}
    ).json()["commentId"]

    update = client.put(f"/api/posts/comments/{comment_id}", json={"userId": bob, "content": "x"})
    delete = client.request("DELETE", f"/api/posts/comments/{comment_id}", json={"userId": bob})

    assert update.status_code == 403
    assert delete.status_code == 403
    listed = client.get(f"/api/posts/{post_id}/comments").json()["comments"]
    assert listed[0]["content"] == "original"


def test_update_missing_comment(client, onboard):
    user_id = onboard("alice")
    response = client.put("/api/posts/comments/9999", json={"userId": user_id, "content": "x"})
    assert response.status_code == 404


# -----------------------------------------------------------------------------
# Likes
# -----------------------------------------------------------------------------
def test_like_toggle_round_trip(client, onboard, create_post):
    user_id = onboard("alice")
    post_id = create_post(user_id)

    added = client.post(f"/api/posts/{post_id}/likes", json={"userId": user_id})
    assert added.status_code == 201
    assert added.json() == {"message": "Like added successfully!", "liked": True}
    assert client.get(f"/api/posts/{post_id}/likes/count").json()["likeCount"] == 1
    assert client.get(f"/api/posts/{post_id}/likes/status/{user_id}").json()["liked"] is True

    removed = client.post(f"/api/posts/{post_id}/likes", json={"userId": user_id})
    assert removed.status_code == 200
    assert removed.json() == {"message": "Like removed successfully!", "liked": False}
    assert client.get(f"/api/posts/{post_id}/likes/count").json()["likeCount"] == 0
    assert client.get(f"/api/posts/{post_id}/likes/status/{user_id}").json()["liked"] is False


def test_even_number_of_toggles_restores_state(client, onboard, create_post):
    user_id = onboard("alice")
    post_id = create_post(user_id)

    states = [
        client.post(f"/api/posts/{post_id}/likes", json={"userId": user_id}).json()["liked"]
        for _ in range(4)
    ]

    assert states == [True, False, True, False]
    assert client.get(f"/api/posts/{post_id}/likes/count").json()["likeCount"] == 0


def test_like_count_across_users(client, onboard, create_post):
    alice = onboard("alice")
    bob = onboard("bob")
    post_id = create_post(alice)

    client.post(f"/api/posts/{post_id}/likes", json={"userId": alice})
    client.post(f"/api/posts/{post_id}/likes", json={"userId": bob})

    assert client.get(f"/api/posts/{post_id}/likes/count").json()["likeCount"] == 2
    status = client.get(f"/api/posts/{post_id}/likes/status/{bob}").json()
    assert status == {"postId": post_id, "userId": bob, "liked": True}


def test_like_missing_post(client, onboard):
    user_id = onboard("alice")
    assert client.post("/api/posts/9999/likes", json={"userId": user_id}).status_code == 404
    assert client.get("/api/posts/9999/likes/count").status_code == 404


def test_likes_table_rejects_duplicate_pair(client, onboard, create_post):
    user_id = uuid.UUID(onboard("alice"))
    post_id = create_post(str(user_id))
    database = client.app.state.database

    async def insert_twice():
        async with database.session_factory() as session:
            session.add(Like(post_id=post_id, user_id=user_id))
            await session.commit()
            session.add(Like(post_id=post_id, user_id=user_id))
            with pytest.raises(IntegrityError):
                await session.commit()

    client.portal.call(insert_twice)
    assert client.get(f"/api/posts/{post_id}/likes/count").json()["likeCount"] == 1


def test_toggle_like_reports_conflict_when_a_concurrent_toggle_inserted_first():
    session = MagicMock()
    session.execute = AsyncMock(return_value=MagicMock(rowcount=0))
    session.commit = AsyncMock(
        side_effect=IntegrityError("INSERT INTO likes", {}, Exception("UNIQUE constraint failed"))
    )
    session.rollback = AsyncMock()

    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(toggle_like(session, 1, uuid.uuid4()))

    assert exc_info.value.status_code == 409
    session.rollback.assert_awaited_once()
