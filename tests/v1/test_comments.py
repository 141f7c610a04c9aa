# tests/v1/test_comments.py
"""Tests for comment-related endpoints."""

from fastapi import status

from sphere_stage.models import Comment
from tests.conftest import FIXED_NOW


def test_thread_shows_parent_and_replies(client, make_comment) -> None:
    root = make_comment()
    middle = make_comment(parent=root)
    leaf = make_comment(parent=middle)
    make_comment(parent=root)

    response = client.get(f"/api/v1/comments/{middle.id}/thread")

    assert response.status_code == status.HTTP_200_OK
    forest = response.json()
    assert [node["comment"]["id"] for node in forest] == [root.id]
    assert [child["comment"]["id"] for child in forest[0]["children"]] == [middle.id]
    assert forest[0]["children"][0]["children"][0]["comment"]["id"] == leaf.id


def test_thread_max_depth_counts_from_the_comment(client, make_comment) -> None:
    root = make_comment()
    middle = make_comment(parent=root)
    make_comment(parent=middle)

    forest = client.get(
        f"/api/v1/comments/{middle.id}/thread", params={"max_depth": 0}
    ).json()

    assert forest[0]["children"][0]["comment"]["id"] == middle.id
    assert forest[0]["children"][0]["children"] == []


def test_thread_of_deleted_comment(client, make_comment) -> None:
    comment = make_comment(delete_timestamp=FIXED_NOW)

    response = client.get(f"/api/v1/comments/{comment.id}/thread")

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_update_comment(client, other_auth_token, make_comment) -> None:
    comment = make_comment()

    response = client.patch(
        f"/api/v1/comments/{comment.id}",
        json={"body": "Edited"},
        headers=other_auth_token,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["body"] == "Edited"
    assert response.json()["edit_timestamp"] is not None


def test_only_author_updates_comment(client, auth_token, make_comment) -> None:
    comment = make_comment()

    response = client.patch(
        f"/api/v1/comments/{comment.id}",
        json={"body": "Hijacked"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_pinning_own_comment_needs_moderator(
    client, other_auth_token, moderator_auth_token, moderator_user, make_comment
) -> None:
    plain = make_comment()
    own = make_comment(creator=moderator_user)

    denied = client.patch(
        f"/api/v1/comments/{plain.id}",
        json={"body": "Pin me", "is_pinned": True},
        headers=other_auth_token,
    )
    allowed = client.patch(
        f"/api/v1/comments/{own.id}",
        json={"body": "Read this first", "is_pinned": True},
        headers=moderator_auth_token,
    )

    assert denied.status_code == status.HTTP_403_FORBIDDEN
    assert allowed.status_code == status.HTTP_200_OK
    assert allowed.json()["is_pinned"] is True


def test_delete_comment(client, db_session, other_auth_token, test_post, make_comment) -> None:
    comment = make_comment()

    response = client.delete(f"/api/v1/comments/{comment.id}", headers=other_auth_token)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["body"] == ""
    assert db_session.get(Comment, comment.id).delete_timestamp is not None
    tree = client.get(f"/api/v1/posts/{test_post.id}/comments").json()
    assert tree == []


def test_replies_survive_deleting_their_parent(
    client, other_auth_token, test_user, test_post, make_comment
) -> None:
    parent = make_comment()
    reply = make_comment(parent=parent, creator=test_user)

    client.delete(f"/api/v1/comments/{parent.id}", headers=other_auth_token)

    forest = client.get(f"/api/v1/posts/{test_post.id}/comments").json()
    assert [node["comment"]["id"] for node in forest] == [reply.id]
    thread = client.get(f"/api/v1/comments/{reply.id}/thread").json()
    assert [node["comment"]["id"] for node in thread] == [reply.id]
