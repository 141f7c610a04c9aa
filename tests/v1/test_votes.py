# tests/v1/test_votes.py
"""Tests for vote-related endpoints."""

from fastapi import status

from sphere_stage.models import Post, UserBan


def _vote(client, headers, post_id, click, *, comment_id=None, prior=None):
    payload = {"post_id": post_id, "click": click}
    if comment_id is not None:
        payload["comment_id"] = comment_id
    if prior is not None:
        payload["prior_vote"] = prior
    return client.post("/api/v1/votes/", json=payload, headers=headers)


def test_upvote_post(client, auth_token, test_post) -> None:
    """Test casting an upvote on a post."""
    response = _vote(client, auth_token, test_post.id, "up")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["value"] == 1
    assert data["score"] == 1
    assert data["score_minus"] == 0
    assert data["vote"]["post_id"] == test_post.id
    assert data["vote"]["comment_id"] is None


def test_clicking_up_twice_withdraws_the_vote(client, auth_token, test_post) -> None:
    first = _vote(client, auth_token, test_post.id, "up").json()

    response = _vote(
        client,
        auth_token,
        test_post.id,
        "up",
        prior={"vote_id": first["vote"]["id"], "value": 1},
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["vote"] is None
    assert data["value"] == 0
    assert data["score"] == 0


def test_switch_to_downvote(client, auth_token, test_post) -> None:
    first = _vote(client, auth_token, test_post.id, "up").json()

    response = _vote(
        client,
        auth_token,
        test_post.id,
        "down",
        prior={"vote_id": first["vote"]["id"], "value": 1},
    )

    data = response.json()
    assert data["vote"]["id"] == first["vote"]["id"]
    assert (data["value"], data["score"], data["score_minus"]) == (-1, -1, 1)


def test_stale_prior_vote_conflicts(client, auth_token, test_post) -> None:
    """A client unaware of its stored vote must refresh before voting again."""
    _vote(client, auth_token, test_post.id, "up")

    response = _vote(client, auth_token, test_post.id, "down")

    assert response.status_code == status.HTTP_409_CONFLICT


def test_vote_on_comment(client, auth_token, test_post, make_comment) -> None:
    comment = make_comment()

    response = _vote(client, auth_token, test_post.id, "down", comment_id=comment.id)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["vote"]["comment_id"] == comment.id
    assert response.json()["score"] == -1


def test_vote_invalid_click(client, auth_token, test_post) -> None:
    response = _vote(client, auth_token, test_post.id, "sideways")

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_prior_vote_value_must_be_a_direction(client, auth_token, test_post) -> None:
    response = _vote(client, auth_token, test_post.id, "up", prior={"vote_id": 1, "value": 0})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_vote_nonexistent_post(client, auth_token) -> None:
    response = _vote(client, auth_token, 99999, "up")

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_vote_requires_authentication(client, test_post) -> None:
    response = client.post("/api/v1/votes/", json={"post_id": test_post.id, "click": "up"})

    assert response.status_code in {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN}


def test_invalid_token_is_rejected(client, test_post) -> None:
    response = _vote(client, {"Authorization": "Bearer not-a-jwt"}, test_post.id, "up")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_banned_user_cannot_vote(
    client, db_session, auth_token, test_user, moderator_user, test_post
) -> None:
    db_session.add(
        UserBan(
            user_id=test_user.id,
            sphere_id=test_post.sphere_id,
            post_id=test_post.id,
            moderator_id=moderator_user.id,
        )
    )
    db_session.commit()

    response = _vote(client, auth_token, test_post.id, "up")

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert db_session.get(Post, test_post.id).score == 0


def test_get_my_vote(client, auth_token, test_post, make_comment) -> None:
    comment = make_comment()
    _vote(client, auth_token, test_post.id, "down")

    post_vote = client.get(f"/api/v1/votes/{test_post.id}/my-vote", headers=auth_token)
    comment_vote = client.get(
        f"/api/v1/votes/{test_post.id}/my-vote",
        params={"comment_id": comment.id},
        headers=auth_token,
    )

    assert post_vote.status_code == status.HTTP_200_OK
    assert post_vote.json()["value"] == -1
    assert comment_vote.status_code == status.HTTP_200_OK
    assert comment_vote.json() is None
