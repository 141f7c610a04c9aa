"""Tests for ban checks and moderation actions."""

from datetime import timedelta

import pytest

from sphere_stage.db.time import as_utc
from sphere_stage.models import Post, SphereModerator, UserBan
from sphere_stage.services.errors import NotFoundError, UnauthorizedError
from sphere_stage.services.moderation import BanDuration, BanKind, ModerationGate
from tests.conftest import FIXED_NOW


@pytest.fixture()
def gate(db_session, fixed_clock) -> ModerationGate:
    return ModerationGate(db_session, clock=fixed_clock)


@pytest.mark.parametrize(
    ("kind", "days"),
    [
        (BanKind.TIMED, None),
        (BanKind.TIMED, 0),
        (BanKind.NONE, 3),
        (BanKind.PERMANENT, 1),
    ],
)
def test_ban_duration_rejects_inconsistent_values(kind, days) -> None:
    with pytest.raises(ValueError):
        BanDuration(kind, days)


def test_ban_duration_until() -> None:
    assert BanDuration.timed(3).until(FIXED_NOW) == FIXED_NOW + timedelta(days=3)
    assert BanDuration.permanent().until(FIXED_NOW) is None
    assert BanDuration.none().until(FIXED_NOW) is None


def test_timed_ban_without_days_cannot_compute_expiry() -> None:
    duration = BanDuration.timed(2)
    object.__setattr__(duration, "days", None)

    with pytest.raises(ValueError, match="no duration"):
        duration.until(FIXED_NOW)


def test_moderate_post_hides_it_and_bans_author(
    gate, db_session, moderator_user, other_user, test_post
) -> None:
    post, ban = gate.moderate_post(moderator_user, test_post.id, "Off-topic", BanDuration.timed(3))

    assert post.moderator_id == moderator_user.id
    assert post.moderator_message == "Off-topic"
    assert post.edit_timestamp == FIXED_NOW
    assert not post.is_visible

    assert ban is not None
    assert ban.user_id == other_user.id
    assert ban.sphere_id == test_post.sphere_id
    assert as_utc(ban.until_timestamp) == FIXED_NOW + timedelta(days=3)

    with pytest.raises(UnauthorizedError):
        gate.authorize_publish(other_user.id, test_post.sphere_id)


def test_moderate_post_without_ban(gate, db_session, moderator_user, other_user, test_post) -> None:
    _, ban = gate.moderate_post(moderator_user, test_post.id, "Duplicate", BanDuration.none())

    assert ban is None
    assert gate.active_ban(other_user.id, test_post.sphere_id) is None


def test_only_moderators_can_moderate(gate, db_session, test_user, test_post) -> None:
    with pytest.raises(UnauthorizedError):
        gate.moderate_post(test_user, test_post.id, "No", BanDuration.none())

    assert db_session.get(Post, test_post.id).is_visible


def test_admins_moderate_any_sphere(gate, admin_user, test_post) -> None:
    post, _ = gate.moderate_post(admin_user, test_post.id, "Spam", BanDuration.none())

    assert post.moderator_id == admin_user.id


def test_moderator_cannot_ban_themselves(gate, db_session, moderator_user, make_post) -> None:
    own_post = make_post(creator=moderator_user)

    with pytest.raises(UnauthorizedError):
        gate.moderate_post(moderator_user, own_post.id, "Oops", BanDuration.permanent())

    assert db_session.get(Post, own_post.id).is_visible
    assert db_session.query(UserBan).count() == 0


def test_moderator_cannot_ban_other_moderators(
    gate, db_session, moderator_user, make_user, sphere, make_post
) -> None:
    co_moderator = make_user("co-mod")
    db_session.add(SphereModerator(sphere_id=sphere.id, user_id=co_moderator.id))
    db_session.commit()
    post = make_post(creator=co_moderator)

    with pytest.raises(UnauthorizedError):
        gate.moderate_post(moderator_user, post.id, "Nope", BanDuration.timed(1))

    assert db_session.get(Post, post.id).is_visible


def test_moderate_comment_with_permanent_ban(
    gate, moderator_user, other_user, test_post, make_comment
) -> None:
    comment = make_comment()

    moderated, ban = gate.moderate_comment(
        moderator_user, comment.id, "Abusive", BanDuration.permanent()
    )

    assert not moderated.is_visible
    assert ban.comment_id == comment.id
    assert ban.post_id == test_post.id
    assert ban.until_timestamp is None
    assert gate.active_ban(other_user.id, test_post.sphere_id) is ban


def test_moderating_missing_content_is_not_found(gate, moderator_user) -> None:
    with pytest.raises(NotFoundError):
        gate.moderate_post(moderator_user, 9999, "Gone", BanDuration.none())
    with pytest.raises(NotFoundError):
        gate.moderate_comment(moderator_user, 9999, "Gone", BanDuration.none())


def test_lift_sphere_ban(gate, moderator_user, other_user, test_post) -> None:
    _, ban = gate.moderate_post(moderator_user, test_post.id, "Spam", BanDuration.permanent())

    lifted = gate.lift_ban(moderator_user, ban.id)

    assert lifted.delete_timestamp == FIXED_NOW
    gate.authorize_publish(other_user.id, test_post.sphere_id)
    with pytest.raises(NotFoundError):
        gate.lift_ban(moderator_user, ban.id)


def test_only_admins_lift_global_bans(
    gate, db_session, moderator_user, admin_user, other_user, test_post
) -> None:
    ban = UserBan(
        user_id=other_user.id,
        sphere_id=None,
        post_id=test_post.id,
        moderator_id=admin_user.id,
    )
    db_session.add(ban)
    db_session.commit()

    with pytest.raises(UnauthorizedError):
        gate.lift_ban(moderator_user, ban.id)

    assert gate.lift_ban(admin_user, ban.id).delete_timestamp == FIXED_NOW


def test_authorize_vote_requires_existing_post(gate, test_user) -> None:
    with pytest.raises(NotFoundError):
        gate.authorize_vote(test_user.id, 9999)
