"""Service-level helpers for creating, editing and deleting posts and comments."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from sphere_stage.db.time import utcnow
from sphere_stage.models import Comment, Post, Satellite, Sphere, SphereModerator, User, Vote
from sphere_stage.services.errors import NotFoundError, UnauthorizedError
from sphere_stage.services.moderation import ModerationGate
from sphere_stage.services.ranking import VoteValue
from sphere_stage.services.score_aggregator import refresh_post_ranking

logger = logging.getLogger(__name__)


def create_sphere(
    db: Session,
    *,
    creator: User,
    slug: str,
    display_name: str,
    description_md: str | None = None,
) -> Sphere:
    """Create a sphere; its creator becomes its first moderator.

    Raises:
        ValueError: If the slug is already taken.
    """
    if db.query(Sphere).filter(Sphere.slug == slug).first() is not None:
        raise ValueError(f"Sphere '{slug}' already exists")

    sphere = Sphere(
        slug=slug,
        display_name=display_name,
        description_md=description_md,
        creator_id=creator.id,
    )
    db.add(sphere)
    db.flush()
    db.add(SphereModerator(sphere_id=sphere.id, user_id=creator.id))
    db.commit()
    logger.info("Sphere %s created by user %s", slug, creator.id)
    return sphere


def create_satellite(
    db: Session,
    gate: ModerationGate,
    *,
    moderator: User,
    sphere_id: int,
    title: str,
) -> Satellite:
    """Add a satellite board to a sphere; moderators only."""
    if db.get(Sphere, sphere_id) is None:
        raise NotFoundError("Sphere not found")
    gate.require_moderator(moderator, sphere_id)

    satellite = Satellite(sphere_id=sphere_id, title=title)
    db.add(satellite)
    db.commit()
    return satellite


def create_post(
    db: Session,
    gate: ModerationGate,
    *,
    author: User,
    sphere_id: int,
    title: str,
    body: str,
    satellite_id: int | None = None,
    is_pinned: bool = False,
) -> Post:
    """Publish a post; the author's upvote is recorded with it.

    Raises:
        NotFoundError: If the sphere or satellite does not exist.
        UnauthorizedError: If the author is banned, or pins without moderator rights.
    """
    if db.get(Sphere, sphere_id) is None:
        raise NotFoundError("Sphere not found")
    if satellite_id is not None:
        satellite = db.get(Satellite, satellite_id)
        if satellite is None or satellite.sphere_id != sphere_id:
            raise NotFoundError("Satellite not found")

    gate.authorize_publish(author.id, sphere_id)
    if is_pinned:
        gate.require_moderator(author, sphere_id)

    post = Post(
        sphere_id=sphere_id,
        satellite_id=satellite_id,
        creator_id=author.id,
        title=title,
        body=body,
        is_pinned=is_pinned,
        num_comments=0,
        score=int(VoteValue.UP),
        score_minus=0,
    )
    db.add(post)
    db.flush()
    db.add(Vote(voter_id=author.id, post_id=post.id, value=int(VoteValue.UP)))
    refresh_post_ranking(post, post.create_timestamp)
    db.commit()
    logger.debug("Post %s created in sphere %s", post.id, sphere_id)
    return post


def delete_post(db: Session, *, user: User, post_id: int) -> Post:
    """Soft delete a post by its author, clearing its content."""
    post = db.get(Post, post_id)
    if post is None or not post.is_visible:
        raise NotFoundError("Post not found")
    if post.creator_id != user.id:
        raise UnauthorizedError("Only the author can delete this post")

    now = utcnow()
    post.title = ""
    post.body = ""
    post.is_pinned = False
    post.edit_timestamp = now
    post.delete_timestamp = now
    db.commit()
    return post


def create_comment(
    db: Session,
    gate: ModerationGate,
    *,
    author: User,
    post_id: int,
    body: str,
    parent_id: int | None = None,
    is_pinned: bool = False,
) -> Comment:
    """Reply to a post or comment; bumps the post's comment count.

    Raises:
        NotFoundError: If the post or parent comment is missing or hidden.
        UnauthorizedError: If the author is banned from the sphere, or asks
            to pin without moderating it.
    """
    post = db.get(Post, post_id)
    if post is None or not post.is_visible:
        raise NotFoundError("Post not found")
    if parent_id is not None:
        parent = db.get(Comment, parent_id)
        if parent is None or parent.post_id != post_id or not parent.is_visible:
            raise NotFoundError("Parent comment not found")

    gate.authorize_publish(author.id, post.sphere_id)
    if is_pinned:
        gate.require_moderator(author, post.sphere_id)

    comment = Comment(
        post_id=post_id,
        parent_id=parent_id,
        creator_id=author.id,
        body=body,
        is_pinned=is_pinned,
        score=int(VoteValue.UP),
        score_minus=0,
    )
    db.add(comment)
    db.flush()
    db.add(
        Vote(
            voter_id=author.id,
            post_id=post_id,
            comment_id=comment.id,
            value=int(VoteValue.UP),
        )
    )
    post.num_comments += 1
    db.commit()
    logger.debug("Comment %s created on post %s", comment.id, post_id)
    return comment


def update_comment(
    db: Session,
    gate: ModerationGate,
    *,
    user: User,
    comment_id: int,
    body: str,
    is_pinned: bool | None = None,
) -> Comment:
    """Edit a comment's body; pinning requires moderator rights in the sphere."""
    comment = db.get(Comment, comment_id)
    if comment is None or not comment.is_visible:
        raise NotFoundError("Comment not found")
    if comment.creator_id != user.id:
        raise UnauthorizedError("Only the author can edit this comment")

    if is_pinned is not None and is_pinned != comment.is_pinned:
        post = db.get(Post, comment.post_id)
        if post is None:
            raise NotFoundError("Post not found")
        gate.require_moderator(user, post.sphere_id)
        comment.is_pinned = is_pinned

    comment.body = body
    comment.edit_timestamp = utcnow()
    db.commit()
    return comment


def delete_comment(db: Session, *, user: User, comment_id: int) -> Comment:
    """Soft delete a comment by its author, clearing its content."""
    comment = db.get(Comment, comment_id)
    if comment is None or not comment.is_visible:
        raise NotFoundError("Comment not found")
    if comment.creator_id != user.id:
        raise UnauthorizedError("Only the author can delete this comment")

    now = utcnow()
    comment.body = ""
    comment.is_pinned = False
    comment.edit_timestamp = now
    comment.delete_timestamp = now
    db.commit()
    return comment
