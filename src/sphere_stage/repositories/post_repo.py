"""Data access helpers for working with posts."""
from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from sphere_stage.models import Post, Vote
from sphere_stage.services.ranking import PostSortType

__all__ = ["PostRepository"]


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier."""
        return self.session.get(Post, post_id)

    def get_visible(self, post_id: int) -> Post | None:
        """Return a post unless it is missing, deleted or moderated."""
        post = self.get_by_id(post_id)
        if post is None or not post.is_visible:
            return None
        return post

    def list_sorted(
        self,
        sort_type: PostSortType,
        limit: int,
        offset: int = 0,
        sphere_id: int | None = None,
        satellite_id: int | None = None,
    ) -> list[Post]:
        """Return visible posts in display order.

        Inside a sphere, pinned posts come first and satellite posts are only
        listed when ``satellite_id`` selects their satellite. The global feed
        ignores pinning.
        """
        stmt = self._visible()
        if sphere_id is not None:
            stmt = stmt.where(Post.sphere_id == sphere_id)
        if satellite_id is not None:
            stmt = stmt.where(Post.satellite_id == satellite_id)
        elif sphere_id is not None:
            stmt = stmt.where(Post.satellite_id.is_(None))

        order = []
        if sphere_id is not None or satellite_id is not None:
            order.append(Post.is_pinned.desc())

        column = getattr(Post, PostSortType(sort_type).order_by_column())
        order.extend([column.desc(), Post.id.desc()])

        result = self.session.execute(stmt.order_by(*order).limit(limit).offset(offset))
        return list(result.scalars())

    def viewer_votes(self, viewer_id: int, post_ids: list[int]) -> dict[int, Vote]:
        """Return the viewer's post votes keyed by post id."""
        if not post_ids:
            return {}
        result = self.session.execute(
            select(Vote).where(
                Vote.voter_id == viewer_id,
                Vote.post_id.in_(post_ids),
                Vote.comment_id.is_(None),
            )
        )
        return {vote.post_id: vote for vote in result.scalars()}

    @staticmethod
    def _visible() -> Select[tuple[Post]]:
        return select(Post).where(Post.delete_timestamp.is_(None), Post.moderator_id.is_(None))
