"""Data access helpers for loading pages of comments."""
from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import Select, and_, false, select
from sqlalchemy.orm import Session

from sphere_stage.models import Comment, Vote
from sphere_stage.services.comment_tree import CommentRow
from sphere_stage.services.errors import NotFoundError
from sphere_stage.services.ranking import CommentSortType

__all__ = ["CommentRepository"]


class CommentRepository:
    """Loads comment rows, each paired with the viewer's own vote."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, comment_id: int) -> Comment | None:
        """Return a comment by identifier."""
        return self.session.get(Comment, comment_id)

    def get_visible(self, comment_id: int) -> Comment | None:
        """Return a comment unless it is missing, deleted or moderated."""
        comment = self.get_by_id(comment_id)
        if comment is None or not comment.is_visible:
            return None
        return comment

    def load_comment_page(
        self,
        post_id: int,
        sort_type: CommentSortType,
        limit: int,
        offset: int = 0,
        viewer_id: int | None = None,
        max_depth: int | None = None,
    ) -> list[CommentRow]:
        """Return the visible comments under a page of a post's root comments.

        Roots are paginated in display order (pinned first, then ``sort_type``),
        hidden roots included, so a page may hold fewer than ``limit`` visible
        roots. Replies are loaded level by level below the page's roots, down
        to ``max_depth`` levels, walking through deleted and moderated comments.
        Only visible rows are returned; a reply whose parent is hidden comes
        back without its parent and is shown as a root.
        """
        roots = self._rows(
            self._select_rows(viewer_id)
            .where(Comment.post_id == post_id, Comment.parent_id.is_(None))
            .order_by(*self._ordering(sort_type))
            .limit(limit)
            .offset(offset)
        )
        descendants = self._load_descendants([row.comment.id for row in roots], viewer_id, max_depth)
        return _visible(roots + descendants)

    def load_comment_thread(
        self,
        comment_id: int,
        viewer_id: int | None = None,
        max_depth: int | None = None,
    ) -> list[CommentRow]:
        """Return a comment, its visible parent and its visible replies.

        Raises:
            NotFoundError: If the comment is missing or hidden.
        """
        rows = self._rows(self._select_rows(viewer_id).where(Comment.id == comment_id))
        if not rows or not rows[0].comment.is_visible:
            raise NotFoundError("Comment not found")
        comment = rows[0].comment

        if comment.parent_id is not None:
            rows = (
                self._rows(self._select_rows(viewer_id).where(Comment.id == comment.parent_id))
                + rows
            )
        return _visible(rows + self._load_descendants([comment.id], viewer_id, max_depth))

    def _load_descendants(
        self,
        parent_ids: Sequence[int],
        viewer_id: int | None,
        max_depth: int | None,
    ) -> list[CommentRow]:
        rows: list[CommentRow] = []
        frontier = list(parent_ids)
        depth = 0
        while frontier and (max_depth is None or depth < max_depth):
            level = self._rows(
                self._select_rows(viewer_id)
                .where(Comment.parent_id.in_(frontier))
                .order_by(Comment.id)
            )
            rows.extend(level)
            frontier = [row.comment.id for row in level]
            depth += 1
        return rows

    @staticmethod
    def _select_rows(viewer_id: int | None) -> Select[tuple[Comment, Vote]]:
        if viewer_id is None:
            onclause = false()
        else:
            onclause = and_(Vote.comment_id == Comment.id, Vote.voter_id == viewer_id)
        return select(Comment, Vote).outerjoin(Vote, onclause)

    @staticmethod
    def _ordering(sort_type: CommentSortType) -> tuple:
        if CommentSortType(sort_type) is CommentSortType.RECENT:
            return (
                Comment.is_pinned.desc(),
                Comment.create_timestamp.desc(),
                Comment.id.asc(),
            )
        return (
            Comment.is_pinned.desc(),
            Comment.score.desc(),
            Comment.create_timestamp.asc(),
            Comment.id.asc(),
        )

    def _rows(self, stmt: Select[tuple[Comment, Vote]]) -> list[CommentRow]:
        return [CommentRow(comment=comment, vote=vote) for comment, vote in self.session.execute(stmt)]


def _visible(rows: list[CommentRow]) -> list[CommentRow]:
    return [row for row in rows if row.comment.is_visible]
