# src/sphere_stage/api/v1/endpoints/comments.py
"""Comment-related endpoints for the Sphere API."""

from fastapi import APIRouter, HTTPException, Query, status

from sphere_stage.api.v1.dependencies import (
    CurrentUserDep,
    GateDep,
    OptionalUserDep,
    SessionDep,
    raise_http_error,
)
from sphere_stage.core.settings import settings
from sphere_stage.models import Comment
from sphere_stage.repositories.comment_repo import CommentRepository
from sphere_stage.repositories.post_repo import PostRepository
from sphere_stage.schemas.comment import CommentNodeOut, CommentResponse, CommentUpdate
from sphere_stage.services import content
from sphere_stage.services.comment_tree import build_comment_forest
from sphere_stage.services.errors import RankingError
from sphere_stage.services.ranking import CommentSortType

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/{comment_id}/thread", response_model=list[CommentNodeOut])
async def get_comment_thread(
    comment_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    sort: CommentSortType = Query(CommentSortType.BEST),
    max_depth: int | None = Query(None, ge=0),
) -> list[CommentNodeOut]:
    """Get a comment with its parent and replies, for deep links into a thread."""
    repo = CommentRepository(db)
    comment = repo.get_visible(comment_id)
    if comment is None or PostRepository(db).get_visible(comment.post_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")

    depth = max_depth if max_depth is not None else settings.comment_max_depth
    try:
        rows = repo.load_comment_thread(
            comment_id,
            viewer_id=viewer.id if viewer else None,
            max_depth=depth,
        )
    except RankingError as err:
        raise_http_error(err)

    # A shown parent becomes the root, one level above the requested comment.
    parent_shown = rows[0].comment.id != comment_id
    tree_depth = depth + 1 if depth is not None and parent_shown else depth
    forest = build_comment_forest(rows, sort, tree_depth)
    return [CommentNodeOut.from_node(node) for node in forest]


@router.patch("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: int,
    comment_data: CommentUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
    gate: GateDep,
) -> Comment:
    """Edit a comment (author only)."""
    try:
        return content.update_comment(
            db,
            gate,
            user=current_user,
            comment_id=comment_id,
            body=comment_data.body,
            is_pinned=comment_data.is_pinned,
        )
    except RankingError as err:
        raise_http_error(err)


@router.delete("/{comment_id}", response_model=CommentResponse)
async def delete_comment(
    comment_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Comment:
    """Soft delete a comment (author only)."""
    try:
        return content.delete_comment(db, user=current_user, comment_id=comment_id)
    except RankingError as err:
        raise_http_error(err)
