# src/sphere_stage/api/v1/endpoints/posts.py
"""Post-related endpoints for the Sphere API."""

from fastapi import APIRouter, HTTPException, Query, status

from sphere_stage.api.v1.dependencies import (
    CurrentUserDep,
    GateDep,
    OptionalUserDep,
    SessionDep,
    raise_http_error,
)
from sphere_stage.core.settings import settings
from sphere_stage.models import Comment, Post, Sphere
from sphere_stage.repositories.comment_repo import CommentRepository
from sphere_stage.repositories.post_repo import PostRepository
from sphere_stage.schemas.comment import CommentCreate, CommentNodeOut, CommentResponse
from sphere_stage.schemas.post import PostCreate, PostResponse, PostView
from sphere_stage.schemas.vote import VoteOut
from sphere_stage.services import content
from sphere_stage.services.comment_tree import build_comment_forest
from sphere_stage.services.errors import RankingError
from sphere_stage.services.ranking import CommentSortType, PostSortType

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/", response_model=list[PostView])
async def list_posts(
    db: SessionDep,
    viewer: OptionalUserDep,
    sort: PostSortType = Query(PostSortType.HOT),
    sphere: str | None = Query(None, description="Sphere slug"),
    satellite_id: int | None = Query(None),
    limit: int = Query(settings.post_batch_size, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> list[PostView]:
    """List visible posts, globally or inside one sphere."""
    sphere_id = None
    if sphere is not None:
        found = db.query(Sphere).filter(Sphere.slug == sphere).first()
        if found is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sphere not found")
        sphere_id = found.id

    repo = PostRepository(db)
    posts = repo.list_sorted(sort, limit, offset, sphere_id=sphere_id, satellite_id=satellite_id)
    votes = repo.viewer_votes(viewer.id, [post.id for post in posts]) if viewer else {}
    return [
        PostView(
            post=PostResponse.model_validate(post),
            vote=VoteOut.model_validate(votes[post.id]) if post.id in votes else None,
        )
        for post in posts
    ]


@router.get("/{post_id}", response_model=PostView)
async def get_post(
    post_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> PostView:
    """Get a specific post by ID."""
    repo = PostRepository(db)
    post = repo.get_visible(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    vote = repo.viewer_votes(viewer.id, [post.id]).get(post.id) if viewer else None
    return PostView(
        post=PostResponse.model_validate(post),
        vote=VoteOut.model_validate(vote) if vote is not None else None,
    )


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    gate: GateDep,
) -> Post:
    """Create a new post; the author's upvote is recorded with it."""
    try:
        return content.create_post(
            db,
            gate,
            author=current_user,
            sphere_id=post_data.sphere_id,
            title=post_data.title,
            body=post_data.body,
            satellite_id=post_data.satellite_id,
            is_pinned=post_data.is_pinned,
        )
    except RankingError as err:
        raise_http_error(err)


@router.delete("/{post_id}", response_model=PostResponse)
async def delete_post(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Post:
    """Soft delete a post (author only)."""
    try:
        return content.delete_post(db, user=current_user, post_id=post_id)
    except RankingError as err:
        raise_http_error(err)


@router.get("/{post_id}/comments", response_model=list[CommentNodeOut])
async def get_post_comments(
    post_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    sort: CommentSortType = Query(CommentSortType.BEST),
    limit: int = Query(settings.comment_batch_size, ge=1, le=200),
    offset: int = Query(0, ge=0),
    max_depth: int | None = Query(None, ge=0),
) -> list[CommentNodeOut]:
    """Get a page of a post's comment tree.

    ``limit`` and ``offset`` page over root comments; each root comes with
    its visible replies.
    """
    if PostRepository(db).get_visible(post_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    depth = max_depth if max_depth is not None else settings.comment_max_depth
    rows = CommentRepository(db).load_comment_page(
        post_id,
        sort,
        limit,
        offset,
        viewer_id=viewer.id if viewer else None,
        max_depth=depth,
    )
    forest = build_comment_forest(rows, sort, depth)
    return [CommentNodeOut.from_node(node) for node in forest]


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: int,
    comment_data: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    gate: GateDep,
) -> Comment:
    """Reply to a post or to one of its comments."""
    try:
        return content.create_comment(
            db,
            gate,
            author=current_user,
            post_id=post_id,
            body=comment_data.body,
            parent_id=comment_data.parent_id,
            is_pinned=comment_data.is_pinned,
        )
    except RankingError as err:
        raise_http_error(err)
