"""Assemble flat comment rows into sorted, nested comment trees."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from sphere_stage.db.time import as_utc
from sphere_stage.models import Comment, Vote
from sphere_stage.services.ranking import CommentSortType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommentRow:
    """A comment as loaded from storage, with the viewer's vote if any."""

    comment: Comment
    vote: Vote | None = None


@dataclass
class CommentNode:
    """A comment with its viewer vote and its already sorted replies."""

    comment: Comment
    vote: Vote | None = None
    children: list[CommentNode] = field(default_factory=list)


def _best_key(node: CommentNode) -> tuple[Any, ...]:
    comment = node.comment
    return (
        not comment.is_pinned,
        -comment.score,
        as_utc(comment.create_timestamp).timestamp(),
        comment.id,
    )


def _recent_key(node: CommentNode) -> tuple[Any, ...]:
    comment = node.comment
    return (
        not comment.is_pinned,
        -as_utc(comment.create_timestamp).timestamp(),
        comment.id,
    )


_SORT_KEYS: dict[CommentSortType, Callable[[CommentNode], tuple[Any, ...]]] = {
    CommentSortType.BEST: _best_key,
    CommentSortType.RECENT: _recent_key,
}


def sort_key_for(sort_type: CommentSortType) -> Callable[[CommentNode], tuple[Any, ...]]:
    """Return the sibling ordering key: pinned first, then the sort column descending."""
    return _SORT_KEYS[CommentSortType(sort_type)]


def build_comment_forest(
    rows: Iterable[CommentRow],
    sort_type: CommentSortType,
    max_depth: int | None = None,
) -> list[CommentNode]:
    """Build sorted comment trees from flat rows.

    Every visible row appears exactly once. A row whose parent is absent from
    the input (or hidden) becomes a root, so a partial load still renders.
    Siblings are ordered pinned first, then by ``sort_type`` descending, with
    ties broken by older creation then lower id.

    Args:
        rows: Comment rows in any order.
        sort_type: Ordering applied to every sibling list.
        max_depth: Replies nested deeper than this many levels below a root
            are dropped. None keeps every level; 0 keeps only roots.

    Returns:
        The root nodes, sorted.
    """
    nodes: dict[int, CommentNode] = {}
    for row in rows:
        if not row.comment.is_visible:
            continue
        if row.comment.id in nodes:
            logger.debug("Duplicate comment row %s ignored", row.comment.id)
            continue
        nodes[row.comment.id] = CommentNode(comment=row.comment, vote=row.vote)

    roots: list[CommentNode] = []
    for node in nodes.values():
        parent_id = node.comment.parent_id
        parent = nodes.get(parent_id) if parent_id is not None else None
        if parent is None or parent is node:
            roots.append(node)
        else:
            parent.children.append(node)

    key = sort_key_for(sort_type)
    _sort_and_trim(roots, key, max_depth, depth=0)
    return roots


def _sort_and_trim(
    siblings: list[CommentNode],
    key: Callable[[CommentNode], tuple[Any, ...]],
    max_depth: int | None,
    depth: int,
) -> None:
    siblings.sort(key=key)
    for node in siblings:
        if max_depth is not None and depth >= max_depth:
            node.children = []
            continue
        _sort_and_trim(node.children, key, max_depth, depth + 1)


def flatten_forest(roots: Iterable[CommentNode]) -> Iterator[tuple[int, CommentNode]]:
    """Yield ``(depth, node)`` pairs in display order (depth-first, pre-order)."""
    stack = [(0, node) for node in reversed(list(roots))]
    while stack:
        depth, node = stack.pop()
        yield depth, node
        stack.extend((depth + 1, child) for child in reversed(node.children))
