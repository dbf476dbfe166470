"""Read-time visibility rules for personal and group posts.

Everything here is pure: callers fetch the relationship facts for the viewer
(who they block or are blocked by, which groups they belong to) on every
read and pass them in, so a change to blocking takes effect on the very next
resolve.

Rules, in order:

1. Blocking in either direction hides the author's content from the viewer.
2. A personal post is visible when public, or to its author.
3. A group post is visible to members of its group.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from app.models.group_post import GroupPost
from app.models.post import Post


def is_blocked_pair(viewer_id: UUID, author_id: UUID, blocked_ids: set[UUID]) -> bool:
    if viewer_id == author_id:
        return False
    return author_id in blocked_ids


def can_view_post(viewer_id: UUID, post: Post, blocked_ids: set[UUID]) -> bool:
    if is_blocked_pair(viewer_id, post.author_id, blocked_ids):
        return False
    return post.is_public or post.author_id == viewer_id


def can_view_group_post(
    viewer_id: UUID,
    post: GroupPost,
    blocked_ids: set[UUID],
    member_group_ids: set[UUID],
) -> bool:
    if is_blocked_pair(viewer_id, post.author_id, blocked_ids):
        return False
    return post.group_id in member_group_ids


def visible_posts(viewer_id: UUID, posts: Iterable[Post], blocked_ids: set[UUID]) -> list[Post]:
    return [p for p in posts if can_view_post(viewer_id, p, blocked_ids)]


def visible_group_posts(
    viewer_id: UUID,
    posts: Iterable[GroupPost],
    blocked_ids: set[UUID],
    member_group_ids: set[UUID],
) -> list[GroupPost]:
    return [p for p in posts if can_view_group_post(viewer_id, p, blocked_ids, member_group_ids)]
