"""Authorization engine: the one entry point for relationship and content actions.

``perform`` runs a state transition for an explicit actor and owns the
transaction around it; ``resolve`` answers filtered reads. Route handlers
never touch the stores directly for anything that needs a policy decision.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Union
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base_class import Base
from app.models.group import Group
from app.models.group_post import GroupPost
from app.models.post import Post
from app.models.user import User
from app.services import content, membership, relationships, visibility
from app.services.errors import ConflictError, EngineError, ForbiddenError, NotFoundError
from app.services.membership import RelationshipState


logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    CREATE_GROUP = "create_group"
    REQUEST_JOIN = "request_join"
    CANCEL_REQUEST = "cancel_request"
    ACCEPT_REQUEST = "accept_request"
    REJECT_REQUEST = "reject_request"
    LEAVE = "leave"
    REMOVE_MEMBER = "remove_member"
    PROMOTE = "promote"
    DEMOTE = "demote"
    DELETE_GROUP = "delete_group"
    CREATE_POST = "create_post"
    DELETE_POST = "delete_post"
    CREATE_GROUP_POST = "create_group_post"
    DELETE_GROUP_POST = "delete_group_post"
    BLOCK_USER = "block_user"
    UNBLOCK_USER = "unblock_user"


@dataclass(frozen=True)
class Target:
    group_id: UUID | None = None
    user_id: UUID | None = None
    post_id: UUID | None = None


@dataclass(frozen=True)
class ByAuthor:
    author_id: UUID


@dataclass(frozen=True)
class AllPublic:
    pass


@dataclass(frozen=True)
class ByGroup:
    group_id: UUID


@dataclass(frozen=True)
class PostById:
    post_id: UUID


Query = Union[ByAuthor, AllPublic, ByGroup, PostById]

Handler = Callable[[AsyncSession, UUID, Target, Mapping[str, Any]], Awaitable[Any]]


def _required(value: UUID | None, field: str) -> UUID:
    if value is None:
        raise ValueError(f"target.{field} is required for this action")
    return value


# ─────────────────────────────────────────────
# Membership handlers
# ─────────────────────────────────────────────

async def _create_group(db: AsyncSession, actor_id: UUID, target: Target, payload: Mapping[str, Any]) -> Group:
    return await membership.create_group(
        db,
        actor_id,
        name=payload.get("name", ""),
        description=payload.get("description"),
        picture=payload.get("picture"),
    )


async def _request_join(db, actor_id, target, payload):
    return await membership.request_join(db, _required(target.group_id, "group_id"), actor_id)


async def _cancel_request(db, actor_id, target, payload):
    return await membership.cancel_request(db, _required(target.group_id, "group_id"), actor_id)


async def _accept_request(db, actor_id, target, payload):
    return await membership.accept_request(
        db, _required(target.group_id, "group_id"), actor_id, _required(target.user_id, "user_id")
    )


async def _reject_request(db, actor_id, target, payload):
    return await membership.reject_request(
        db, _required(target.group_id, "group_id"), actor_id, _required(target.user_id, "user_id")
    )


async def _leave(db, actor_id, target, payload):
    return await membership.leave_group(db, _required(target.group_id, "group_id"), actor_id)


async def _remove_member(db, actor_id, target, payload):
    return await membership.remove_member(
        db, _required(target.group_id, "group_id"), actor_id, _required(target.user_id, "user_id")
    )


async def _promote(db, actor_id, target, payload):
    return await membership.promote_member(
        db, _required(target.group_id, "group_id"), actor_id, _required(target.user_id, "user_id")
    )


async def _demote(db, actor_id, target, payload):
    return await membership.demote_member(
        db, _required(target.group_id, "group_id"), actor_id, _required(target.user_id, "user_id")
    )


async def _delete_group(db, actor_id, target, payload):
    await membership.delete_group(db, _required(target.group_id, "group_id"), actor_id)


# ─────────────────────────────────────────────
# Content handlers
# ─────────────────────────────────────────────

async def _create_post(db: AsyncSession, actor_id: UUID, target: Target, payload: Mapping[str, Any]) -> Post:
    return await content.insert_post(
        db,
        author_id=actor_id,
        content=payload.get("content"),
        picture=payload.get("picture"),
        is_public=bool(payload.get("is_public", True)),
    )


async def _delete_post(db: AsyncSession, actor_id: UUID, target: Target, payload: Mapping[str, Any]) -> None:
    post_id = _required(target.post_id, "post_id")
    post = await content.get_post(db, post_id)
    if post is None:
        raise NotFoundError("post_not_found", "Post not found")
    if post.author_id != actor_id:
        raise ForbiddenError("author_required", "Only the author can delete this post")
    if not await content.delete_post(db, post_id):
        raise NotFoundError("post_not_found", "Post not found")


async def _create_group_post(db: AsyncSession, actor_id: UUID, target: Target, payload: Mapping[str, Any]) -> GroupPost:
    group = await membership.lock_group(db, _required(target.group_id, "group_id"))
    state = await membership.relationship_state(db, group, actor_id)
    if not state.is_member:
        raise ForbiddenError("member_required", "Only group members can post here")
    return await content.insert_group_post(
        db,
        group_id=group.id,
        author_id=actor_id,
        content=payload.get("content"),
        picture=payload.get("picture"),
    )


async def _delete_group_post(db: AsyncSession, actor_id: UUID, target: Target, payload: Mapping[str, Any]) -> None:
    group = await membership.lock_group(db, _required(target.group_id, "group_id"))
    post = await content.get_group_post(db, group.id, _required(target.post_id, "post_id"))
    if post is None:
        raise NotFoundError("post_not_found", "Post not found")

    if post.author_id != actor_id:
        state = await membership.relationship_state(db, group, actor_id)
        if not state.can_moderate:
            raise ForbiddenError("admin_required", "Only the author or a group admin can delete this post")

    if not await content.delete_group_post(db, post.id):
        raise NotFoundError("post_not_found", "Post not found")


# ─────────────────────────────────────────────
# Blocking handlers
# ─────────────────────────────────────────────

async def _block_user(db: AsyncSession, actor_id: UUID, target: Target, payload: Mapping[str, Any]) -> None:
    user_id = _required(target.user_id, "user_id")
    if user_id == actor_id:
        raise ConflictError("cannot_block_self", "You cannot block yourself")
    if await relationships.get_user(db, user_id) is None:
        raise NotFoundError("user_not_found", "User not found")
    if await relationships.get_blocking(db, actor_id, user_id) is not None:
        raise ConflictError("already_blocked", "User already blocked")

    try:
        await relationships.insert_blocking(db, actor_id, user_id)
    except IntegrityError as exc:
        logger.warning("duplicate blocking blocker=%s blocked=%s", actor_id, user_id)
        raise ConflictError("already_blocked", "User already blocked") from exc


async def _unblock_user(db: AsyncSession, actor_id: UUID, target: Target, payload: Mapping[str, Any]) -> None:
    user_id = _required(target.user_id, "user_id")
    if not await relationships.delete_blocking(db, actor_id, user_id):
        raise NotFoundError("blocking_not_found", "User is not blocked")


_HANDLERS: dict[Action, Handler] = {
    Action.CREATE_GROUP: _create_group,
    Action.REQUEST_JOIN: _request_join,
    Action.CANCEL_REQUEST: _cancel_request,
    Action.ACCEPT_REQUEST: _accept_request,
    Action.REJECT_REQUEST: _reject_request,
    Action.LEAVE: _leave,
    Action.REMOVE_MEMBER: _remove_member,
    Action.PROMOTE: _promote,
    Action.DEMOTE: _demote,
    Action.DELETE_GROUP: _delete_group,
    Action.CREATE_POST: _create_post,
    Action.DELETE_POST: _delete_post,
    Action.CREATE_GROUP_POST: _create_group_post,
    Action.DELETE_GROUP_POST: _delete_group_post,
    Action.BLOCK_USER: _block_user,
    Action.UNBLOCK_USER: _unblock_user,
}


async def perform(
    db: AsyncSession,
    actor_id: UUID,
    action: Action,
    target: Target | None = None,
    payload: Mapping[str, Any] | None = None,
) -> Any:
    """Check and execute ``action`` for ``actor_id`` as one transaction.

    Raises an ``EngineError`` subclass on refusal; the session is rolled back
    so the prior state is left untouched.
    """
    action = Action(action)
    handler = _HANDLERS[action]
    target = target or Target()

    try:
        result = await handler(db, actor_id, target, payload or {})
        await db.commit()
    except EngineError as exc:
        await db.rollback()
        logger.info("refused action=%s actor=%s target=%s code=%s", action.value, actor_id, target, exc.code)
        raise
    except Exception:
        await db.rollback()
        raise

    if isinstance(result, Base):
        await db.refresh(result)
    logger.info("performed action=%s actor=%s target=%s", action.value, actor_id, target)
    return result


async def resolve(db: AsyncSession, viewer_id: UUID, query: Query) -> list[Post] | list[GroupPost]:
    """Content from ``query`` that ``viewer_id`` may see, re-evaluated on every call."""
    blocked_ids = await relationships.blocked_either_way(db, viewer_id)

    if isinstance(query, ByAuthor):
        posts = await content.posts_by_author(db, query.author_id)
        return visibility.visible_posts(viewer_id, posts, blocked_ids)

    if isinstance(query, AllPublic):
        posts = await content.public_posts(db, exclude_author_ids=blocked_ids)
        return visibility.visible_posts(viewer_id, posts, blocked_ids)

    if isinstance(query, PostById):
        post = await content.get_post(db, query.post_id)
        if post is None:
            return []
        return visibility.visible_posts(viewer_id, [post], blocked_ids)

    if isinstance(query, ByGroup):
        group = await relationships.get_group(db, query.group_id)
        if group is None:
            raise NotFoundError("group_not_found", "Group not found")
        member_ids = await relationships.member_group_ids(db, viewer_id)
        posts = await content.posts_in_group(db, group.id)
        return visibility.visible_group_posts(viewer_id, posts, blocked_ids, member_ids)

    raise TypeError(f"unsupported query: {query!r}")


# ─────────────────────────────────────────────
# Relationship reads
# ─────────────────────────────────────────────

async def group_with_state(db: AsyncSession, actor_id: UUID, group_id: UUID) -> tuple[Group, RelationshipState]:
    group = await relationships.get_group(db, group_id)
    if group is None:
        raise NotFoundError("group_not_found", "Group not found")
    return group, await membership.relationship_state(db, group, actor_id)


async def list_groups(db: AsyncSession, actor_id: UUID) -> list[tuple[Group, RelationshipState]]:
    groups = await relationships.list_groups(db)
    admin_flags = await relationships.admin_flags_by_group(db, actor_id)
    requested = await relationships.requested_group_ids(db, actor_id)

    rows: list[tuple[Group, RelationshipState]] = []
    for g in groups:
        if g.id in admin_flags:
            state = membership.member_state(g, actor_id, admin_flags[g.id])
        elif g.id in requested:
            state = RelationshipState.REQUESTED
        else:
            state = RelationshipState.NONE
        rows.append((g, state))
    return rows


async def list_my_groups(db: AsyncSession, actor_id: UUID) -> list[tuple[Group, RelationshipState]]:
    rows = await relationships.list_groups_for_user(db, actor_id)
    return [(g, membership.member_state(g, actor_id, is_admin)) for g, is_admin in rows]


async def list_group_members(db: AsyncSession, actor_id: UUID, group_id: UUID) -> list[tuple[User, RelationshipState]]:
    group, state = await group_with_state(db, actor_id, group_id)
    if not state.is_member:
        raise ForbiddenError("member_required", "Not a member of this group")

    members = await relationships.list_members(db, group.id)
    return [(user, membership.member_state(group, user.id, is_admin)) for user, is_admin in members]


async def list_join_requests(db: AsyncSession, actor_id: UUID, group_id: UUID):
    group, state = await group_with_state(db, actor_id, group_id)
    if not state.can_moderate:
        raise ForbiddenError("admin_required", "Only group admins can see join requests")
    return await relationships.list_requests(db, group.id)


async def list_blocked(db: AsyncSession, actor_id: UUID) -> list[User]:
    return await relationships.list_blocked_users(db, actor_id)
