from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.api.deps import get_current_user, get_db
from app.api.http_errors import engine_error
from app.models.group import Group
from app.models.group_post import GroupPost
from app.models.user import User
from app.schemas.groups import (
    CreateGroupRequest,
    GroupListItem,
    GroupMember,
    GroupMembersResponse,
    GroupJoinRequestItem,
    RelationshipResponse,
    DeleteGroupResponse,
)
from app.schemas.posts import CreateGroupPostRequest, DeletePostResponse, GroupPostResponse
from app.services.engine import (
    Action,
    ByGroup,
    Target,
    group_with_state,
    list_group_members,
    list_groups,
    list_join_requests,
    list_my_groups,
    perform,
    resolve,
)
from app.services.errors import EngineError
from app.services.membership import RelationshipState

router = APIRouter(prefix="/groups", tags=["groups"])


def _group_item(g: Group, state: RelationshipState) -> GroupListItem:
    return GroupListItem(
        id=g.id,
        name=g.name,
        description=g.description,
        picture=g.picture,
        creator_id=g.creator_id,
        created_at=g.created_at,
        state=state.value,
    )


def _group_post_item(p: GroupPost) -> GroupPostResponse:
    return GroupPostResponse(
        id=p.id,
        group_id=p.group_id,
        author_id=p.author_id,
        author_username=p.author.username,
        author_display_name=p.author.display_name,
        author_avatar_url=p.author.avatar_url,
        content=p.content,
        picture=p.picture,
        created_at=p.created_at,
    )


async def _transition(
    db: AsyncSession,
    actor: User,
    action: Action,
    group_id: UUID,
    user_id: UUID,
) -> RelationshipResponse:
    try:
        state = await perform(db, actor.id, action, Target(group_id=group_id, user_id=user_id))
    except EngineError as e:
        raise engine_error(e) from e
    return RelationshipResponse(ok=True, group_id=group_id, user_id=user_id, state=state.value)


@router.post("", response_model=GroupListItem, status_code=201)
async def create_group_route(
    payload: CreateGroupRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        g = await perform(db, user.id, Action.CREATE_GROUP, payload=payload.model_dump())
        return _group_item(g, RelationshipState.OWNER)
    except EngineError as e:
        raise engine_error(e) from e


@router.get("", response_model=list[GroupListItem])
async def list_groups_route(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await list_groups(db, user.id)
    return [_group_item(g, state) for g, state in rows]


@router.get("/mine", response_model=list[GroupListItem])
async def list_my_groups_route(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await list_my_groups(db, user.id)
    return [_group_item(g, state) for g, state in rows]


@router.get("/{group_id}", response_model=GroupListItem)
async def group_detail_route(
    group_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        g, state = await group_with_state(db, user.id, group_id)
        return _group_item(g, state)
    except EngineError as e:
        raise engine_error(e) from e


@router.delete("/{group_id}", response_model=DeleteGroupResponse, status_code=200)
async def delete_group_route(
    group_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        await perform(db, user.id, Action.DELETE_GROUP, Target(group_id=group_id))
        return DeleteGroupResponse(ok=True)
    except EngineError as e:
        raise engine_error(e) from e


# ─────────────────────────────────────────────
# Join requests
# ─────────────────────────────────────────────

@router.post("/{group_id}/requests", response_model=RelationshipResponse, status_code=201)
async def request_join_route(
    group_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await _transition(db, user, Action.REQUEST_JOIN, group_id, user.id)


@router.delete("/{group_id}/requests", response_model=RelationshipResponse, status_code=200)
async def cancel_request_route(
    group_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await _transition(db, user, Action.CANCEL_REQUEST, group_id, user.id)


@router.get("/{group_id}/requests", response_model=list[GroupJoinRequestItem])
async def list_requests_route(
    group_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        rows = await list_join_requests(db, user.id, group_id)
    except EngineError as e:
        raise engine_error(e) from e
    return [
        GroupJoinRequestItem(
            user_id=u.id,
            username=u.username,
            display_name=u.display_name,
            requested_at=r.created_at,
        )
        for r, u in rows
    ]


@router.post("/{group_id}/requests/{user_id}/accept", response_model=RelationshipResponse, status_code=200)
async def accept_request_route(
    group_id: UUID,
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await _transition(db, user, Action.ACCEPT_REQUEST, group_id, user_id)


@router.post("/{group_id}/requests/{user_id}/reject", response_model=RelationshipResponse, status_code=200)
async def reject_request_route(
    group_id: UUID,
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await _transition(db, user, Action.REJECT_REQUEST, group_id, user_id)


# ─────────────────────────────────────────────
# Members
# ─────────────────────────────────────────────

@router.post("/{group_id}/leave", response_model=RelationshipResponse, status_code=200)
async def leave_group_route(
    group_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await _transition(db, user, Action.LEAVE, group_id, user.id)


@router.get("/{group_id}/members", response_model=GroupMembersResponse)
async def list_members_route(
    group_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        rows = await list_group_members(db, user.id, group_id)
    except EngineError as e:
        raise engine_error(e) from e
    return GroupMembersResponse(
        group_id=group_id,
        members=[
            GroupMember(
                id=m.id,
                username=m.username,
                display_name=m.display_name,
                avatar_url=m.avatar_url,
                role=state.value,
            )
            for m, state in rows
        ],
    )


@router.delete("/{group_id}/members/{user_id}", response_model=RelationshipResponse, status_code=200)
async def remove_member_route(
    group_id: UUID,
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await _transition(db, user, Action.REMOVE_MEMBER, group_id, user_id)


@router.post("/{group_id}/members/{user_id}/promote", response_model=RelationshipResponse, status_code=200)
async def promote_member_route(
    group_id: UUID,
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await _transition(db, user, Action.PROMOTE, group_id, user_id)


@router.post("/{group_id}/members/{user_id}/demote", response_model=RelationshipResponse, status_code=200)
async def demote_member_route(
    group_id: UUID,
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await _transition(db, user, Action.DEMOTE, group_id, user_id)


# ─────────────────────────────────────────────
# Group posts
# ─────────────────────────────────────────────

@router.post("/{group_id}/posts", response_model=GroupPostResponse, status_code=201)
async def create_group_post_route(
    group_id: UUID,
    payload: CreateGroupPostRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        post = await perform(
            db,
            user.id,
            Action.CREATE_GROUP_POST,
            Target(group_id=group_id),
            payload=payload.model_dump(),
        )
        return _group_post_item(post)
    except EngineError as e:
        raise engine_error(e) from e


@router.get("/{group_id}/posts", response_model=list[GroupPostResponse])
async def list_group_posts_route(
    group_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        posts = await resolve(db, user.id, ByGroup(group_id=group_id))
    except EngineError as e:
        raise engine_error(e) from e
    return [_group_post_item(p) for p in posts]


@router.delete("/{group_id}/posts/{post_id}", response_model=DeletePostResponse, status_code=200)
async def delete_group_post_route(
    group_id: UUID,
    post_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        await perform(db, user.id, Action.DELETE_GROUP_POST, Target(group_id=group_id, post_id=post_id))
        return DeletePostResponse(ok=True)
    except EngineError as e:
        raise engine_error(e) from e
