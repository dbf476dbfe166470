from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.api.deps import get_current_user, get_db
from app.api.http_errors import engine_error
from app.api.routes.posts import post_response
from app.models.user import User
from app.schemas.posts import PostResponse
from app.schemas.users import BlockResponse, UserListItem
from app.services import relationships
from app.services.engine import Action, ByAuthor, Target, list_blocked, perform, resolve
from app.services.errors import EngineError

router = APIRouter(prefix="/users", tags=["users"])


def _user_item(u: User) -> UserListItem:
    return UserListItem(
        id=u.id,
        username=u.username,
        display_name=u.display_name,
        avatar_url=u.avatar_url,
    )


@router.get("", response_model=list[UserListItem])
async def list_users_route(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    users = await relationships.list_users(db)
    return [_user_item(u) for u in users]


@router.get("/blocked", response_model=list[UserListItem])
async def list_blocked_route(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return [_user_item(u) for u in await list_blocked(db, user.id)]


@router.get("/{user_id}", response_model=UserListItem)
async def get_user_route(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    found = await relationships.get_user(db, user_id)
    if found is None:
        raise HTTPException(status_code=404, detail="User not found")
    return _user_item(found)


@router.get("/{user_id}/posts", response_model=list[PostResponse])
async def user_posts_route(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    posts = await resolve(db, user.id, ByAuthor(author_id=user_id))
    return [post_response(p) for p in posts]


@router.post("/{user_id}/block", response_model=BlockResponse, status_code=201)
async def block_user_route(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        await perform(db, user.id, Action.BLOCK_USER, Target(user_id=user_id))
        return BlockResponse(ok=True, blocked=True)
    except EngineError as e:
        raise engine_error(e) from e


@router.delete("/{user_id}/block", response_model=BlockResponse, status_code=200)
async def unblock_user_route(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        await perform(db, user.id, Action.UNBLOCK_USER, Target(user_id=user_id))
        return BlockResponse(ok=True, blocked=False)
    except EngineError as e:
        raise engine_error(e) from e
