from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.api.deps import get_current_user, get_db
from app.api.http_errors import engine_error
from app.models.post import Post
from app.models.user import User
from app.schemas.posts import CreatePostRequest, DeletePostResponse, PostResponse
from app.services.engine import Action, AllPublic, PostById, Target, perform, resolve
from app.services.errors import EngineError

router = APIRouter(prefix="/posts", tags=["posts"])


def post_response(p: Post) -> PostResponse:
    return PostResponse(
        id=p.id,
        author_id=p.author_id,
        author_username=p.author.username,
        author_display_name=p.author.display_name,
        author_avatar_url=p.author.avatar_url,
        content=p.content,
        picture=p.picture,
        is_public=p.is_public,
        created_at=p.created_at,
    )


@router.post("", response_model=PostResponse, status_code=201)
async def create_post_route(
    payload: CreatePostRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        post = await perform(db, user.id, Action.CREATE_POST, payload=payload.model_dump())
        return post_response(post)
    except EngineError as e:
        raise engine_error(e) from e


@router.get("", response_model=list[PostResponse])
async def public_feed_route(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    posts = await resolve(db, user.id, AllPublic())
    return [post_response(p) for p in posts]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post_route(
    post_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    posts = await resolve(db, user.id, PostById(post_id=post_id))
    if not posts:
        # Hidden and missing posts look the same from outside.
        raise HTTPException(status_code=404, detail="Post not found")
    return post_response(posts[0])


@router.delete("/{post_id}", response_model=DeletePostResponse, status_code=200)
async def delete_post_route(
    post_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        await perform(db, user.id, Action.DELETE_POST, Target(post_id=post_id))
        return DeletePostResponse(ok=True)
    except EngineError as e:
        raise engine_error(e) from e
