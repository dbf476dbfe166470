from __future__ import annotations

from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.group_post import GroupPost
from app.models.post import Post
from app.services.errors import InvalidContentError


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def clean_payload(content: str | None, picture: str | None) -> tuple[str | None, str | None]:
    """Normalize a post payload; a post must carry content, a picture or both."""
    content = _clean(content)
    picture = _clean(picture)
    if content is None and picture is None:
        raise InvalidContentError("empty_post", "A post needs content or a picture")
    if content is not None and len(content) > settings.max_post_length:
        raise InvalidContentError(
            "post_too_long",
            f"Post content must be {settings.max_post_length} characters or fewer",
        )
    return content, picture


# ─────────────────────────────────────────────
# Personal posts
# ─────────────────────────────────────────────

async def insert_post(
    db: AsyncSession,
    *,
    author_id: UUID,
    content: str | None,
    picture: str | None,
    is_public: bool = True,
) -> Post:
    content, picture = clean_payload(content, picture)
    post = Post(author_id=author_id, content=content, picture=picture, is_public=is_public)
    db.add(post)
    await db.flush()
    await db.refresh(post, attribute_names=["author"])
    return post


async def get_post(db: AsyncSession, post_id: UUID) -> Post | None:
    return (await db.execute(sa.select(Post).where(Post.id == post_id))).scalar_one_or_none()


async def delete_post(db: AsyncSession, post_id: UUID) -> bool:
    q = sa.delete(Post).where(Post.id == post_id).returning(Post.id)
    return (await db.execute(q)).first() is not None


async def posts_by_author(db: AsyncSession, author_id: UUID) -> list[Post]:
    # Personal posts only; group posts live in their own table.
    q = (
        sa.select(Post)
        .where(Post.author_id == author_id)
        .order_by(Post.created_at.desc(), Post.id.asc())
    )
    return list((await db.execute(q)).scalars().all())


async def public_posts(db: AsyncSession, *, exclude_author_ids: set[UUID] | None = None) -> list[Post]:
    q = sa.select(Post).where(Post.is_public.is_(True))
    if exclude_author_ids:
        q = q.where(Post.author_id.not_in(list(exclude_author_ids)))
    q = q.order_by(Post.created_at.desc(), Post.id.asc())
    return list((await db.execute(q)).scalars().all())


# ─────────────────────────────────────────────
# Group posts
# ─────────────────────────────────────────────

async def insert_group_post(
    db: AsyncSession,
    *,
    group_id: UUID,
    author_id: UUID,
    content: str | None,
    picture: str | None,
) -> GroupPost:
    content, picture = clean_payload(content, picture)
    post = GroupPost(group_id=group_id, author_id=author_id, content=content, picture=picture)
    db.add(post)
    await db.flush()
    await db.refresh(post, attribute_names=["author"])
    return post


async def get_group_post(db: AsyncSession, group_id: UUID, post_id: UUID) -> GroupPost | None:
    q = sa.select(GroupPost).where(GroupPost.id == post_id, GroupPost.group_id == group_id)
    return (await db.execute(q)).scalar_one_or_none()


async def delete_group_post(db: AsyncSession, post_id: UUID) -> bool:
    q = sa.delete(GroupPost).where(GroupPost.id == post_id).returning(GroupPost.id)
    return (await db.execute(q)).first() is not None


async def posts_in_group(db: AsyncSession, group_id: UUID) -> list[GroupPost]:
    q = (
        sa.select(GroupPost)
        .where(GroupPost.group_id == group_id)
        .order_by(GroupPost.created_at.desc(), GroupPost.id.asc())
    )
    return list((await db.execute(q)).scalars().all())
