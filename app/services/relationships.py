from __future__ import annotations

from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.group import Group
from app.models.group_membership import GroupMembership
from app.models.group_post import GroupPost
from app.models.group_request import GroupRequest
from app.models.user import User
from app.models.user_blocking import UserBlocking


# ─────────────────────────────────────────────
# Users
# ─────────────────────────────────────────────

async def get_user(db: AsyncSession, user_id: UUID) -> User | None:
    return (await db.execute(sa.select(User).where(User.id == user_id))).scalar_one_or_none()


async def list_users(db: AsyncSession) -> list[User]:
    q = sa.select(User).order_by(User.username.asc())
    return list((await db.execute(q)).scalars().all())


# ─────────────────────────────────────────────
# Groups
# ─────────────────────────────────────────────

async def get_group(db: AsyncSession, group_id: UUID, *, for_update: bool = False) -> Group | None:
    q = sa.select(Group).where(Group.id == group_id)
    if for_update:
        # Serializes every membership transition on this group.
        q = q.with_for_update()
    return (await db.execute(q)).scalar_one_or_none()


async def insert_group(
    db: AsyncSession,
    *,
    creator_id: UUID,
    name: str,
    description: str | None,
    picture: str | None,
) -> Group:
    group = Group(creator_id=creator_id, name=name, description=description, picture=picture)
    db.add(group)
    await db.flush()  # get group.id
    return group


async def list_groups(db: AsyncSession) -> list[Group]:
    q = sa.select(Group).order_by(Group.created_at.desc(), Group.name.asc())
    return list((await db.execute(q)).scalars().all())


async def list_groups_for_user(db: AsyncSession, user_id: UUID) -> list[tuple[Group, bool]]:
    q = (
        sa.select(Group, GroupMembership.is_admin)
        .join(GroupMembership, GroupMembership.group_id == Group.id)
        .where(GroupMembership.user_id == user_id)
        .order_by(Group.created_at.desc(), Group.name.asc())
    )
    return [(row[0], bool(row[1])) for row in (await db.execute(q)).all()]


async def purge_group(db: AsyncSession, group_id: UUID) -> None:
    """Delete a group together with everything scoped to it."""
    await db.execute(sa.delete(GroupPost).where(GroupPost.group_id == group_id))
    await db.execute(sa.delete(GroupRequest).where(GroupRequest.group_id == group_id))
    await db.execute(sa.delete(GroupMembership).where(GroupMembership.group_id == group_id))
    await db.execute(sa.delete(Group).where(Group.id == group_id))


# ─────────────────────────────────────────────
# Memberships
# ─────────────────────────────────────────────

async def get_membership(db: AsyncSession, group_id: UUID, user_id: UUID) -> GroupMembership | None:
    q = sa.select(GroupMembership).where(
        GroupMembership.group_id == group_id,
        GroupMembership.user_id == user_id,
    )
    return (await db.execute(q)).scalar_one_or_none()


async def insert_membership(db: AsyncSession, group_id: UUID, user_id: UUID, *, is_admin: bool = False) -> GroupMembership:
    membership = GroupMembership(group_id=group_id, user_id=user_id, is_admin=is_admin)
    db.add(membership)
    await db.flush()  # raises IntegrityError on a duplicate pair
    return membership


async def delete_membership(db: AsyncSession, group_id: UUID, user_id: UUID) -> bool:
    """Delete the membership row; False when no row was there to delete."""
    q = (
        sa.delete(GroupMembership)
        .where(
            GroupMembership.group_id == group_id,
            GroupMembership.user_id == user_id,
        )
        .returning(GroupMembership.id)
    )
    return (await db.execute(q)).first() is not None


async def list_members(db: AsyncSession, group_id: UUID) -> list[tuple[User, bool]]:
    q = (
        sa.select(User, GroupMembership.is_admin)
        .join(GroupMembership, GroupMembership.user_id == User.id)
        .where(GroupMembership.group_id == group_id)
        .order_by(User.username.asc())
    )
    return [(row[0], bool(row[1])) for row in (await db.execute(q)).all()]


async def member_group_ids(db: AsyncSession, user_id: UUID) -> set[UUID]:
    q = sa.select(GroupMembership.group_id).where(GroupMembership.user_id == user_id)
    return {row[0] for row in (await db.execute(q)).all()}


async def admin_flags_by_group(db: AsyncSession, user_id: UUID) -> dict[UUID, bool]:
    q = sa.select(GroupMembership.group_id, GroupMembership.is_admin).where(GroupMembership.user_id == user_id)
    return {group_id: bool(is_admin) for group_id, is_admin in (await db.execute(q)).all()}


# ─────────────────────────────────────────────
# Join requests
# ─────────────────────────────────────────────

async def get_request(db: AsyncSession, group_id: UUID, user_id: UUID) -> GroupRequest | None:
    q = sa.select(GroupRequest).where(
        GroupRequest.group_id == group_id,
        GroupRequest.user_id == user_id,
    )
    return (await db.execute(q)).scalar_one_or_none()


async def insert_request(db: AsyncSession, group_id: UUID, user_id: UUID) -> GroupRequest:
    request = GroupRequest(group_id=group_id, user_id=user_id)
    db.add(request)
    await db.flush()  # raises IntegrityError on a duplicate pair
    return request


async def delete_request(db: AsyncSession, group_id: UUID, user_id: UUID) -> bool:
    """Compare-and-swap removal of a pending request.

    Of two transactions racing to consume the same request only one gets a
    row back; the other sees False.
    """
    q = (
        sa.delete(GroupRequest)
        .where(
            GroupRequest.group_id == group_id,
            GroupRequest.user_id == user_id,
        )
        .returning(GroupRequest.id)
    )
    return (await db.execute(q)).first() is not None


async def requested_group_ids(db: AsyncSession, user_id: UUID) -> set[UUID]:
    q = sa.select(GroupRequest.group_id).where(GroupRequest.user_id == user_id)
    return {row[0] for row in (await db.execute(q)).all()}


async def list_requests(db: AsyncSession, group_id: UUID) -> list[tuple[GroupRequest, User]]:
    q = (
        sa.select(GroupRequest, User)
        .join(User, User.id == GroupRequest.user_id)
        .where(GroupRequest.group_id == group_id)
        .order_by(GroupRequest.created_at.asc(), User.username.asc())
    )
    return [(row[0], row[1]) for row in (await db.execute(q)).all()]


# ─────────────────────────────────────────────
# Blocking
# ─────────────────────────────────────────────

async def get_blocking(db: AsyncSession, blocker_id: UUID, blocked_id: UUID) -> UserBlocking | None:
    q = sa.select(UserBlocking).where(
        UserBlocking.blocker_id == blocker_id,
        UserBlocking.blocked_id == blocked_id,
    )
    return (await db.execute(q)).scalar_one_or_none()


async def insert_blocking(db: AsyncSession, blocker_id: UUID, blocked_id: UUID) -> UserBlocking:
    blocking = UserBlocking(blocker_id=blocker_id, blocked_id=blocked_id)
    db.add(blocking)
    await db.flush()
    return blocking


async def delete_blocking(db: AsyncSession, blocker_id: UUID, blocked_id: UUID) -> bool:
    q = (
        sa.delete(UserBlocking)
        .where(
            UserBlocking.blocker_id == blocker_id,
            UserBlocking.blocked_id == blocked_id,
        )
        .returning(UserBlocking.id)
    )
    return (await db.execute(q)).first() is not None


async def list_blocked_users(db: AsyncSession, blocker_id: UUID) -> list[User]:
    q = (
        sa.select(User)
        .join(UserBlocking, UserBlocking.blocked_id == User.id)
        .where(UserBlocking.blocker_id == blocker_id)
        .order_by(User.username.asc())
    )
    return list((await db.execute(q)).scalars().all())


async def blocked_either_way(db: AsyncSession, user_id: UUID) -> set[UUID]:
    """Ids of every user that ``user_id`` blocks or is blocked by."""
    q = sa.select(UserBlocking.blocker_id, UserBlocking.blocked_id).where(
        (UserBlocking.blocker_id == user_id) | (UserBlocking.blocked_id == user_id)
    )
    ids: set[UUID] = set()
    for blocker_id, blocked_id in (await db.execute(q)).all():
        ids.add(blocked_id if blocker_id == user_id else blocker_id)
    return ids
