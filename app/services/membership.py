from __future__ import annotations

import enum
import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.group import Group
from app.models.group_membership import GroupMembership
from app.services import relationships
from app.services.errors import ConflictError, ForbiddenError, InvalidContentError, NotFoundError


logger = logging.getLogger(__name__)


class RelationshipState(str, enum.Enum):
    NONE = "none"
    REQUESTED = "requested"
    MEMBER = "member"
    ADMIN = "admin"
    OWNER = "owner"

    @property
    def is_member(self) -> bool:
        return self in _MEMBER_STATES

    @property
    def can_moderate(self) -> bool:
        return self in (RelationshipState.ADMIN, RelationshipState.OWNER)

    @property
    def rank(self) -> int:
        return _RANKS[self]


_MEMBER_STATES = frozenset({RelationshipState.MEMBER, RelationshipState.ADMIN, RelationshipState.OWNER})
_RANKS = {
    RelationshipState.NONE: 0,
    RelationshipState.REQUESTED: 0,
    RelationshipState.MEMBER: 1,
    RelationshipState.ADMIN: 2,
    RelationshipState.OWNER: 3,
}


def member_state(group: Group, user_id: UUID, is_admin: bool) -> RelationshipState:
    if group.creator_id == user_id:
        return RelationshipState.OWNER
    return RelationshipState.ADMIN if is_admin else RelationshipState.MEMBER


def state_from_membership(group: Group, user_id: UUID, membership: GroupMembership | None) -> RelationshipState:
    if membership is None:
        return RelationshipState.NONE
    return member_state(group, user_id, membership.is_admin)


async def relationship_state(db: AsyncSession, group: Group, user_id: UUID) -> RelationshipState:
    """The single place where a user's role in a group is derived."""
    membership = await relationships.get_membership(db, group.id, user_id)
    if membership is not None:
        return state_from_membership(group, user_id, membership)
    if await relationships.get_request(db, group.id, user_id) is not None:
        return RelationshipState.REQUESTED
    return RelationshipState.NONE


async def lock_group(db: AsyncSession, group_id: UUID) -> Group:
    group = await relationships.get_group(db, group_id, for_update=True)
    if group is None:
        raise NotFoundError("group_not_found", "Group not found")
    return group


async def _require_moderator(db: AsyncSession, group: Group, actor_id: UUID) -> RelationshipState:
    state = await relationship_state(db, group, actor_id)
    if not state.can_moderate:
        raise ForbiddenError("admin_required", "Only group admins can do this")
    return state


def _require_owner(group: Group, actor_id: UUID, action: str) -> None:
    if group.creator_id != actor_id:
        raise ForbiddenError("owner_required", f"Only the group owner can {action}")


# ─────────────────────────────────────────────
# Transitions
#
# None of these commit: the engine owns the transaction so the check and the
# mutation land (or roll back) together.
# ─────────────────────────────────────────────

async def create_group(
    db: AsyncSession,
    creator_id: UUID,
    *,
    name: str,
    description: str | None = None,
    picture: str | None = None,
) -> Group:
    name = (name or "").strip()
    if not name:
        raise InvalidContentError("group_name_required", "Group name is required")

    group = await relationships.insert_group(
        db,
        creator_id=creator_id,
        name=name,
        description=description,
        picture=picture,
    )
    await relationships.insert_membership(db, group.id, creator_id, is_admin=True)
    return group


async def request_join(db: AsyncSession, group_id: UUID, user_id: UUID) -> RelationshipState:
    group = await lock_group(db, group_id)
    state = await relationship_state(db, group, user_id)
    if state is RelationshipState.REQUESTED:
        raise ConflictError("already_requested", "Membership already requested")
    if state.is_member:
        raise ConflictError("already_member", "Already a member of this group")

    try:
        await relationships.insert_request(db, group.id, user_id)
    except IntegrityError as exc:
        logger.warning("duplicate join request group=%s user=%s", group.id, user_id)
        raise ConflictError("already_requested", "Membership already requested") from exc
    return RelationshipState.REQUESTED


async def cancel_request(db: AsyncSession, group_id: UUID, user_id: UUID) -> RelationshipState:
    group = await lock_group(db, group_id)
    if not await relationships.delete_request(db, group.id, user_id):
        raise NotFoundError("request_not_found", "No pending request for this group")
    return RelationshipState.NONE


async def accept_request(db: AsyncSession, group_id: UUID, actor_id: UUID, user_id: UUID) -> RelationshipState:
    group = await lock_group(db, group_id)
    await _require_moderator(db, group, actor_id)

    # Delete-then-insert in one transaction: the pair moves from requested to
    # member without ever being both or neither.
    if not await relationships.delete_request(db, group.id, user_id):
        raise NotFoundError("request_not_found", "This user has not requested to join")
    try:
        await relationships.insert_membership(db, group.id, user_id, is_admin=False)
    except IntegrityError as exc:
        logger.warning("membership already present group=%s user=%s", group.id, user_id)
        raise ConflictError("already_member", "User is already a member") from exc
    return RelationshipState.MEMBER


async def reject_request(db: AsyncSession, group_id: UUID, actor_id: UUID, user_id: UUID) -> RelationshipState:
    group = await lock_group(db, group_id)
    await _require_moderator(db, group, actor_id)

    if not await relationships.delete_request(db, group.id, user_id):
        raise NotFoundError("request_not_found", "This user has not requested to join")
    return RelationshipState.NONE


async def leave_group(db: AsyncSession, group_id: UUID, user_id: UUID) -> RelationshipState:
    group = await lock_group(db, group_id)
    state = await relationship_state(db, group, user_id)
    if state is RelationshipState.OWNER:
        raise ForbiddenError("owner_cannot_leave", "Group owner cannot leave their own group")
    if not state.is_member:
        raise NotFoundError("not_a_member", "Not a member of this group")

    if not await relationships.delete_membership(db, group.id, user_id):
        raise NotFoundError("not_a_member", "Not a member of this group")
    return RelationshipState.NONE


async def remove_member(db: AsyncSession, group_id: UUID, actor_id: UUID, user_id: UUID) -> RelationshipState:
    group = await lock_group(db, group_id)
    actor_state = await _require_moderator(db, group, actor_id)
    if actor_id == user_id:
        raise ForbiddenError("cannot_remove_self", "Use leave to exit a group")

    target_state = await relationship_state(db, group, user_id)
    if not target_state.is_member:
        raise NotFoundError("not_a_member", "User is not a member of this group")
    if target_state.rank >= actor_state.rank:
        raise ForbiddenError("insufficient_rank", "Only the group owner can remove an admin")

    if not await relationships.delete_membership(db, group.id, user_id):
        raise NotFoundError("not_a_member", "User is not a member of this group")
    return RelationshipState.NONE


async def _set_admin(db: AsyncSession, group_id: UUID, actor_id: UUID, user_id: UUID, *, is_admin: bool) -> RelationshipState:
    group = await lock_group(db, group_id)
    _require_owner(group, actor_id, "promote or demote members")

    membership = await relationships.get_membership(db, group.id, user_id)
    if membership is None:
        raise NotFoundError("not_a_member", "User is not a member of this group")

    state = state_from_membership(group, user_id, membership)
    if state is RelationshipState.OWNER:
        raise ForbiddenError("owner_role_fixed", "The owner's role cannot change")
    if membership.is_admin == is_admin:
        if is_admin:
            raise ConflictError("already_admin", "User is already an admin")
        raise ConflictError("not_an_admin", "User is not an admin")

    membership.is_admin = is_admin
    await db.flush()
    return RelationshipState.ADMIN if is_admin else RelationshipState.MEMBER


async def promote_member(db: AsyncSession, group_id: UUID, actor_id: UUID, user_id: UUID) -> RelationshipState:
    return await _set_admin(db, group_id, actor_id, user_id, is_admin=True)


async def demote_member(db: AsyncSession, group_id: UUID, actor_id: UUID, user_id: UUID) -> RelationshipState:
    return await _set_admin(db, group_id, actor_id, user_id, is_admin=False)


async def delete_group(db: AsyncSession, group_id: UUID, actor_id: UUID) -> None:
    group = await lock_group(db, group_id)
    _require_owner(group, actor_id, "delete the group")

    await relationships.purge_group(db, group.id)
