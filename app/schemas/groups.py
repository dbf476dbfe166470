from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field
from uuid import UUID
from typing import List


class CreateGroupRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = Field(default=None, max_length=1000)
    picture: str | None = Field(default=None, max_length=500)


class GroupListItem(BaseModel):
    id: UUID
    name: str
    description: str | None
    picture: str | None
    creator_id: UUID
    created_at: datetime
    state: str  # viewer's relationship: none | requested | member | admin | owner


class GroupMember(BaseModel):
    id: UUID
    username: str
    display_name: str
    avatar_url: str | None
    role: str


class GroupMembersResponse(BaseModel):
    group_id: UUID
    members: List[GroupMember]


class GroupJoinRequestItem(BaseModel):
    user_id: UUID
    username: str
    display_name: str
    requested_at: datetime


class RelationshipResponse(BaseModel):
    ok: bool
    group_id: UUID
    user_id: UUID
    state: str


class DeleteGroupResponse(BaseModel):
    ok: bool
