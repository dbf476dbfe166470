from __future__ import annotations

from pydantic import BaseModel
from uuid import UUID


class UserListItem(BaseModel):
    id: UUID
    username: str
    display_name: str
    avatar_url: str | None = None


class BlockResponse(BaseModel):
    ok: bool
    blocked: bool
