from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field
from uuid import UUID


class CreatePostRequest(BaseModel):
    # Emptiness of the pair is checked by the engine so it reports a stable error code.
    content: str | None = None
    picture: str | None = Field(default=None, max_length=500)
    is_public: bool = True


class PostResponse(BaseModel):
    id: UUID
    author_id: UUID
    author_username: str
    author_display_name: str
    author_avatar_url: str | None
    content: str | None
    picture: str | None
    is_public: bool
    created_at: datetime


class CreateGroupPostRequest(BaseModel):
    content: str | None = None
    picture: str | None = Field(default=None, max_length=500)


class GroupPostResponse(BaseModel):
    id: UUID
    group_id: UUID
    author_id: UUID
    author_username: str
    author_display_name: str
    author_avatar_url: str | None
    content: str | None
    picture: str | None
    created_at: datetime


class DeletePostResponse(BaseModel):
    ok: bool
