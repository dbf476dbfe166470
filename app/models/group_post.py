from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base


class GroupPost(Base):
    # No public flag: group membership is the visibility boundary.
    __tablename__ = "group_posts"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    group_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    content: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    picture: Mapped[str | None] = mapped_column(sa.String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)

    author = relationship("User", lazy="joined", innerjoin=True)

    __table_args__ = (
        sa.CheckConstraint("content IS NOT NULL OR picture IS NOT NULL", name="ck_group_posts_has_payload"),
    )
