from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    author_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    content: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    picture: Mapped[str | None] = mapped_column(sa.String(500), nullable=True)

    is_public: Mapped[bool] = mapped_column(sa.Boolean(), nullable=False, default=True, server_default=sa.true())

    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)

    author = relationship("User", lazy="joined", innerjoin=True)

    __table_args__ = (
        sa.CheckConstraint("content IS NOT NULL OR picture IS NOT NULL", name="ck_posts_has_payload"),
    )
