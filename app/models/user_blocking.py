from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column
import uuid
from datetime import datetime

from app.db.base_class import Base


class UserBlocking(Base):
    """Directed blocker -> blocked edge. Visibility treats it as symmetric."""

    __tablename__ = "user_blockings"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    blocker_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    blocked_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)

    __table_args__ = (
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_user_blockings_pair"),
        sa.CheckConstraint("blocker_id <> blocked_id", name="ck_user_blockings_not_self"),
    )
