"""initial social graph schema

Revision ID: 4a1c9e2b7d10
Revises:
Create Date: 2026-10-19 09:12:44.501233

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4a1c9e2b7d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("display_name", sa.String(120), nullable=False),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "user_blockings",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("blocker_id", sa.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("blocked_id", sa.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_user_blockings_pair"),
        sa.CheckConstraint("blocker_id <> blocked_id", name="ck_user_blockings_not_self"),
    )
    op.create_index("ix_user_blockings_blocker_id", "user_blockings", ["blocker_id"])
    op.create_index("ix_user_blockings_blocked_id", "user_blockings", ["blocked_id"])

    op.create_table(
        "groups",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("picture", sa.String(500), nullable=True),
        sa.Column("creator_id", sa.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_groups_creator_id", "groups", ["creator_id"])

    op.create_table(
        "group_memberships",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("group_id", sa.UUID(as_uuid=True), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("is_admin", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("group_id", "user_id", name="uq_group_membership_pair"),
    )
    op.create_index("ix_group_memberships_group_id", "group_memberships", ["group_id"])
    op.create_index("ix_group_memberships_user_id", "group_memberships", ["user_id"])

    op.create_table(
        "group_requests",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("group_id", sa.UUID(as_uuid=True), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("group_id", "user_id", name="uq_group_requests_pair"),
    )
    op.create_index("ix_group_requests_group_id", "group_requests", ["group_id"])
    op.create_index("ix_group_requests_user_id", "group_requests", ["user_id"])

    op.create_table(
        "posts",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("author_id", sa.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("picture", sa.String(500), nullable=True),
        sa.Column("is_public", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("content IS NOT NULL OR picture IS NOT NULL", name="ck_posts_has_payload"),
    )
    op.create_index("ix_posts_author_id", "posts", ["author_id"])

    op.create_table(
        "group_posts",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("group_id", sa.UUID(as_uuid=True), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_id", sa.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("picture", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("content IS NOT NULL OR picture IS NOT NULL", name="ck_group_posts_has_payload"),
    )
    op.create_index("ix_group_posts_group_id", "group_posts", ["group_id"])
    op.create_index("ix_group_posts_author_id", "group_posts", ["author_id"])


def downgrade():
    op.drop_table("group_posts")
    op.drop_table("posts")
    op.drop_table("group_requests")
    op.drop_table("group_memberships")
    op.drop_table("groups")
    op.drop_table("user_blockings")
    op.drop_table("users")
