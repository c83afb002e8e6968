"""Initial schema: members, orders, course tree, progress

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates users, orders, modules, chapters, lessons and user_progress.
How:   UUID primary keys generated server-side with gen_random_uuid(),
       TIMESTAMP WITH TIME ZONE everywhere, JSON for lessons.required_package.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamp_column(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    # ── Members ───────────────────────────────────────────────────────────
    op.create_table(
        "users",
        _id_column(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False, comment="Stored lowercased"),
        sa.Column("phone", sa.String(50), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=True,
            comment="bcrypt hash; NULL until registration or payment verification",
        ),
        sa.Column("status", sa.String(50), nullable=False, server_default=sa.text("'pending'")),
        sa.Column(
            "access_tier",
            sa.String(50),
            nullable=False,
            server_default=sa.text("'none'"),
            comment="Tier of the most recent order",
        ),
        sa.Column(
            "package_access",
            sa.String(50),
            nullable=True,
            comment="Tier granted by the last verified payment",
        ),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("has_paid", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _timestamp_column("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ── Orders ────────────────────────────────────────────────────────────
    op.create_table(
        "orders",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("package_id", sa.String(50), nullable=False),
        sa.Column("package_name", sa.String(255), nullable=False),
        sa.Column("price", sa.String(100), nullable=False, comment="Display price, e.g. 'Rp 499.000'"),
        sa.Column("template_name", sa.String(255), nullable=False),
        sa.Column(
            "template_path",
            sa.Text(),
            nullable=True,
            comment="Delivered file URL or external link",
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(50), nullable=False, server_default=sa.text("'pending'")),
        _timestamp_column("created_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_orders_user_id", "orders", ["user_id"])
    # Admin lists filter by status and sort newest first
    op.create_index("idx_orders_status_created_at", "orders", ["status", "created_at"])

    # ── Course tree ───────────────────────────────────────────────────────
    op.create_table(
        "modules",
        _id_column(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "chapters",
        _id_column(),
        sa.Column("module_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.ForeignKeyConstraint(["module_id"], ["modules.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_chapters_module_id", "chapters", ["module_id"])

    op.create_table(
        "lessons",
        _id_column(),
        sa.Column("chapter_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "difficulty",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'basic'"),
            comment="basic, medium, large",
        ),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("materials_url", sa.Text(), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "required_package",
            sa.JSON(),
            nullable=False,
            server_default=sa.text("'[\"small\"]'"),
            comment="Tiers allowed to open the lesson; the lowest listed tier is the minimum",
        ),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.ForeignKeyConstraint(["chapter_id"], ["chapters.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_lessons_chapter_id", "lessons", ["chapter_id"])

    # ── Progress ──────────────────────────────────────────────────────────
    op.create_table(
        "user_progress",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("lesson_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("completion_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("watch_time_minutes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["lesson_id"], ["lessons.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "lesson_id", name="uq_user_progress_user_lesson"),
    )
    op.create_index("ix_user_progress_user_id", "user_progress", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_user_progress_user_id", table_name="user_progress")
    op.drop_table("user_progress")
    op.drop_index("ix_lessons_chapter_id", table_name="lessons")
    op.drop_table("lessons")
    op.drop_index("ix_chapters_module_id", table_name="chapters")
    op.drop_table("chapters")
    op.drop_table("modules")
    op.drop_index("idx_orders_status_created_at", table_name="orders")
    op.drop_index("ix_orders_user_id", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
