"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUMS = {
    "user_role": ("ADMIN", "PRODUCER", "EDITOR", "REPORTER"),
    "bulletin_status": ("PLANNING", "ACTIVE", "LOCKED", "ON_AIR", "COMPLETED", "ARCHIVED"),
    "row_type": ("STORY", "COMMERCIAL", "BREAK_LINK", "OPEN", "CLOSE", "WELCOME"),
    "row_status": ("BLANK", "DRAFT", "READY", "APPROVED", "KILLED", "AIRED"),
    "segment_type": (
        "LIVE", "PKG", "VO", "VOSOT", "SOT", "READER", "GRAPHIC", "VT", "IV", "PHONER", "WEATHER", "SPORTS",
    ),
    "pool_type": ("STORY_POOL", "FLOAT_POOL", "RESERVE_POOL"),
    "story_status": ("DRAFT", "READY", "ASSIGNED", "USED"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _uuid_fk(name: str, target: str, ondelete: str = "SET NULL", nullable: bool = True) -> sa.Column:
    return sa.Column(
        name, postgresql.UUID(as_uuid=True), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _soft_delete() -> list[sa.Column]:
    return [
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        _uuid_fk("deleted_by", "users.id"),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        "desks",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), unique=True, nullable=False),
        sa.Column("code", sa.String(20), unique=True, nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(7), nullable=False, server_default="#3498db"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", _enum("user_role"), nullable=False, server_default="REPORTER"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("display_name", sa.String(50), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        _uuid_fk("desk_id", "desks.id"),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_action", sa.String(100), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "categories",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("color", sa.String(7), nullable=False, server_default="#3498db"),
        _uuid_fk("desk_id", "desks.id"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )

    op.create_table(
        "pools",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("code", sa.String(20), unique=True, nullable=False),
        sa.Column("type", _enum("pool_type"), nullable=False, server_default="STORY_POOL"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(7), nullable=False, server_default="#3498db"),
        _uuid_fk("desk_id", "desks.id"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )

    op.create_table(
        "bulletins",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("subtitle", sa.String(255), nullable=True),
        sa.Column("code", sa.String(50), nullable=True),
        sa.Column("air_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(10), nullable=False),
        sa.Column("end_time", sa.String(10), nullable=True),
        sa.Column("planned_duration_secs", sa.Integer(), nullable=False, server_default="1800"),
        sa.Column("total_est_duration_secs", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_actual_duration_secs", sa.Integer(), nullable=True),
        sa.Column("total_commercial_secs", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("timing_variance_secs", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", _enum("bulletin_status"), nullable=False, server_default="PLANNING"),
        sa.Column("is_locked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _uuid_fk("locked_by", "users.id"),
        sa.Column("locked_at", sa.DateTime(timezone=True), nullable=True),
        _uuid_fk("producer_id", "users.id"),
        _uuid_fk("desk_id", "desks.id"),
        sa.Column("notes", sa.Text(), nullable=True),
        _uuid_fk("created_by", "users.id"),
        *_timestamps(),
        *_soft_delete(),
    )

    op.create_table(
        "rundown_rows",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("bulletin_id", "bulletins.id", ondelete="CASCADE", nullable=False),
        sa.Column("page_code", sa.String(10), nullable=True),
        sa.Column("block_code", sa.String(5), nullable=True),
        sa.Column("page_number", sa.Integer(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("row_type", _enum("row_type"), nullable=False, server_default="STORY"),
        sa.Column("slug", sa.String(255), nullable=True),
        sa.Column("segment", sa.String(50), nullable=True),
        _uuid_fk("story_producer_id", "users.id"),
        _uuid_fk("reporter_id", "users.id"),
        _uuid_fk("category_id", "categories.id"),
        sa.Column("final_approval", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _uuid_fk("approved_by", "users.id"),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("est_duration_secs", sa.Integer(), nullable=False, server_default="90"),
        sa.Column("actual_duration_secs", sa.Integer(), nullable=True),
        sa.Column("front_time_secs", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("cume_time_secs", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("float", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("status", _enum("row_status"), nullable=False, server_default="BLANK"),
        sa.Column("break_number", sa.Integer(), nullable=True),
        sa.Column("script", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _uuid_fk("source_pool_id", "pools.id"),
        _uuid_fk("created_by", "users.id"),
        _uuid_fk("last_modified_by", "users.id"),
        *_timestamps(),
        *_soft_delete(),
    )

    op.create_table(
        "row_segments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("row_id", "rundown_rows.id", ondelete="CASCADE", nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("type", _enum("segment_type"), nullable=False, server_default="LIVE"),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("est_duration_secs", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("actual_duration_secs", sa.Integer(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        _uuid_fk("created_by", "users.id"),
        *_timestamps(),
    )

    op.create_table(
        "pool_stories",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("pool_id", "pools.id", ondelete="CASCADE", nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("segment", sa.String(50), nullable=True, server_default="LIVE"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("est_duration_secs", sa.Integer(), nullable=False, server_default="90"),
        _uuid_fk("reporter_id", "users.id"),
        _uuid_fk("category_id", "categories.id"),
        sa.Column("status", _enum("story_status"), nullable=False, server_default="DRAFT"),
        _uuid_fk("used_in_bulletin_id", "bulletins.id"),
        _uuid_fk("used_in_row_id", "rundown_rows.id"),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        _uuid_fk("created_by", "users.id"),
        *_timestamps(),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("user_id", "users.id"),
        sa.Column("user_email", sa.String(255), nullable=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("resource_type", sa.String(50), nullable=False),
        sa.Column("resource_id", sa.String(100), nullable=True),
        sa.Column("bulletin_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("row_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("detail", sa.Text(), nullable=True),
        sa.Column("changes", postgresql.JSONB(), nullable=True),
        sa.Column("ip_address", sa.String(50), nullable=True),
        sa.Column("request_id", sa.String(50), nullable=True),
        *_timestamps(),
    )

    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_desk_id", "users", ["desk_id"])
    op.create_index("ix_desks_code", "desks", ["code"])
    op.create_index("ix_categories_name", "categories", ["name"])
    op.create_index("ix_categories_desk_id", "categories", ["desk_id"])
    op.create_index("ix_pools_code", "pools", ["code"])
    op.create_index("ix_pools_desk_id", "pools", ["desk_id"])
    op.create_index("ix_bulletins_air_date", "bulletins", ["air_date"])
    op.create_index("ix_bulletins_status", "bulletins", ["status"])
    op.create_index("ix_bulletins_producer_id", "bulletins", ["producer_id"])
    op.create_index("ix_bulletins_desk_id", "bulletins", ["desk_id"])
    op.create_index("ix_bulletins_deleted_at", "bulletins", ["deleted_at"])
    op.create_index("ix_rundown_rows_bulletin_id", "rundown_rows", ["bulletin_id"])
    op.create_index("ix_rundown_rows_sort_order", "rundown_rows", ["sort_order"])
    op.create_index("ix_rundown_rows_status", "rundown_rows", ["status"])
    op.create_index("ix_rundown_rows_deleted_at", "rundown_rows", ["deleted_at"])
    op.create_index("ix_rundown_rows_bulletin_sort", "rundown_rows", ["bulletin_id", "sort_order"])
    op.create_index("ix_row_segments_row_id", "row_segments", ["row_id"])
    op.create_index("ix_pool_stories_pool_id", "pool_stories", ["pool_id"])
    op.create_index("ix_pool_stories_reporter_id", "pool_stories", ["reporter_id"])
    op.create_index("ix_pool_stories_status", "pool_stories", ["status"])
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_bulletin_id", "audit_logs", ["bulletin_id"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("pool_stories")
    op.drop_table("row_segments")
    op.drop_table("rundown_rows")
    op.drop_table("bulletins")
    op.drop_table("pools")
    op.drop_table("categories")
    op.drop_table("users")
    op.drop_table("desks")

    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
