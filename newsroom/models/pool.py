"""
Story pools: pre-produced stories waiting to be placed into a bulletin.
"""
import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from newsroom.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class PoolType(str, enum.Enum):
    STORY_POOL = "STORY_POOL"
    FLOAT_POOL = "FLOAT_POOL"
    RESERVE_POOL = "RESERVE_POOL"


class StoryStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    READY = "READY"
    ASSIGNED = "ASSIGNED"
    USED = "USED"


class Pool(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "pools"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(20), unique=True, index=True, nullable=False)
    type: Mapped[PoolType] = mapped_column(
        ENUM(PoolType, name="pool_type", create_type=True),
        default=PoolType.STORY_POOL,
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(String(7), default="#3498db", nullable=False)
    desk_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("desks.id", ondelete="SET NULL"), nullable=True, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    stories: Mapped[list["PoolStory"]] = relationship(
        "PoolStory", back_populates="pool", cascade="all, delete-orphan", lazy="noload"
    )


class PoolStory(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "pool_stories"

    pool_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("pools.id", ondelete="CASCADE"), nullable=False, index=True
    )
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    segment: Mapped[str | None] = mapped_column(String(50), default="LIVE", nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    est_duration_secs: Mapped[int] = mapped_column(Integer, default=90, nullable=False)

    reporter_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[StoryStatus] = mapped_column(
        ENUM(StoryStatus, name="story_status", create_type=True),
        default=StoryStatus.DRAFT,
        nullable=False,
        index=True,
    )

    used_in_bulletin_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("bulletins.id", ondelete="SET NULL"), nullable=True
    )
    used_in_row_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("rundown_rows.id", ondelete="SET NULL"), nullable=True
    )
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    pool: Mapped[Pool] = relationship("Pool", back_populates="stories", lazy="noload")
