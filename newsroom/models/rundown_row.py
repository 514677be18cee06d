import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from newsroom.db.base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from newsroom.models.bulletin import Bulletin
    from newsroom.models.row_segment import RowSegment


class RowType(str, enum.Enum):
    STORY = "STORY"
    COMMERCIAL = "COMMERCIAL"
    BREAK_LINK = "BREAK_LINK"
    OPEN = "OPEN"
    CLOSE = "CLOSE"
    WELCOME = "WELCOME"


class RowStatus(str, enum.Enum):
    BLANK = "BLANK"
    DRAFT = "DRAFT"
    READY = "READY"
    APPROVED = "APPROVED"
    KILLED = "KILLED"
    AIRED = "AIRED"


class RundownRow(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "rundown_rows"

    bulletin_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("bulletins.id", ondelete="CASCADE"), nullable=False, index=True
    )

    page_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    block_code: Mapped[str | None] = mapped_column(String(5), nullable=True)
    page_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)

    row_type: Mapped[RowType] = mapped_column(
        ENUM(RowType, name="row_type", create_type=True),
        default=RowType.STORY,
        nullable=False,
    )
    slug: Mapped[str | None] = mapped_column(String(255), nullable=True)
    segment: Mapped[str | None] = mapped_column(String(50), nullable=True)

    story_producer_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    reporter_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )

    final_approval: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    approved_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Durations; actual_duration_secs stays NULL until the item has been timed
    est_duration_secs: Mapped[int] = mapped_column(Integer, default=90, nullable=False)
    actual_duration_secs: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Written only by the timing engine
    front_time_secs: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    cume_time_secs: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    is_float: Mapped[bool] = mapped_column("float", Boolean, default=False, nullable=False)
    status: Mapped[RowStatus] = mapped_column(
        ENUM(RowStatus, name="row_status", create_type=True),
        default=RowStatus.BLANK,
        nullable=False,
        index=True,
    )
    break_number: Mapped[int | None] = mapped_column(Integer, nullable=True)

    script: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    source_pool_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("pools.id", ondelete="SET NULL"), nullable=True
    )
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    last_modified_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    bulletin: Mapped["Bulletin"] = relationship("Bulletin", back_populates="rows", lazy="noload")
    segments: Mapped[list["RowSegment"]] = relationship(
        "RowSegment", back_populates="row", cascade="all, delete-orphan", lazy="noload"
    )
