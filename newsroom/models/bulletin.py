"""
Bulletin model: one scheduled broadcast and its cached timing totals.

The four ``total_*`` / ``timing_variance_secs`` columns are written only by
``newsroom.services.timing_engine.recalculate_timing``.
"""
import enum
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from newsroom.db.base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from newsroom.models.rundown_row import RundownRow


class BulletinStatus(str, enum.Enum):
    PLANNING = "PLANNING"
    ACTIVE = "ACTIVE"
    LOCKED = "LOCKED"
    ON_AIR = "ON_AIR"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class Bulletin(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "bulletins"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    subtitle: Mapped[str | None] = mapped_column(String(255), nullable=True)
    code: Mapped[str | None] = mapped_column(String(50), nullable=True)

    air_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    # Time-of-day strings ("19:00" / "19:00:00")
    start_time: Mapped[str] = mapped_column(String(10), nullable=False)
    end_time: Mapped[str | None] = mapped_column(String(10), nullable=True)
    planned_duration_secs: Mapped[int] = mapped_column(Integer, default=1800, nullable=False)

    # Cached timing totals
    total_est_duration_secs: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_actual_duration_secs: Mapped[int | None] = mapped_column(Integer, nullable=True)  # null = nothing timed yet
    total_commercial_secs: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    timing_variance_secs: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # + under, - over

    status: Mapped[BulletinStatus] = mapped_column(
        ENUM(BulletinStatus, name="bulletin_status", create_type=True),
        default=BulletinStatus.PLANNING,
        nullable=False,
        index=True,
    )

    # Editorial lock
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    locked_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    locked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    producer_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    desk_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("desks.id", ondelete="SET NULL"), nullable=True, index=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    rows: Mapped[list["RundownRow"]] = relationship(
        "RundownRow", back_populates="bulletin", cascade="all, delete-orphan", lazy="noload"
    )

    def is_locked_for(self, user_id: uuid.UUID) -> bool:
        """True when another user holds the editorial lock."""
        return self.is_locked and self.locked_by != user_id
