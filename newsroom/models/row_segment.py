"""
RowSegment: a sub-unit of a rundown row (VO, then SOT, then a LIVE tag...).

Segment durations are informational; row timing uses the row-level durations.
"""
import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from newsroom.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from newsroom.models.rundown_row import RundownRow


class SegmentType(str, enum.Enum):
    LIVE = "LIVE"
    PKG = "PKG"
    VO = "VO"
    VOSOT = "VOSOT"
    SOT = "SOT"
    READER = "READER"
    GRAPHIC = "GRAPHIC"
    VT = "VT"
    IV = "IV"
    PHONER = "PHONER"
    WEATHER = "WEATHER"
    SPORTS = "SPORTS"


class RowSegment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "row_segments"

    row_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("rundown_rows.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[SegmentType] = mapped_column(
        ENUM(SegmentType, name="segment_type", create_type=True),
        default=SegmentType.LIVE,
        nullable=False,
    )
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    est_duration_secs: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    actual_duration_secs: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    row: Mapped["RundownRow"] = relationship("RundownRow", back_populates="segments", lazy="noload")
