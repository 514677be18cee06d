import uuid

from pydantic import BaseModel, ConfigDict, Field

from newsroom.models.row_segment import SegmentType


class SegmentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    type: SegmentType = SegmentType.LIVE
    description: str = ""
    est_duration_secs: int = Field(default=0, ge=0)
    actual_duration_secs: int | None = Field(default=None, ge=0)
    sort_order: int | None = Field(default=None, ge=0)


class SegmentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    type: SegmentType | None = None
    description: str | None = None
    est_duration_secs: int | None = Field(default=None, ge=0)
    actual_duration_secs: int | None = Field(default=None, ge=0)
    sort_order: int | None = Field(default=None, ge=0)


class SegmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    row_id: uuid.UUID
    name: str
    type: SegmentType
    description: str
    est_duration_secs: int
    actual_duration_secs: int | None = None
    sort_order: int
