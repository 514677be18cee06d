import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from newsroom.models.rundown_row import RowStatus, RowType


class RowCreate(BaseModel):
    block_code: str = Field(min_length=1, max_length=5)
    row_type: RowType = RowType.STORY
    slug: str | None = None
    segment: str | None = "LIVE"
    story_producer_id: uuid.UUID | None = None
    reporter_id: uuid.UUID | None = None
    category_id: uuid.UUID | None = None
    est_duration_secs: int | None = Field(default=None, ge=0)
    is_float: bool = False
    status: RowStatus = RowStatus.BLANK
    script: str | None = None
    notes: str | None = None
    insert_after: uuid.UUID | None = None
    insert_at_position: int | None = Field(default=None, ge=0)


class RowUpdate(BaseModel):
    slug: str | None = None
    segment: str | None = None
    story_producer_id: uuid.UUID | None = None
    reporter_id: uuid.UUID | None = None
    category_id: uuid.UUID | None = None
    est_duration_secs: int | None = Field(default=None, ge=0)
    actual_duration_secs: int | None = Field(default=None, ge=0)
    # Clock text ("1:30"), converted to seconds by the handler
    est_duration: str | None = None
    actual_duration: str | None = None
    is_float: bool | None = None
    status: RowStatus | None = None
    script: str | None = None
    notes: str | None = None


class ReorderItem(BaseModel):
    id: uuid.UUID
    sort_order: int = Field(ge=0)
    page_code: str | None = None
    block_code: str | None = None


class ReorderRequest(BaseModel):
    rows: list[ReorderItem] = Field(min_length=1)


class ApproveRequest(BaseModel):
    approved: bool = True


class RowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    bulletin_id: uuid.UUID
    page_code: str | None = None
    block_code: str | None = None
    page_number: int | None = None
    sort_order: int
    row_type: RowType
    slug: str | None = None
    segment: str | None = None
    story_producer_id: uuid.UUID | None = None
    reporter_id: uuid.UUID | None = None
    category_id: uuid.UUID | None = None
    final_approval: bool
    approved_by: uuid.UUID | None = None
    approved_at: datetime | None = None
    est_duration_secs: int
    actual_duration_secs: int | None = None
    front_time_secs: int
    cume_time_secs: int
    is_float: bool
    status: RowStatus
    break_number: int | None = None
    script: str | None = None
    notes: str | None = None
    source_pool_id: uuid.UUID | None = None
    created_by: uuid.UUID | None = None
    last_modified_by: uuid.UUID | None = None
    updated_at: datetime | None = None


class RowMutationResponse(BaseModel):
    row: RowOut
    timing: dict | None = None
