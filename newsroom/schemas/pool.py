import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from newsroom.models.pool import PoolType, StoryStatus


class PoolCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=20)
    type: PoolType = PoolType.STORY_POOL
    description: str | None = None
    color: str = "#3498db"
    desk_id: uuid.UUID | None = None


class PoolOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    code: str
    type: PoolType
    description: str | None = None
    color: str
    desk_id: uuid.UUID | None = None
    is_active: bool


class PoolStoryCreate(BaseModel):
    slug: str = Field(min_length=1, max_length=255)
    segment: str | None = "LIVE"
    description: str | None = None
    est_duration_secs: int = Field(default=90, ge=0)
    reporter_id: uuid.UUID | None = None
    category_id: uuid.UUID | None = None
    status: StoryStatus = StoryStatus.DRAFT

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: StoryStatus) -> StoryStatus:
        if v not in (StoryStatus.DRAFT, StoryStatus.READY):
            raise ValueError("new pool stories must be DRAFT or READY")
        return v


class PoolStoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    pool_id: uuid.UUID
    slug: str
    segment: str | None = None
    description: str | None = None
    est_duration_secs: int
    reporter_id: uuid.UUID | None = None
    category_id: uuid.UUID | None = None
    status: StoryStatus
    used_in_bulletin_id: uuid.UUID | None = None
    used_in_row_id: uuid.UUID | None = None
    used_at: datetime | None = None
    created_at: datetime | None = None


class AssignRequest(BaseModel):
    bulletin_id: uuid.UUID
    block_code: str = Field(default="A", min_length=1, max_length=5)
    insert_after: uuid.UUID | None = None
    insert_at_position: int | None = Field(default=None, ge=0)
