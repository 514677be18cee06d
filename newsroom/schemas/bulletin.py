import re
import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from newsroom.models.bulletin import BulletinStatus
from newsroom.schemas.row import RowOut

_TIME_OF_DAY_RE = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


def _check_time_of_day(value: str | None) -> str | None:
    if value is not None and not _TIME_OF_DAY_RE.match(value):
        raise ValueError("must be HH:MM or HH:MM:SS")
    return value


class TemplateOptionsIn(BaseModel):
    opening_duration_secs: int = Field(default=15, ge=0)
    welcome_duration_secs: int = Field(default=12, ge=0)
    closing_duration_secs: int = Field(default=45, ge=0)
    commercial_duration_secs: int = Field(default=180, ge=0)
    story_duration_secs: int = Field(default=90, ge=0)


class BulletinCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    subtitle: str | None = None
    code: str | None = None
    air_date: date
    start_time: str
    end_time: str | None = None
    planned_duration_secs: int = Field(default=1800, gt=0)
    producer_id: uuid.UUID | None = None
    desk_id: uuid.UUID | None = None
    notes: str | None = None
    generate_template: bool = True
    template: TemplateOptionsIn | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, v: str | None) -> str | None:
        return _check_time_of_day(v)


class BulletinUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    subtitle: str | None = None
    code: str | None = None
    air_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    planned_duration_secs: int | None = Field(default=None, gt=0)
    status: BulletinStatus | None = None
    producer_id: uuid.UUID | None = None
    desk_id: uuid.UUID | None = None
    notes: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, v: str | None) -> str | None:
        return _check_time_of_day(v)


class BulletinOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    subtitle: str | None = None
    code: str | None = None
    air_date: date
    start_time: str
    end_time: str | None = None
    planned_duration_secs: int
    total_est_duration_secs: int
    total_actual_duration_secs: int | None = None
    total_commercial_secs: int
    timing_variance_secs: int
    status: BulletinStatus
    is_locked: bool
    locked_by: uuid.UUID | None = None
    locked_at: datetime | None = None
    producer_id: uuid.UUID | None = None
    desk_id: uuid.UUID | None = None
    notes: str | None = None
    created_by: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BulletinListResponse(BaseModel):
    bulletins: list[BulletinOut]
    total: int


class BulletinDetail(BaseModel):
    bulletin: BulletinOut
    rows: list[RowOut]
    timing: dict


class AutoGenerateRequest(BaseModel):
    air_date: date


class AutoGenerateResponse(BaseModel):
    created: int
    skipped: int
    bulletins: list[BulletinOut]
