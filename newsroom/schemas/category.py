"""Pydantic schemas for Category."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class CategoryCreate(BaseModel):
    name: str
    color: str = "#3498db"
    desk_id: UUID | None = None


class CategoryUpdate(BaseModel):
    name: str | None = None
    color: str | None = None
    desk_id: UUID | None = None
    is_active: bool | None = None


class CategoryInDB(BaseModel):
    id: UUID | str
    name: str
    color: str
    desk_id: UUID | None = None
    is_active: bool
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
