"""Pydantic schemas for Desk."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class DeskCreate(BaseModel):
    name: str
    code: str
    description: str | None = None
    color: str = "#3498db"


class DeskUpdate(BaseModel):
    name: str | None = None
    code: str | None = None
    description: str | None = None
    color: str | None = None
    is_active: bool | None = None


class DeskInDB(BaseModel):
    id: UUID | str
    name: str
    code: str
    description: str | None = None
    color: str
    is_active: bool
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
