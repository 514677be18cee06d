import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from newsroom.models.user import UserRole


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    role: UserRole = UserRole.REPORTER
    display_name: str | None = None
    phone: str | None = None
    desk_id: uuid.UUID | None = None


class UserUpdate(BaseModel):
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8)
    role: UserRole | None = None
    display_name: str | None = None
    is_active: bool | None = None
    phone: str | None = None
    desk_id: uuid.UUID | None = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID | str
    email: str
    role: UserRole
    is_active: bool
    display_name: str | None = None
    phone: str | None = None
    desk_id: uuid.UUID | None = None
    last_seen_at: datetime | None = None
    last_action: str | None = None


class UserListResponse(BaseModel):
    users: list[UserOut]
    total: int

