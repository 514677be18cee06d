import uuid

from pydantic import BaseModel, ConfigDict, EmailStr

from newsroom.models.user import UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID | str
    email: str
    role: UserRole
    is_active: bool
    display_name: str | None = None
    desk_id: uuid.UUID | None = None
