from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.dependencies import get_current_user
from newsroom.db.session import get_db
from newsroom.models.user import User
from newsroom.schemas.auth import LoginRequest, RefreshRequest, TokenResponse, UserResponse
from newsroom.services.audit_service import log_action, request_context
from newsroom.services.auth_service import authenticate_user, create_tokens, refresh_access_token

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, body.email, body.password)
    await log_action(
        db, user=user, action="LOGIN", resource_type="USER", resource_id=user.id,
        **request_context(request),
    )
    await db.commit()
    return create_tokens(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)):
    return await refresh_access_token(db, body.refresh_token)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return current_user
