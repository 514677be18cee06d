import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.dependencies import require_admin
from newsroom.core.exceptions import ConflictError, NotFoundError
from newsroom.core.security import hash_password
from newsroom.db.session import get_db
from newsroom.models.audit_log import AuditLog
from newsroom.models.user import User
from newsroom.schemas.user_mgmt import UserCreate, UserListResponse, UserOut, UserUpdate
from newsroom.services.audit_service import log_action, request_context
from newsroom.services.auth_service import create_user, get_user_by_email

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/audit-log")
async def list_audit_logs(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    resource_type: str | None = Query(None),
    bulletin_id: uuid.UUID | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    """Admin: view the persistent audit log of write actions."""
    filters = []
    if resource_type:
        filters.append(AuditLog.resource_type == resource_type)
    if bulletin_id:
        filters.append(AuditLog.bulletin_id == bulletin_id)

    total = (await db.execute(select(func.count()).select_from(AuditLog).where(*filters))).scalar() or 0
    result = await db.execute(
        select(AuditLog).where(*filters).order_by(AuditLog.created_at.desc()).offset(skip).limit(limit)
    )
    logs = result.scalars().all()
    return {
        "total": total,
        "logs": [
            {
                "id": str(l.id),
                "user_email": l.user_email,
                "action": l.action,
                "resource_type": l.resource_type,
                "resource_id": l.resource_id,
                "bulletin_id": str(l.bulletin_id) if l.bulletin_id else None,
                "row_id": str(l.row_id) if l.row_id else None,
                "detail": l.detail,
                "changes": l.changes,
                "request_id": l.request_id,
                "created_at": l.created_at.isoformat() if l.created_at else None,
            }
            for l in logs
        ],
    }


@router.get("", response_model=UserListResponse)
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    count_result = await db.execute(select(func.count()).select_from(User))
    total = count_result.scalar() or 0
    result = await db.execute(select(User).offset(skip).limit(limit).order_by(User.created_at))
    users = result.scalars().all()
    return UserListResponse(users=users, total=total)


@router.post("", response_model=UserOut, status_code=201)
async def create_user_endpoint(
    body: UserCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = await create_user(
        db,
        email=body.email,
        password=body.password,
        display_name=body.display_name,
        role=body.role,
        phone=body.phone,
        desk_id=body.desk_id,
    )
    await log_action(
        db, user=admin, action="CREATE", resource_type="USER", resource_id=user.id,
        detail=f"Created user '{user.email}' with role '{user.role.value}'",
        **request_context(request),
    )
    await db.commit()
    return user


@router.patch("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User not found")

    changes = body.model_dump(exclude_unset=True)
    if "email" in changes and changes["email"] is not None:
        existing = await get_user_by_email(db, changes["email"])
        if existing and existing.id != user.id:
            raise ConflictError("A user with this email already exists")
        changes["email"] = changes["email"].lower()
    if "password" in changes:
        password = changes.pop("password")
        if password:
            user.hashed_password = hash_password(password)
    for key, value in changes.items():
        if value is None and key in ("email", "role", "is_active"):
            continue
        setattr(user, key, value)

    await log_action(
        db, user=admin, action="UPDATE", resource_type="USER", resource_id=user.id,
        changes=body.model_dump(mode="json", exclude_unset=True, exclude={"password"}),
        **request_context(request),
    )
    await db.commit()
    return user


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot delete yourself")
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User not found")
    await log_action(
        db, user=admin, action="DELETE", resource_type="USER", resource_id=user_id,
        detail=f"Deleted user '{user.email}'",
        **request_context(request),
    )
    await db.delete(user)
    await db.commit()
