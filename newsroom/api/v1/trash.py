from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.dependencies import require_admin, require_editor
from newsroom.db.session import get_db
from newsroom.models.user import User
from newsroom.schemas.trash import TrashItemRequest
from newsroom.services.audit_service import log_action, request_context
from newsroom.services.trash_service import delete_permanently, list_trash, purge_expired, restore_item

router = APIRouter(prefix="/trash", tags=["trash"])


@router.get("")
async def get_trash(
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_editor),
):
    return await list_trash(db)


@router.post("/restore")
async def restore(
    body: TrashItemRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_editor),
):
    restored = await restore_item(db, body.type, body.id)
    await log_action(
        db, user=user, action="RESTORE", resource_type=body.type.upper(), resource_id=body.id,
        **request_context(request),
    )
    await db.commit()
    return restored


@router.post("/permanent")
async def permanent_delete(
    body: TrashItemRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_admin),
):
    deleted = await delete_permanently(db, body.type, body.id)
    await log_action(
        db, user=user, action="PERMANENT_DELETE", resource_type=body.type.upper(), resource_id=body.id,
        bulletin_id=body.id if body.type == "bulletin" else None,
        row_id=body.id if body.type == "row" else None,
        **request_context(request),
    )
    await db.commit()
    return deleted


@router.delete("/expired")
async def purge(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_admin),
):
    counts = await purge_expired(db)
    await log_action(
        db, user=user, action="PURGE", resource_type="TRASH",
        detail=f"Purged {counts['bulletins']} bulletins and {counts['rows']} rows",
        **request_context(request),
    )
    await db.commit()
    return {"purged": counts}
