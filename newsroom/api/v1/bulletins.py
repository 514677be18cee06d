"""
Bulletin endpoints: running orders, their editorial lock and timing.
"""
import logging
import uuid
from datetime import date, datetime, timezone

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.dependencies import get_current_user, require_action, require_editor
from newsroom.core.exceptions import ConflictError, ForbiddenError
from newsroom.db.session import get_db
from newsroom.models.bulletin import Bulletin, BulletinStatus
from newsroom.models.user import User, UserRole
from newsroom.schemas.bulletin import (
    AutoGenerateRequest,
    AutoGenerateResponse,
    BulletinCreate,
    BulletinDetail,
    BulletinListResponse,
    BulletinOut,
    BulletinUpdate,
    TemplateOptionsIn,
)
from newsroom.schemas.row import ReorderRequest, RowCreate, RowMutationResponse, RowOut
from newsroom.services.audit_service import log_action, request_context
from newsroom.services.bulletin_schedule import auto_generate_bulletins
from newsroom.services.rundown_service import (
    ensure_unlocked,
    get_bulletin,
    insert_row,
    reorder_rows,
    rundown_snapshot,
    soft_delete_bulletin,
)
from newsroom.services.rundown_template import TemplateOptions, generate_rundown_template
from newsroom.services.timing_engine import recalculate_timing

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bulletins", tags=["bulletins"])

# Columns that may not be cleared through PATCH
_REQUIRED_FIELDS = {"title", "air_date", "start_time", "planned_duration_secs", "status"}
_TIMING_INPUTS = {"start_time", "planned_duration_secs"}


async def _detail(db: AsyncSession, bulletin: Bulletin) -> BulletinDetail:
    rows, timing = await rundown_snapshot(db, bulletin)
    return BulletinDetail(
        bulletin=BulletinOut.model_validate(bulletin),
        rows=[RowOut.model_validate(r) for r in rows],
        timing=timing.as_dict(),
    )


@router.get("", response_model=BulletinListResponse)
async def list_bulletins(
    air_date: date | None = Query(None),
    status: BulletinStatus | None = Query(None),
    desk_id: uuid.UUID | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    filters = [Bulletin.deleted_at.is_(None)]
    if air_date:
        filters.append(Bulletin.air_date == air_date)
    if status:
        filters.append(Bulletin.status == status)
    if desk_id:
        filters.append(Bulletin.desk_id == desk_id)

    total = (await db.execute(select(func.count()).select_from(Bulletin).where(*filters))).scalar() or 0
    result = await db.execute(
        select(Bulletin)
        .where(*filters)
        .order_by(Bulletin.air_date.desc(), Bulletin.start_time)
        .offset(skip)
        .limit(limit)
    )
    return BulletinListResponse(bulletins=result.scalars().all(), total=total)


@router.post("", response_model=BulletinDetail, status_code=201)
async def create_bulletin(
    body: BulletinCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_action("create_bulletin")),
):
    data = body.model_dump(exclude={"generate_template", "template"})
    bulletin = Bulletin(**data, created_by=user.id)
    if bulletin.producer_id is None:
        bulletin.producer_id = user.id
    db.add(bulletin)
    await db.flush()

    if body.generate_template:
        options = TemplateOptions(**body.template.model_dump()) if body.template else TemplateOptions()
        created = await generate_rundown_template(db, bulletin.id, user.id, options)
    else:
        created = 0
        await recalculate_timing(db, bulletin.id)

    await log_action(
        db, user=user, action="CREATE", resource_type="BULLETIN", resource_id=bulletin.id,
        bulletin_id=bulletin.id,
        detail=f"Created bulletin '{bulletin.title}' ({created} template rows)",
        **request_context(request),
    )
    await db.commit()
    return await _detail(db, bulletin)


@router.post("/auto-generate", response_model=AutoGenerateResponse, status_code=201)
async def auto_generate(
    body: AutoGenerateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_action("auto_generate_bulletins")),
):
    result = await auto_generate_bulletins(db, body.air_date, user)
    await log_action(
        db, user=user, action="AUTO_GENERATE", resource_type="BULLETIN",
        detail=f"Auto-generated {result['created']} bulletins for {body.air_date} ({result['skipped']} skipped)",
        changes={"air_date": body.air_date.isoformat(), "created": result["created"], "skipped": result["skipped"]},
        **request_context(request),
    )
    await db.commit()
    return AutoGenerateResponse(
        created=result["created"],
        skipped=result["skipped"],
        bulletins=[BulletinOut.model_validate(b) for b in result["bulletins"]],
    )


@router.get("/{bulletin_id}", response_model=BulletinDetail)
async def get_bulletin_detail(
    bulletin_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    bulletin = await get_bulletin(db, bulletin_id)
    return await _detail(db, bulletin)


@router.patch("/{bulletin_id}", response_model=BulletinOut)
async def update_bulletin(
    bulletin_id: uuid.UUID,
    body: BulletinUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_action("edit_bulletin")),
):
    bulletin = await get_bulletin(db, bulletin_id, for_update=True)
    ensure_unlocked(bulletin, user)

    changes = {
        k: v for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k not in _REQUIRED_FIELDS
    }
    for key, value in changes.items():
        setattr(bulletin, key, value)
    await db.flush()

    if _TIMING_INPUTS & changes.keys():
        await recalculate_timing(db, bulletin.id)

    await log_action(
        db, user=user, action="UPDATE", resource_type="BULLETIN", resource_id=bulletin.id,
        bulletin_id=bulletin.id,
        changes=body.model_dump(mode="json", exclude_unset=True),
        **request_context(request),
    )
    await db.commit()
    return bulletin


@router.delete("/{bulletin_id}", status_code=204)
async def delete_bulletin(
    bulletin_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_action("delete_bulletin")),
):
    bulletin = await get_bulletin(db, bulletin_id, for_update=True)
    await soft_delete_bulletin(db, bulletin, user)
    await log_action(
        db, user=user, action="DELETE", resource_type="BULLETIN", resource_id=bulletin.id,
        bulletin_id=bulletin.id, detail=f"Moved bulletin '{bulletin.title}' to trash",
        **request_context(request),
    )
    await db.commit()


@router.post("/{bulletin_id}/lock", response_model=BulletinOut)
async def lock_bulletin(
    bulletin_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_action("lock_bulletin")),
):
    bulletin = await get_bulletin(db, bulletin_id, for_update=True)
    if bulletin.is_locked_for(user.id):
        raise ConflictError({"message": "Bulletin is locked by another user", "locked_by": str(bulletin.locked_by)})

    bulletin.is_locked = True
    bulletin.locked_by = user.id
    bulletin.locked_at = datetime.now(timezone.utc)
    await log_action(
        db, user=user, action="LOCK", resource_type="BULLETIN", resource_id=bulletin.id,
        bulletin_id=bulletin.id, **request_context(request),
    )
    await db.commit()
    return bulletin


@router.delete("/{bulletin_id}/lock", response_model=BulletinOut)
async def unlock_bulletin(
    bulletin_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_action("lock_bulletin")),
):
    bulletin = await get_bulletin(db, bulletin_id, for_update=True)
    if not bulletin.is_locked:
        return bulletin
    if bulletin.locked_by != user.id and user.role != UserRole.ADMIN:
        raise ForbiddenError("Only the lock owner or an admin can unlock this bulletin")

    bulletin.is_locked = False
    bulletin.locked_by = None
    bulletin.locked_at = None
    await log_action(
        db, user=user, action="UNLOCK", resource_type="BULLETIN", resource_id=bulletin.id,
        bulletin_id=bulletin.id, **request_context(request),
    )
    await db.commit()
    return bulletin


@router.post("/{bulletin_id}/recalculate")
async def recalculate(
    bulletin_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_editor),
):
    timing = await recalculate_timing(db, bulletin_id)
    await db.commit()
    return timing.as_dict()


@router.post("/{bulletin_id}/template", status_code=201)
async def apply_template(
    bulletin_id: uuid.UUID,
    request: Request,
    body: TemplateOptionsIn | None = Body(None),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_action("edit_bulletin")),
):
    """Append the standard A-D/Z template to an existing bulletin."""
    bulletin = await get_bulletin(db, bulletin_id, for_update=True)
    ensure_unlocked(bulletin, user)

    options = TemplateOptions(**body.model_dump()) if body else TemplateOptions()
    created = await generate_rundown_template(db, bulletin.id, user.id, options)
    await log_action(
        db, user=user, action="TEMPLATE", resource_type="BULLETIN", resource_id=bulletin.id,
        bulletin_id=bulletin.id, detail=f"Generated {created} template rows",
        **request_context(request),
    )
    await db.commit()

    _, timing = await rundown_snapshot(db, bulletin)
    return {"created": created, "timing": timing.as_dict()}


@router.get("/{bulletin_id}/rows", response_model=list[RowOut])
async def list_rows(
    bulletin_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    bulletin = await get_bulletin(db, bulletin_id)
    rows, _ = await rundown_snapshot(db, bulletin)
    return rows


@router.post("/{bulletin_id}/rows", response_model=RowMutationResponse, status_code=201)
async def create_row(
    bulletin_id: uuid.UUID,
    body: RowCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_action("create_row")),
):
    bulletin = await get_bulletin(db, bulletin_id, for_update=True)
    ensure_unlocked(bulletin, user)

    values = body.model_dump(exclude={"insert_after", "insert_at_position"})
    if values["est_duration_secs"] is None:
        del values["est_duration_secs"]
    row, timing = await insert_row(
        db, bulletin, user, values,
        insert_after=body.insert_after, insert_at_position=body.insert_at_position,
    )
    await log_action(
        db, user=user, action="CREATE", resource_type="ROW", resource_id=row.id,
        bulletin_id=bulletin.id, row_id=row.id,
        detail=f"Inserted {row.page_code} '{row.slug or ''}'",
        **request_context(request),
    )
    await db.commit()
    return RowMutationResponse(row=RowOut.model_validate(row), timing=timing.as_dict())


@router.put("/{bulletin_id}/rows/reorder")
async def reorder(
    bulletin_id: uuid.UUID,
    body: ReorderRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_action("edit_any_row")),
):
    bulletin = await get_bulletin(db, bulletin_id, for_update=True)
    ensure_unlocked(bulletin, user)

    timing = await reorder_rows(db, bulletin, [item.model_dump() for item in body.rows], user)
    await log_action(
        db, user=user, action="REORDER", resource_type="BULLETIN", resource_id=bulletin.id,
        bulletin_id=bulletin.id, detail=f"Reordered {len(body.rows)} rows",
        **request_context(request),
    )
    await db.commit()
    return timing.as_dict()
