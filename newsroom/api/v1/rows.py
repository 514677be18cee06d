"""
Rundown row endpoints, plus the segments that break a row down.
"""
import uuid

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.dependencies import get_current_user, require_action
from newsroom.core.exceptions import ForbiddenError, NotFoundError
from newsroom.core.permissions import allowed_row_statuses, can_edit_row, editable_row_fields
from newsroom.db.session import get_db
from newsroom.models.row_segment import RowSegment
from newsroom.models.user import User
from newsroom.schemas.row import ApproveRequest, RowMutationResponse, RowOut, RowUpdate
from newsroom.schemas.segment import SegmentCreate, SegmentOut, SegmentUpdate
from newsroom.services.audit_service import log_action, request_context
from newsroom.services.rundown_service import (
    approve_row,
    ensure_unlocked,
    get_bulletin,
    get_row,
    soft_delete_row,
    update_row,
)
from newsroom.services.time_codec import parse_clock_duration_to_seconds

router = APIRouter(tags=["rows"])

_NON_NULLABLE = {"est_duration_secs", "is_float", "status"}
_CLOCK_FIELDS = {"est_duration": "est_duration_secs", "actual_duration": "actual_duration_secs"}


def _normalize_changes(body: RowUpdate) -> dict:
    """Fold clock-text durations into their ``*_secs`` fields."""
    changes = body.model_dump(exclude_unset=True)
    for text_field, secs_field in _CLOCK_FIELDS.items():
        if text_field not in changes:
            continue
        text = changes.pop(text_field)
        if text is None or not text.strip():
            changes[secs_field] = None if secs_field == "actual_duration_secs" else 0
        else:
            changes[secs_field] = round(parse_clock_duration_to_seconds(text))
    return {k: v for k, v in changes.items() if v is not None or k not in _NON_NULLABLE}


async def _get_segment(db: AsyncSession, segment_id: uuid.UUID) -> RowSegment:
    result = await db.execute(select(RowSegment).where(RowSegment.id == segment_id))
    segment = result.scalar_one_or_none()
    if segment is None:
        raise NotFoundError("Segment not found")
    return segment


@router.get("/rows/{row_id}", response_model=RowOut)
async def get_row_detail(
    row_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    return await get_row(db, row_id)


@router.patch("/rows/{row_id}", response_model=RowMutationResponse)
async def update_row_endpoint(
    row_id: uuid.UUID,
    body: RowUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    row = await get_row(db, row_id)
    bulletin = await get_bulletin(db, row.bulletin_id, for_update=True)
    ensure_unlocked(bulletin, user)
    if not can_edit_row(user, row):
        raise ForbiddenError("You can only edit stories assigned to you")

    changes = _normalize_changes(body)
    disallowed = set(changes) - editable_row_fields(user)
    if disallowed:
        raise ForbiddenError(f"Not allowed to edit: {', '.join(sorted(disallowed))}")
    if "status" in changes and changes["status"] not in allowed_row_statuses(user):
        raise ForbiddenError(f"Not allowed to set status {changes['status'].value}")

    timing = await update_row(db, row, changes, user)
    await log_action(
        db, user=user, action="UPDATE", resource_type="ROW", resource_id=row.id,
        bulletin_id=row.bulletin_id, row_id=row.id,
        changes=jsonable_encoder({k: v for k, v in changes.items() if k != "script"}),
        **request_context(request),
    )
    await db.commit()
    return RowMutationResponse(
        row=RowOut.model_validate(row),
        timing=timing.as_dict() if timing else None,
    )


@router.delete("/rows/{row_id}")
async def delete_row(
    row_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_action("delete_row")),
):
    row = await get_row(db, row_id)
    bulletin = await get_bulletin(db, row.bulletin_id, for_update=True)
    ensure_unlocked(bulletin, user)

    timing = await soft_delete_row(db, row, user)
    await log_action(
        db, user=user, action="DELETE", resource_type="ROW", resource_id=row.id,
        bulletin_id=row.bulletin_id, row_id=row.id,
        detail=f"Moved {row.page_code} '{row.slug or ''}' to trash",
        **request_context(request),
    )
    await db.commit()
    return timing.as_dict()


@router.post("/rows/{row_id}/approve", response_model=RowOut)
async def approve(
    row_id: uuid.UUID,
    request: Request,
    body: ApproveRequest = ApproveRequest(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_action("approve_row")),
):
    row = await get_row(db, row_id)
    bulletin = await get_bulletin(db, row.bulletin_id)
    ensure_unlocked(bulletin, user)

    await approve_row(db, row, body.approved, user)
    await log_action(
        db, user=user, action="APPROVE" if body.approved else "UNAPPROVE",
        resource_type="ROW", resource_id=row.id,
        bulletin_id=row.bulletin_id, row_id=row.id,
        **request_context(request),
    )
    await db.commit()
    return row


@router.get("/rows/{row_id}/segments", response_model=list[SegmentOut])
async def list_segments(
    row_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    await get_row(db, row_id)
    result = await db.execute(
        select(RowSegment).where(RowSegment.row_id == row_id).order_by(RowSegment.sort_order)
    )
    return result.scalars().all()


@router.post("/rows/{row_id}/segments", response_model=SegmentOut, status_code=201)
async def create_segment(
    row_id: uuid.UUID,
    body: SegmentCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    row = await get_row(db, row_id)
    if not can_edit_row(user, row):
        raise ForbiddenError("You can only edit stories assigned to you")

    data = body.model_dump()
    if data["sort_order"] is None:
        max_order = (
            await db.execute(select(func.max(RowSegment.sort_order)).where(RowSegment.row_id == row_id))
        ).scalar()
        data["sort_order"] = 0 if max_order is None else max_order + 1
    segment = RowSegment(row_id=row_id, created_by=user.id, **data)
    db.add(segment)
    await db.commit()
    await db.refresh(segment)
    return segment


@router.patch("/segments/{segment_id}", response_model=SegmentOut)
async def update_segment(
    segment_id: uuid.UUID,
    body: SegmentUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    segment = await _get_segment(db, segment_id)
    row = await get_row(db, segment.row_id)
    if not can_edit_row(user, row):
        raise ForbiddenError("You can only edit stories assigned to you")

    for key, value in body.model_dump(exclude_unset=True).items():
        if value is None and key != "actual_duration_secs":
            continue
        setattr(segment, key, value)
    await db.commit()
    await db.refresh(segment)
    return segment


@router.delete("/segments/{segment_id}", status_code=204)
async def delete_segment(
    segment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    segment = await _get_segment(db, segment_id)
    row = await get_row(db, segment.row_id)
    if not can_edit_row(user, row):
        raise ForbiddenError("You can only edit stories assigned to you")
    await db.delete(segment)
    await db.commit()
