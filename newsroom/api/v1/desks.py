"""
Desk management endpoints.
"""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.dependencies import get_current_user, require_producer
from newsroom.core.exceptions import ConflictError, NotFoundError
from newsroom.db.session import get_db
from newsroom.models.desk import Desk
from newsroom.schemas.desk import DeskCreate, DeskInDB, DeskUpdate

router = APIRouter(prefix="/desks", tags=["desks"])


async def _get_desk(db: AsyncSession, desk_id: UUID) -> Desk:
    result = await db.execute(select(Desk).where(Desk.id == desk_id))
    record = result.scalar_one_or_none()
    if not record:
        raise NotFoundError("Desk not found")
    return record


async def _ensure_unique(db: AsyncSession, name: str | None, code: str | None, exclude: UUID | None = None):
    for column, value in ((Desk.name, name), (Desk.code, code)):
        if value is None:
            continue
        stmt = select(Desk.id).where(column == value)
        if exclude:
            stmt = stmt.where(Desk.id != exclude)
        if (await db.execute(stmt)).first():
            raise ConflictError(f"A desk with {column.key} '{value}' already exists")


@router.get("", response_model=list[DeskInDB])
async def list_desks(
    db: AsyncSession = Depends(get_db),
    _=Depends(get_current_user),
):
    result = await db.execute(select(Desk).order_by(Desk.name))
    return result.scalars().all()


@router.post("", response_model=DeskInDB, status_code=201)
async def create_desk(
    data: DeskCreate,
    db: AsyncSession = Depends(get_db),
    _=Depends(require_producer),
):
    await _ensure_unique(db, data.name, data.code)
    record = Desk(**data.model_dump())
    db.add(record)
    await db.commit()
    await db.refresh(record)
    return record


@router.patch("/{desk_id}", response_model=DeskInDB)
async def update_desk(
    desk_id: UUID,
    data: DeskUpdate,
    db: AsyncSession = Depends(get_db),
    _=Depends(require_producer),
):
    record = await _get_desk(db, desk_id)
    changes = data.model_dump(exclude_unset=True)
    await _ensure_unique(db, changes.get("name"), changes.get("code"), exclude=desk_id)
    for key, value in changes.items():
        setattr(record, key, value)

    await db.commit()
    await db.refresh(record)
    return record


@router.delete("/{desk_id}", status_code=204)
async def delete_desk(
    desk_id: UUID,
    db: AsyncSession = Depends(get_db),
    _=Depends(require_producer),
):
    record = await _get_desk(db, desk_id)
    await db.delete(record)
    await db.commit()
