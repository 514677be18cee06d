"""
Category management endpoints.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.dependencies import get_current_user, require_producer
from newsroom.core.exceptions import NotFoundError
from newsroom.db.session import get_db
from newsroom.models.category import Category
from newsroom.schemas.category import CategoryCreate, CategoryInDB, CategoryUpdate

router = APIRouter(prefix="/categories", tags=["categories"])


async def _get_category(db: AsyncSession, category_id: UUID) -> Category:
    result = await db.execute(select(Category).where(Category.id == category_id))
    record = result.scalar_one_or_none()
    if not record:
        raise NotFoundError("Category not found")
    return record


@router.get("", response_model=list[CategoryInDB])
async def list_categories(
    desk_id: UUID | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _=Depends(get_current_user),
):
    stmt = select(Category).where(Category.is_active.is_(True)).order_by(Category.name)
    if desk_id:
        stmt = stmt.where(Category.desk_id == desk_id)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.post("", response_model=CategoryInDB, status_code=201)
async def create_category(
    data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    _=Depends(require_producer),
):
    record = Category(**data.model_dump())
    db.add(record)
    await db.commit()
    await db.refresh(record)
    return record


@router.patch("/{category_id}", response_model=CategoryInDB)
async def update_category(
    category_id: UUID,
    data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    _=Depends(require_producer),
):
    record = await _get_category(db, category_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(record, key, value)

    await db.commit()
    await db.refresh(record)
    return record


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_db),
    _=Depends(require_producer),
):
    record = await _get_category(db, category_id)
    await db.delete(record)
    await db.commit()
