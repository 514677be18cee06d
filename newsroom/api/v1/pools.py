"""
Story pool endpoints: pre-produced stories and their placement into bulletins.
"""
import uuid

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.dependencies import get_current_user, require_action, require_editor
from newsroom.core.exceptions import ConflictError, NotFoundError
from newsroom.db.session import get_db
from newsroom.models.pool import Pool, PoolStory, PoolType
from newsroom.models.user import User
from newsroom.schemas.pool import AssignRequest, PoolCreate, PoolOut, PoolStoryCreate, PoolStoryOut
from newsroom.schemas.row import RowMutationResponse, RowOut
from newsroom.services.audit_service import log_action, request_context
from newsroom.services.rundown_service import assign_pool_story, get_bulletin

router = APIRouter(tags=["pools"])


async def _get_pool(db: AsyncSession, pool_id: uuid.UUID) -> Pool:
    result = await db.execute(select(Pool).where(Pool.id == pool_id))
    pool = result.scalar_one_or_none()
    if pool is None:
        raise NotFoundError("Pool not found")
    return pool


@router.get("/pools", response_model=list[PoolOut])
async def list_pools(
    desk_id: uuid.UUID | None = Query(None),
    type: PoolType | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    stmt = select(Pool).where(Pool.is_active.is_(True)).order_by(Pool.name)
    if desk_id:
        stmt = stmt.where(Pool.desk_id == desk_id)
    if type:
        stmt = stmt.where(Pool.type == type)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.post("/pools", response_model=PoolOut, status_code=201)
async def create_pool(
    body: PoolCreate,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(require_action("manage_pools")),
):
    code = body.code.upper()
    existing = await db.execute(select(Pool.id).where(Pool.code == code))
    if existing.first():
        raise ConflictError(f"A pool with code '{code}' already exists")

    pool = Pool(**body.model_dump(exclude={"code"}), code=code)
    db.add(pool)
    await db.commit()
    await db.refresh(pool)
    return pool


@router.get("/pools/{pool_id}/stories", response_model=list[PoolStoryOut])
async def list_pool_stories(
    pool_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    await _get_pool(db, pool_id)
    result = await db.execute(
        select(PoolStory).where(PoolStory.pool_id == pool_id).order_by(PoolStory.created_at)
    )
    return result.scalars().all()


@router.post("/pools/{pool_id}/stories", response_model=PoolStoryOut, status_code=201)
async def create_pool_story(
    pool_id: uuid.UUID,
    body: PoolStoryCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_editor),
):
    await _get_pool(db, pool_id)
    story = PoolStory(pool_id=pool_id, created_by=user.id, **body.model_dump())
    db.add(story)
    await db.commit()
    await db.refresh(story)
    return story


@router.post("/pool-stories/{story_id}/assign", response_model=RowMutationResponse, status_code=201)
async def assign_story(
    story_id: uuid.UUID,
    body: AssignRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_action("create_row")),
):
    result = await db.execute(select(PoolStory).where(PoolStory.id == story_id).with_for_update())
    story = result.scalar_one_or_none()
    if story is None:
        raise NotFoundError("Pool story not found")
    bulletin = await get_bulletin(db, body.bulletin_id, for_update=True)

    row, timing = await assign_pool_story(
        db, story, bulletin, user,
        block_code=body.block_code,
        insert_after=body.insert_after,
        insert_at_position=body.insert_at_position,
    )
    await log_action(
        db, user=user, action="ASSIGN", resource_type="POOL_STORY", resource_id=story.id,
        bulletin_id=bulletin.id, row_id=row.id,
        detail=f"Assigned '{story.slug}' to {row.page_code}",
        **request_context(request),
    )
    await db.commit()
    return RowMutationResponse(row=RowOut.model_validate(row), timing=timing.as_dict())
