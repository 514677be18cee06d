"""Rundown service: row and bulletin mutations that keep running-order timing current.

Every operation here flushes but never commits; the request handler owns the
transaction. Operations that change row order, durations or the live row set
finish with ``recalculate_timing`` and return its result.
"""
import logging
import re
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.config import settings
from newsroom.core.exceptions import BulletinLockedError, ConflictError, NotFoundError
from newsroom.models.bulletin import Bulletin
from newsroom.models.pool import PoolStory, StoryStatus
from newsroom.models.rundown_row import RundownRow, RowStatus, RowType
from newsroom.models.user import User
from newsroom.services.timing_engine import TimingResult, compute_timing, load_rundown, recalculate_timing

logger = logging.getLogger(__name__)

TIMING_FIELDS = frozenset({"est_duration_secs", "actual_duration_secs"})

_PAGE_NUMBER_RE = re.compile(r"(\d+)$")


async def get_bulletin(
    db: AsyncSession,
    bulletin_id: uuid.UUID,
    *,
    for_update: bool = False,
    include_deleted: bool = False,
) -> Bulletin:
    stmt = select(Bulletin).where(Bulletin.id == bulletin_id)
    if not include_deleted:
        stmt = stmt.where(Bulletin.deleted_at.is_(None))
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(stmt)
    bulletin = result.scalar_one_or_none()
    if bulletin is None:
        raise NotFoundError("Bulletin not found")
    return bulletin


async def get_row(db: AsyncSession, row_id: uuid.UUID, *, include_deleted: bool = False) -> RundownRow:
    stmt = select(RundownRow).where(RundownRow.id == row_id)
    if not include_deleted:
        stmt = stmt.where(RundownRow.deleted_at.is_(None))
    result = await db.execute(stmt)
    row = result.scalar_one_or_none()
    if row is None:
        raise NotFoundError("Row not found")
    return row


def ensure_unlocked(bulletin: Bulletin, user: User) -> None:
    if bulletin.is_locked_for(user.id):
        raise BulletinLockedError()


async def next_sort_order(db: AsyncSession, bulletin_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.max(RundownRow.sort_order)).where(
            RundownRow.bulletin_id == bulletin_id, RundownRow.deleted_at.is_(None)
        )
    )
    max_sort = result.scalar()
    return 0 if max_sort is None else max_sort + 1


def page_number_of(page_code: str | None) -> int | None:
    if not page_code:
        return None
    match = _PAGE_NUMBER_RE.search(page_code)
    return int(match.group(1)) if match else None


def next_page_code(block_code: str, existing_codes: Iterable[str | None]) -> str:
    """``{block}{n}`` with n one past the highest page already used in that block."""
    highest = 0
    for code in existing_codes:
        if not code or not code.startswith(block_code):
            continue
        suffix = code[len(block_code):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{block_code}{highest + 1}"


async def shift_sort_orders(db: AsyncSession, bulletin_id: uuid.UUID, from_order: int) -> None:
    """Open a gap at ``from_order`` by moving every later live row down one place."""
    await db.execute(
        update(RundownRow)
        .where(
            RundownRow.bulletin_id == bulletin_id,
            RundownRow.deleted_at.is_(None),
            RundownRow.sort_order >= from_order,
        )
        .values(sort_order=RundownRow.sort_order + 1)
        .execution_options(synchronize_session="fetch")
    )


async def resolve_insert_position(
    db: AsyncSession,
    bulletin_id: uuid.UUID,
    *,
    insert_after: uuid.UUID | None = None,
    insert_at_position: int | None = None,
) -> int:
    """Pick the sort order for a new row and make room for it."""
    if insert_after is not None:
        result = await db.execute(
            select(RundownRow.sort_order).where(
                RundownRow.id == insert_after,
                RundownRow.bulletin_id == bulletin_id,
                RundownRow.deleted_at.is_(None),
            )
        )
        after_order = result.scalar_one_or_none()
        if after_order is not None:
            position = after_order + 1
            await shift_sort_orders(db, bulletin_id, position)
            return position
        logger.info("insert_after row %s not in bulletin %s, appending", insert_after, bulletin_id)
        return await next_sort_order(db, bulletin_id)

    if insert_at_position is not None:
        end = await next_sort_order(db, bulletin_id)
        position = min(insert_at_position, end)
        await shift_sort_orders(db, bulletin_id, position)
        return position

    return await next_sort_order(db, bulletin_id)


async def insert_row(
    db: AsyncSession,
    bulletin: Bulletin,
    user: User,
    values: dict,
    *,
    insert_after: uuid.UUID | None = None,
    insert_at_position: int | None = None,
) -> tuple[RundownRow, TimingResult]:
    """Insert a row into the running order and recalculate the bulletin."""
    block_code = values.pop("block_code")
    existing = await db.execute(
        select(RundownRow.page_code).where(
            RundownRow.bulletin_id == bulletin.id, RundownRow.deleted_at.is_(None)
        )
    )
    page_code = next_page_code(block_code, existing.scalars().all())
    sort_order = await resolve_insert_position(
        db, bulletin.id, insert_after=insert_after, insert_at_position=insert_at_position
    )

    values.setdefault("est_duration_secs", settings.DEFAULT_STORY_DURATION_SECS)
    row = RundownRow(
        bulletin_id=bulletin.id,
        block_code=block_code,
        page_code=page_code,
        page_number=page_number_of(page_code),
        sort_order=sort_order,
        created_by=user.id,
        last_modified_by=user.id,
        **values,
    )
    db.add(row)
    await db.flush()

    timing = await recalculate_timing(db, bulletin.id)
    logger.info("Inserted row %s (%s) into bulletin %s at %d", row.id, page_code, bulletin.id, sort_order)
    return row, timing


async def update_row(db: AsyncSession, row: RundownRow, changes: dict, user: User) -> TimingResult | None:
    """Apply field changes; recalculates only when a duration changed."""
    for field, value in changes.items():
        setattr(row, field, value)
    row.last_modified_by = user.id
    await db.flush()

    if TIMING_FIELDS & changes.keys():
        return await recalculate_timing(db, row.bulletin_id)
    return None


async def reorder_rows(
    db: AsyncSession,
    bulletin: Bulletin,
    ordering: list[dict],
    user: User,
) -> TimingResult:
    """Apply a new running order and renumber live rows to ``0..n-1``.

    ``ordering`` holds ``{"id", "sort_order", "page_code"?, "block_code"?}`` items.
    Rows not mentioned keep their current ``sort_order`` as their sort key. When a
    requested index equals an unmentioned row's current order, the requested row
    goes first: moving A from 0 to 2 in A, B, C on its own gives B, A, C.
    """
    rows = await load_rundown(db, bulletin.id)
    by_id = {row.id: row for row in rows}

    requested: dict[uuid.UUID, int] = {}
    for item in ordering:
        row = by_id.get(item["id"])
        if row is None:
            raise NotFoundError(f"Row {item['id']} not found in bulletin")
        requested[row.id] = item["sort_order"]
        if item.get("page_code"):
            row.page_code = item["page_code"]
            row.page_number = page_number_of(item["page_code"])
        if item.get("block_code"):
            row.block_code = item["block_code"]

    def _key(indexed):
        index, row = indexed
        if row.id in requested:
            return (requested[row.id], 0, index)
        return (row.sort_order, 1, index)

    for position, (_, row) in enumerate(sorted(enumerate(rows), key=_key)):
        if row.sort_order != position or row.id in requested:
            row.sort_order = position
            row.last_modified_by = user.id
    await db.flush()

    return await recalculate_timing(db, bulletin.id)


async def soft_delete_row(db: AsyncSession, row: RundownRow, user: User) -> TimingResult:
    row.deleted_at = datetime.now(timezone.utc)
    row.deleted_by = user.id
    row.last_modified_by = user.id
    await db.flush()
    return await recalculate_timing(db, row.bulletin_id)


async def restore_row(db: AsyncSession, row: RundownRow) -> TimingResult:
    """Bring a trashed row back at the end of its bulletin's running order."""
    bulletin = await get_bulletin(db, row.bulletin_id, include_deleted=True)
    if bulletin.is_deleted:
        raise ConflictError("Restore the bulletin before restoring its rows")
    row.sort_order = await next_sort_order(db, row.bulletin_id)
    row.deleted_at = None
    row.deleted_by = None
    await db.flush()
    return await recalculate_timing(db, row.bulletin_id)


async def soft_delete_bulletin(db: AsyncSession, bulletin: Bulletin, user: User) -> None:
    bulletin.deleted_at = datetime.now(timezone.utc)
    bulletin.deleted_by = user.id
    await db.flush()


async def approve_row(db: AsyncSession, row: RundownRow, approved: bool, user: User) -> RundownRow:
    row.final_approval = approved
    row.approved_by = user.id if approved else None
    row.approved_at = datetime.now(timezone.utc) if approved else None
    row.status = RowStatus.APPROVED if approved else RowStatus.READY
    row.last_modified_by = user.id
    await db.flush()
    return row


async def assign_pool_story(
    db: AsyncSession,
    story: PoolStory,
    bulletin: Bulletin,
    user: User,
    *,
    block_code: str,
    insert_after: uuid.UUID | None = None,
    insert_at_position: int | None = None,
) -> tuple[RundownRow, TimingResult]:
    """Turn a pool story into a STORY row of ``bulletin``."""
    if story.used_in_bulletin_id is not None or story.status in (StoryStatus.ASSIGNED, StoryStatus.USED):
        raise ConflictError("Story is already assigned to a bulletin")
    ensure_unlocked(bulletin, user)

    values = {
        "block_code": block_code,
        "row_type": RowType.STORY,
        "slug": story.slug,
        "segment": story.segment,
        "reporter_id": story.reporter_id,
        "category_id": story.category_id,
        "est_duration_secs": story.est_duration_secs,
        "status": RowStatus.READY if story.status == StoryStatus.READY else RowStatus.DRAFT,
        "notes": story.description,
        "source_pool_id": story.pool_id,
    }
    row, timing = await insert_row(
        db, bulletin, user, values,
        insert_after=insert_after, insert_at_position=insert_at_position,
    )

    story.status = StoryStatus.ASSIGNED
    story.used_in_bulletin_id = bulletin.id
    story.used_in_row_id = row.id
    story.used_at = datetime.now(timezone.utc)
    await db.flush()
    return row, timing


async def rundown_snapshot(db: AsyncSession, bulletin: Bulletin) -> tuple[list[RundownRow], TimingResult]:
    """Live rows plus their timing, computed without writing anything back."""
    rows = await load_rundown(db, bulletin.id)
    return rows, compute_timing(bulletin.start_time, bulletin.planned_duration_secs, rows)
