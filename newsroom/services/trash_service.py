"""Trash: soft-deleted bulletins and rows, restorable for TRASH_RETENTION_DAYS."""
import logging
import math
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.config import settings
from newsroom.core.exceptions import NotFoundError
from newsroom.models.bulletin import Bulletin
from newsroom.models.row_segment import RowSegment
from newsroom.models.rundown_row import RundownRow
from newsroom.services.rundown_service import get_bulletin, get_row, restore_row
from newsroom.services.timing_engine import recalculate_timing

logger = logging.getLogger(__name__)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def retention_cutoff(now: datetime | None = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=settings.TRASH_RETENTION_DAYS)


def days_left(deleted_at: datetime, now: datetime | None = None) -> int:
    now = now or datetime.now(timezone.utc)
    expires = _aware(deleted_at) + timedelta(days=settings.TRASH_RETENTION_DAYS)
    return max(0, math.ceil((expires - now) / timedelta(days=1)))


async def list_trash(db: AsyncSession, now: datetime | None = None) -> dict:
    now = now or datetime.now(timezone.utc)
    cutoff = retention_cutoff(now)

    bulletins = (
        await db.execute(
            select(Bulletin)
            .where(Bulletin.deleted_at.is_not(None), Bulletin.deleted_at > cutoff)
            .order_by(Bulletin.deleted_at.desc())
        )
    ).scalars().all()

    rows = (
        await db.execute(
            select(RundownRow, Bulletin.title)
            .join(Bulletin, RundownRow.bulletin_id == Bulletin.id)
            .where(RundownRow.deleted_at.is_not(None), RundownRow.deleted_at > cutoff)
            .order_by(RundownRow.deleted_at.desc())
        )
    ).all()

    return {
        "bulletins": [
            {
                "id": str(b.id),
                "type": "bulletin",
                "title": b.title,
                "air_date": b.air_date.isoformat() if b.air_date else None,
                "start_time": b.start_time,
                "status": b.status.value,
                "deleted_at": _aware(b.deleted_at).isoformat(),
                "deleted_by": str(b.deleted_by) if b.deleted_by else None,
                "days_left": days_left(b.deleted_at, now),
            }
            for b in bulletins
        ],
        "rows": [
            {
                "id": str(r.id),
                "type": "row",
                "slug": r.slug,
                "page_code": r.page_code,
                "bulletin_id": str(r.bulletin_id),
                "bulletin_title": title,
                "deleted_at": _aware(r.deleted_at).isoformat(),
                "deleted_by": str(r.deleted_by) if r.deleted_by else None,
                "days_left": days_left(r.deleted_at, now),
            }
            for r, title in rows
        ],
    }


async def restore_item(db: AsyncSession, kind: str, item_id: uuid.UUID) -> dict:
    """Restore a trashed bulletin or row. Rows go back to the end of their bulletin."""
    if kind == "bulletin":
        bulletin = await get_bulletin(db, item_id, include_deleted=True)
        if not bulletin.is_deleted:
            raise NotFoundError("Bulletin is not in the trash")
        bulletin.deleted_at = None
        bulletin.deleted_by = None
        await db.flush()
        timing = await recalculate_timing(db, bulletin.id)
        logger.info("Restored bulletin %s", bulletin.id)
        return {"type": "bulletin", "id": str(bulletin.id), "timing": timing.as_dict()}

    row = await get_row(db, item_id, include_deleted=True)
    if not row.is_deleted:
        raise NotFoundError("Row is not in the trash")
    timing = await restore_row(db, row)
    logger.info("Restored row %s into bulletin %s", row.id, row.bulletin_id)
    return {"type": "row", "id": str(row.id), "timing": timing.as_dict()}


async def delete_permanently(db: AsyncSession, kind: str, item_id: uuid.UUID) -> dict:
    """Hard-delete one trashed bulletin (with its rows and segments) or one trashed row.

    Removing a row from a live bulletin recalculates that bulletin; ``timing`` is
    ``None`` otherwise.
    """
    if kind == "bulletin":
        bulletin = await get_bulletin(db, item_id, include_deleted=True)
        if not bulletin.is_deleted:
            raise NotFoundError("Bulletin is not in the trash")
        title = bulletin.title
        row_ids = select(RundownRow.id).where(RundownRow.bulletin_id == bulletin.id)
        await db.execute(
            delete(RowSegment)
            .where(RowSegment.row_id.in_(row_ids))
            .execution_options(synchronize_session="fetch")
        )
        await db.execute(
            delete(RundownRow)
            .where(RundownRow.bulletin_id == bulletin.id)
            .execution_options(synchronize_session="fetch")
        )
        await db.execute(
            delete(Bulletin).where(Bulletin.id == bulletin.id).execution_options(synchronize_session="fetch")
        )
        logger.info("Permanently deleted bulletin %s (%s)", item_id, title)
        return {"type": "bulletin", "id": str(item_id), "timing": None}

    row = await get_row(db, item_id, include_deleted=True)
    if not row.is_deleted:
        raise NotFoundError("Row is not in the trash")
    bulletin_id = row.bulletin_id
    await db.execute(
        delete(RowSegment).where(RowSegment.row_id == row.id).execution_options(synchronize_session="fetch")
    )
    await db.execute(
        delete(RundownRow).where(RundownRow.id == row.id).execution_options(synchronize_session="fetch")
    )
    logger.info("Permanently deleted row %s from bulletin %s", item_id, bulletin_id)

    bulletin = await get_bulletin(db, bulletin_id, include_deleted=True)
    timing = None if bulletin.is_deleted else await recalculate_timing(db, bulletin_id)
    return {"type": "row", "id": str(item_id), "timing": timing.as_dict() if timing else None}


async def purge_expired(db: AsyncSession, now: datetime | None = None) -> dict:
    """Hard-delete trash older than the retention window."""
    cutoff = retention_cutoff(now)

    rows_result = await db.execute(
        delete(RundownRow)
        .where(and_(RundownRow.deleted_at.is_not(None), RundownRow.deleted_at < cutoff))
        .returning(RundownRow.id)
        .execution_options(synchronize_session=False)
    )
    purged_rows = len(rows_result.all())

    bulletins_result = await db.execute(
        delete(Bulletin)
        .where(and_(Bulletin.deleted_at.is_not(None), Bulletin.deleted_at < cutoff))
        .returning(Bulletin.id)
        .execution_options(synchronize_session=False)
    )
    purged_bulletins = len(bulletins_result.all())

    logger.info("Trash purge: %d bulletins, %d rows", purged_bulletins, purged_rows)
    return {"bulletins": purged_bulletins, "rows": purged_rows}
