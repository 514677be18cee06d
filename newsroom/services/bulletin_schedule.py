"""
Daily bulletin schedule.

``auto_generate_bulletins`` fills a day with the station's regular bulletins,
each created in PLANNING with the standard rundown template. Slots already
taken on that date are left alone, so running it again is harmless.
"""
import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.models.bulletin import Bulletin, BulletinStatus
from newsroom.models.user import User
from newsroom.services.rundown_template import generate_rundown_template
from newsroom.services.time_codec import parse_time_of_day_to_seconds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleSlot:
    start_time: str
    title: str
    planned_duration_secs: int = 1800


DAILY_SCHEDULE: tuple[ScheduleSlot, ...] = (
    ScheduleSlot("06:00", "6AM News"),
    ScheduleSlot("07:00", "7AM News"),
    ScheduleSlot("08:00", "8AM News"),
    ScheduleSlot("09:00", "9AM News"),
    ScheduleSlot("11:00", "11AM News"),
    ScheduleSlot("12:00", "12PM News"),
    ScheduleSlot("13:00", "1PM News"),
    ScheduleSlot("15:00", "3PM News"),
    ScheduleSlot("17:00", "5PM News", 2700),
    ScheduleSlot("19:00", "7PM News", 3600),
    ScheduleSlot("21:00", "9PM News"),
    ScheduleSlot("22:00", "10PM News"),
    ScheduleSlot("23:00", "11PM News"),
)


async def auto_generate_bulletins(
    db: AsyncSession,
    air_date: date,
    user: User,
    schedule: tuple[ScheduleSlot, ...] = DAILY_SCHEDULE,
) -> dict:
    """Create the scheduled bulletins missing on ``air_date``.

    Returns ``{"created": int, "skipped": int, "bulletins": [Bulletin, ...]}``.
    Trashed bulletins still hold their slot.
    """
    result = await db.execute(select(Bulletin.start_time).where(Bulletin.air_date == air_date))
    taken = {parse_time_of_day_to_seconds(start) for start in result.scalars().all()}

    created: list[Bulletin] = []
    skipped = 0
    for slot in schedule:
        if parse_time_of_day_to_seconds(slot.start_time) in taken:
            skipped += 1
            continue
        bulletin = Bulletin(
            title=slot.title,
            air_date=air_date,
            start_time=slot.start_time,
            planned_duration_secs=slot.planned_duration_secs,
            status=BulletinStatus.PLANNING,
            producer_id=user.id,
            created_by=user.id,
        )
        db.add(bulletin)
        await db.flush()
        await generate_rundown_template(db, bulletin.id, user.id)
        created.append(bulletin)

    logger.info("Auto-generated %d bulletins for %s (%d skipped)", len(created), air_date, skipped)
    return {"created": len(created), "skipped": skipped, "bulletins": created}
