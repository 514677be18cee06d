"""
Rundown timing engine: the single authoritative recomputation of row and
bulletin timing.

``compute_timing`` is a pure fold over the ordered rows of one bulletin.
``recalculate_timing`` loads a bulletin under a row lock, runs the fold and
writes the results back. It must be called after every insert, delete,
duration edit, reorder or pool assignment; calling it again with no
intervening change yields identical results.
"""
import logging
import uuid
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.config import settings
from newsroom.core.exceptions import NotFoundError
from newsroom.models.bulletin import Bulletin
from newsroom.models.rundown_row import RundownRow, RowType
from newsroom.services.time_codec import (
    Number,
    parse_time_of_day_to_seconds,
    seconds_to_clock_duration,
    seconds_to_time_of_day,
)

logger = logging.getLogger(__name__)


class TimedRow(Protocol):
    id: Any
    est_duration_secs: Number | None
    actual_duration_secs: Number | None
    row_type: Any


@dataclass(frozen=True)
class RowTiming:
    id: Any
    est_duration_secs: Number
    actual_duration_secs: Number | None
    front_time_secs: Number
    cume_time_secs: Number
    est_duration_display: str
    actual_duration_display: str
    front_time_display: str
    cume_time_display: str


@dataclass(frozen=True)
class TimingTotals:
    total_est_duration_secs: Number
    total_actual_duration_secs: Number | None
    total_commercial_secs: Number
    timing_variance_secs: Number
    variance_display: str


@dataclass(frozen=True)
class TimingResult:
    rows: tuple[RowTiming, ...]
    totals: TimingTotals

    def as_dict(self) -> dict:
        rows = []
        for timing in self.rows:
            data = asdict(timing)
            data["id"] = str(timing.id)
            rows.append(data)
        return {"rows": rows, "totals": asdict(self.totals)}


def effective_duration(row: TimedRow) -> Number:
    """Actual duration when the row has been timed, else the estimate."""
    if row.actual_duration_secs is not None:
        return row.actual_duration_secs
    return row.est_duration_secs or 0


def format_variance(variance_secs: Number) -> str:
    if variance_secs >= 0:
        return f"Under {seconds_to_clock_duration(variance_secs)}"
    return f"Over {seconds_to_clock_duration(abs(variance_secs))}"


def _is_commercial(row_type: Any) -> bool:
    return row_type == RowType.COMMERCIAL or row_type == RowType.COMMERCIAL.value


def compute_timing(
    start_time: str | None,
    planned_duration_secs: Number | None,
    rows: Iterable[TimedRow],
) -> TimingResult:
    """Fold ordered rows into front/cume times and bulletin totals.

    ``front_time_secs`` of a row is the bulletin start plus the cume of the row
    before it; ``cume_time_secs`` runs through and including the row itself.
    """
    bulletin_start_secs = parse_time_of_day_to_seconds(start_time)
    if not planned_duration_secs:
        planned_duration_secs = settings.DEFAULT_PLANNED_DURATION_SECS

    cume_secs: Number = 0
    total_est_secs: Number = 0
    total_actual_secs: Number = 0
    total_commercial_secs: Number = 0
    any_actual = False
    timings: list[RowTiming] = []

    for row in rows:
        est = row.est_duration_secs or 0
        actual = row.actual_duration_secs
        duration = effective_duration(row)

        front_time_secs = bulletin_start_secs + cume_secs
        cume_secs += duration

        if actual is not None:
            any_actual = True
            total_actual_secs += actual
        # COMMERCIAL rows feed total_commercial only
        if _is_commercial(row.row_type):
            total_commercial_secs += duration
        else:
            total_est_secs += est

        timings.append(
            RowTiming(
                id=row.id,
                est_duration_secs=est,
                actual_duration_secs=actual,
                front_time_secs=front_time_secs,
                cume_time_secs=cume_secs,
                est_duration_display=seconds_to_clock_duration(est),
                actual_duration_display=seconds_to_clock_duration(actual) if actual is not None else "",
                front_time_display=seconds_to_time_of_day(front_time_secs),
                cume_time_display=seconds_to_clock_duration(cume_secs),
            )
        )

    variance = planned_duration_secs - (total_est_secs + total_commercial_secs)
    totals = TimingTotals(
        total_est_duration_secs=total_est_secs,
        total_actual_duration_secs=total_actual_secs if any_actual else None,
        total_commercial_secs=total_commercial_secs,
        timing_variance_secs=variance,
        variance_display=format_variance(variance),
    )
    return TimingResult(rows=tuple(timings), totals=totals)


async def load_rundown(db: AsyncSession, bulletin_id: uuid.UUID) -> list[RundownRow]:
    """Live rows of a bulletin in running order."""
    result = await db.execute(
        select(RundownRow)
        .where(RundownRow.bulletin_id == bulletin_id, RundownRow.deleted_at.is_(None))
        .order_by(RundownRow.sort_order, RundownRow.created_at, RundownRow.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def recalculate_timing(db: AsyncSession, bulletin_id: uuid.UUID) -> TimingResult:
    """Recompute and persist timing for one bulletin.

    The bulletin row is selected FOR UPDATE so concurrent recalculations of the
    same bulletin serialize on it until the surrounding transaction ends. The
    session is flushed, not committed; persistence errors propagate.
    """
    result = await db.execute(
        select(Bulletin)
        .where(Bulletin.id == bulletin_id, Bulletin.deleted_at.is_(None))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    bulletin = result.scalar_one_or_none()
    if bulletin is None:
        raise NotFoundError("Bulletin not found")

    rows = await load_rundown(db, bulletin.id)
    timing = compute_timing(bulletin.start_time, bulletin.planned_duration_secs, rows)

    for row, row_timing in zip(rows, timing.rows):
        row.front_time_secs = row_timing.front_time_secs
        row.cume_time_secs = row_timing.cume_time_secs

    totals = timing.totals
    bulletin.total_est_duration_secs = totals.total_est_duration_secs
    bulletin.total_actual_duration_secs = totals.total_actual_duration_secs
    bulletin.total_commercial_secs = totals.total_commercial_secs
    bulletin.timing_variance_secs = totals.timing_variance_secs

    await db.flush()
    logger.debug(
        "Recalculated bulletin %s: %d rows, variance %s",
        bulletin_id, len(rows), totals.variance_display,
    )
    return timing
