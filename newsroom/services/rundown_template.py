"""
Standard rundown template.

Blocks A-D make up the bulletin proper: opening titles and welcome, then
editorial blocks separated by commercial breaks, each followed by a
"welcome back" link. Block Z holds spare sports/special stories.
"""
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.models.rundown_row import RundownRow, RowStatus, RowType
from newsroom.services.rundown_service import next_sort_order
from newsroom.services.timing_engine import recalculate_timing

logger = logging.getLogger(__name__)

BREAK_LINK_SECS = 8
CLOSING_SALUTATION_SECS = 15


@dataclass(frozen=True)
class TemplateOptions:
    opening_duration_secs: int = 15
    welcome_duration_secs: int = 12
    closing_duration_secs: int = 45
    commercial_duration_secs: int = 180
    story_duration_secs: int = 90


@dataclass(frozen=True)
class TemplateRow:
    block: str
    page: int
    row_type: RowType
    slug: str
    duration_secs: int


def build_template(options: TemplateOptions = TemplateOptions()) -> list[TemplateRow]:
    story = options.story_duration_secs

    def stories(block: str, pages: range) -> list[TemplateRow]:
        return [TemplateRow(block, page, RowType.STORY, "", story) for page in pages]

    def commercial_break(block: str, number: int) -> list[TemplateRow]:
        return [
            TemplateRow(block, 0, RowType.COMMERCIAL, f"COMMERCIAL BREAK {number:02d}", options.commercial_duration_secs),
            TemplateRow(block, 1, RowType.BREAK_LINK, f"WELCOME BACK {number}", BREAK_LINK_SECS),
        ]

    return [
        TemplateRow("A", 1, RowType.OPEN, "OPENING TITLES", options.opening_duration_secs),
        TemplateRow("A", 2, RowType.WELCOME, "WELCOME", options.welcome_duration_secs),
        *stories("A", range(3, 8)),
        *commercial_break("B", 1),
        *stories("B", range(2, 4)),
        *commercial_break("C", 2),
        *stories("C", range(2, 4)),
        *commercial_break("D", 3),
        *stories("D", range(2, 6)),
        TemplateRow("D", 6, RowType.WELCOME, "CLOSING SALUTATION", CLOSING_SALUTATION_SECS),
        TemplateRow("D", 7, RowType.CLOSE, "CLOSING TITLES", options.closing_duration_secs),
        *stories("Z", range(1, 5)),
    ]


async def generate_rundown_template(
    db: AsyncSession,
    bulletin_id: uuid.UUID,
    user_id: uuid.UUID | None,
    options: TemplateOptions = TemplateOptions(),
) -> int:
    """Append the standard template rows to a bulletin; returns the number of rows created."""
    template = build_template(options)
    sort_order = await next_sort_order(db, bulletin_id)
    break_number = 0

    for item in template:
        is_story = item.row_type == RowType.STORY
        if item.row_type == RowType.COMMERCIAL:
            break_number += 1
        db.add(
            RundownRow(
                bulletin_id=bulletin_id,
                page_code=f"{item.block}{item.page}",
                block_code=item.block,
                page_number=item.page,
                sort_order=sort_order,
                row_type=item.row_type,
                slug=item.slug,
                segment="LIVE" if is_story else None,
                est_duration_secs=item.duration_secs,
                status=RowStatus.BLANK if is_story else RowStatus.READY,
                break_number=break_number if item.row_type == RowType.COMMERCIAL else None,
                created_by=user_id,
                last_modified_by=user_id,
            )
        )
        sort_order += 1

    await db.flush()
    await recalculate_timing(db, bulletin_id)
    logger.info("Generated %d template rows for bulletin %s", len(template), bulletin_id)
    return len(template)
