import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.exceptions import BulletinLockedError, ConflictError, NotFoundError
from newsroom.models.bulletin import Bulletin
from newsroom.models.pool import Pool, PoolStory, StoryStatus
from newsroom.models.rundown_row import RowStatus, RowType
from newsroom.models.user import User
from newsroom.services.rundown_service import (
    approve_row,
    assign_pool_story,
    ensure_unlocked,
    get_bulletin,
    insert_row,
    next_page_code,
    next_sort_order,
    page_number_of,
    reorder_rows,
    restore_row,
    soft_delete_bulletin,
    soft_delete_row,
    update_row,
)
from newsroom.services.timing_engine import load_rundown


async def _insert(db, bulletin, user, slug, est=90, block="A", **kwargs):
    row, timing = await insert_row(
        db, bulletin, user, {"block_code": block, "slug": slug, "est_duration_secs": est}, **kwargs
    )
    return row, timing


def test_next_page_code():
    assert next_page_code("A", []) == "A1"
    assert next_page_code("A", ["A1", "A2", "B7", None]) == "A3"
    assert next_page_code("B", ["A1", "B0", "B1"]) == "B2"
    assert next_page_code("A", ["A9", "A10"]) == "A11"
    assert next_page_code("A", ["AB1"]) == "A1"


def test_page_number_of():
    assert page_number_of("A12") == 12
    assert page_number_of("Z") is None
    assert page_number_of(None) is None


@pytest.mark.asyncio
async def test_next_sort_order_empty_bulletin(db_session: AsyncSession, bulletin: Bulletin):
    assert await next_sort_order(db_session, bulletin.id) == 0


@pytest.mark.asyncio
async def test_insert_appends_and_recalculates(db_session: AsyncSession, bulletin: Bulletin, admin_user: User):
    first, _ = await _insert(db_session, bulletin, admin_user, "FIRST")
    second, timing = await _insert(db_session, bulletin, admin_user, "SECOND", est=60)

    assert (first.sort_order, second.sort_order) == (0, 1)
    assert (first.page_code, second.page_code) == ("A1", "A2")
    assert second.page_number == 2
    assert second.front_time_secs == 19 * 3600 + 90
    assert timing.totals.total_est_duration_secs == 150
    assert bulletin.total_est_duration_secs == 150


@pytest.mark.asyncio
async def test_insert_uses_default_duration(db_session: AsyncSession, bulletin: Bulletin, admin_user: User):
    row, _ = await insert_row(db_session, bulletin, admin_user, {"block_code": "A", "slug": "X"})
    assert row.est_duration_secs == 90


@pytest.mark.asyncio
async def test_insert_after_shifts_following_rows(db_session: AsyncSession, bulletin: Bulletin, admin_user: User):
    a, _ = await _insert(db_session, bulletin, admin_user, "A")
    b, _ = await _insert(db_session, bulletin, admin_user, "B")
    c, _ = await _insert(db_session, bulletin, admin_user, "C")

    ad, timing = await insert_row(
        db_session, bulletin, admin_user,
        {"block_code": "B", "slug": "BREAK", "row_type": RowType.COMMERCIAL, "est_duration_secs": 180},
        insert_after=b.id,
    )

    rows = await load_rundown(db_session, bulletin.id)
    assert [r.slug for r in rows] == ["A", "B", "BREAK", "C"]
    assert [r.sort_order for r in rows] == [0, 1, 2, 3]
    assert ad.front_time_secs == 19 * 3600 + 180
    assert c.front_time_secs == 19 * 3600 + 360
    assert timing.totals.timing_variance_secs == 1350


@pytest.mark.asyncio
async def test_insert_at_position(db_session: AsyncSession, bulletin: Bulletin, admin_user: User):
    await _insert(db_session, bulletin, admin_user, "A")
    await _insert(db_session, bulletin, admin_user, "B")

    await _insert(db_session, bulletin, admin_user, "TOP", insert_at_position=0)
    await _insert(db_session, bulletin, admin_user, "END", insert_at_position=99)

    rows = await load_rundown(db_session, bulletin.id)
    assert [r.slug for r in rows] == ["TOP", "A", "B", "END"]
    assert [r.sort_order for r in rows] == [0, 1, 2, 3]


@pytest.mark.asyncio
async def test_insert_after_unknown_row_appends(db_session: AsyncSession, bulletin: Bulletin, admin_user: User):
    await _insert(db_session, bulletin, admin_user, "A")
    row, _ = await _insert(db_session, bulletin, admin_user, "B", insert_after=uuid.uuid4())
    assert row.sort_order == 1


@pytest.mark.asyncio
async def test_update_row_recalculates_only_for_durations(
    db_session: AsyncSession, bulletin: Bulletin, admin_user: User
):
    a, _ = await _insert(db_session, bulletin, admin_user, "A")
    b, _ = await _insert(db_session, bulletin, admin_user, "B")

    assert await update_row(db_session, a, {"slug": "RENAMED"}, admin_user) is None
    assert a.slug == "RENAMED"

    timing = await update_row(db_session, a, {"actual_duration_secs": 120}, admin_user)
    assert timing is not None
    assert b.front_time_secs == 19 * 3600 + 120
    assert bulletin.total_actual_duration_secs == 120
    assert a.last_modified_by == admin_user.id


@pytest.mark.asyncio
async def test_reorder_renumbers_contiguously(db_session: AsyncSession, bulletin: Bulletin, admin_user: User):
    a, _ = await _insert(db_session, bulletin, admin_user, "A", est=30)
    b, _ = await _insert(db_session, bulletin, admin_user, "B", est=60)
    c, _ = await _insert(db_session, bulletin, admin_user, "C", est=90)

    timing = await reorder_rows(
        db_session, bulletin,
        [{"id": c.id, "sort_order": 0, "page_code": "A9"}, {"id": a.id, "sort_order": 10}],
        admin_user,
    )

    rows = await load_rundown(db_session, bulletin.id)
    assert [r.slug for r in rows] == ["C", "B", "A"]
    assert [r.sort_order for r in rows] == [0, 1, 2]
    assert c.page_code == "A9" and c.page_number == 9
    assert [t.id for t in timing.rows] == [c.id, b.id, a.id]
    assert a.front_time_secs == 19 * 3600 + 150


@pytest.mark.asyncio
async def test_partial_reorder_puts_moved_row_before_tied_row(
    db_session: AsyncSession, bulletin: Bulletin, admin_user: User
):
    a, _ = await _insert(db_session, bulletin, admin_user, "A")
    b, _ = await _insert(db_session, bulletin, admin_user, "B")
    c, _ = await _insert(db_session, bulletin, admin_user, "C")

    await reorder_rows(db_session, bulletin, [{"id": a.id, "sort_order": 2}], admin_user)

    rows = await load_rundown(db_session, bulletin.id)
    assert [r.slug for r in rows] == ["B", "A", "C"]



@pytest.mark.asyncio
async def test_reorder_rejects_foreign_rows(db_session: AsyncSession, bulletin: Bulletin, admin_user: User):
    await _insert(db_session, bulletin, admin_user, "A")
    with pytest.raises(NotFoundError):
        await reorder_rows(db_session, bulletin, [{"id": uuid.uuid4(), "sort_order": 0}], admin_user)


@pytest.mark.asyncio
async def test_soft_delete_and_restore_row(db_session: AsyncSession, bulletin: Bulletin, admin_user: User):
    a, _ = await _insert(db_session, bulletin, admin_user, "A")
    b, _ = await _insert(db_session, bulletin, admin_user, "B")

    timing = await soft_delete_row(db_session, a, admin_user)
    assert a.is_deleted and a.deleted_by == admin_user.id
    assert [t.id for t in timing.rows] == [b.id]
    assert b.front_time_secs == 19 * 3600

    timing = await restore_row(db_session, a)
    assert not a.is_deleted
    assert [t.id for t in timing.rows] == [b.id, a.id]
    assert a.sort_order > b.sort_order


@pytest.mark.asyncio
async def test_restore_row_of_deleted_bulletin_conflicts(
    db_session: AsyncSession, bulletin: Bulletin, admin_user: User
):
    a, _ = await _insert(db_session, bulletin, admin_user, "A")
    await soft_delete_row(db_session, a, admin_user)
    await soft_delete_bulletin(db_session, bulletin, admin_user)

    with pytest.raises(ConflictError):
        await restore_row(db_session, a)


@pytest.mark.asyncio
async def test_get_bulletin_hides_deleted(db_session: AsyncSession, bulletin: Bulletin, admin_user: User):
    await soft_delete_bulletin(db_session, bulletin, admin_user)
    with pytest.raises(NotFoundError):
        await get_bulletin(db_session, bulletin.id)
    assert (await get_bulletin(db_session, bulletin.id, include_deleted=True)).id == bulletin.id


@pytest.mark.asyncio
async def test_approve_row(db_session: AsyncSession, bulletin: Bulletin, admin_user: User):
    a, _ = await _insert(db_session, bulletin, admin_user, "A")

    await approve_row(db_session, a, True, admin_user)
    assert a.final_approval and a.status == RowStatus.APPROVED
    assert a.approved_by == admin_user.id and a.approved_at is not None

    await approve_row(db_session, a, False, admin_user)
    assert not a.final_approval and a.status == RowStatus.READY
    assert a.approved_by is None


@pytest.mark.asyncio
async def test_ensure_unlocked(bulletin: Bulletin, admin_user: User, editor_user: User):
    bulletin.is_locked = True
    bulletin.locked_by = admin_user.id

    ensure_unlocked(bulletin, admin_user)
    with pytest.raises(BulletinLockedError):
        ensure_unlocked(bulletin, editor_user)


@pytest.mark.asyncio
async def test_assign_pool_story(db_session: AsyncSession, bulletin: Bulletin, admin_user: User):
    pool = Pool(name="National", code="NAT")
    db_session.add(pool)
    await db_session.flush()
    story = PoolStory(pool_id=pool.id, slug="FLOODS", est_duration_secs=120, status=StoryStatus.READY, description="Wires")
    db_session.add(story)
    await db_session.flush()
    await _insert(db_session, bulletin, admin_user, "LEAD")

    row, timing = await assign_pool_story(db_session, story, bulletin, admin_user, block_code="B")

    assert row.slug == "FLOODS"
    assert row.row_type == RowType.STORY
    assert row.status == RowStatus.READY
    assert row.notes == "Wires"
    assert row.source_pool_id == pool.id
    assert row.page_code == "B1"
    assert row.front_time_secs == 19 * 3600 + 90
    assert timing.totals.total_est_duration_secs == 210
    assert story.status == StoryStatus.ASSIGNED
    assert story.used_in_bulletin_id == bulletin.id
    assert story.used_in_row_id == row.id
    assert story.used_at is not None

    with pytest.raises(ConflictError):
        await assign_pool_story(db_session, story, bulletin, admin_user, block_code="B")


@pytest.mark.asyncio
async def test_assign_draft_story_makes_draft_row(db_session: AsyncSession, bulletin: Bulletin, admin_user: User):
    pool = Pool(name="Sports", code="SPT")
    db_session.add(pool)
    await db_session.flush()
    story = PoolStory(pool_id=pool.id, slug="DERBY")
    db_session.add(story)
    await db_session.flush()

    row, _ = await assign_pool_story(db_session, story, bulletin, admin_user, block_code="Z")
    assert row.status == RowStatus.DRAFT
    assert row.est_duration_secs == 90


@pytest.mark.asyncio
async def test_assign_to_locked_bulletin(
    db_session: AsyncSession, bulletin: Bulletin, admin_user: User, editor_user: User
):
    pool = Pool(name="Reserve", code="RES")
    db_session.add(pool)
    await db_session.flush()
    story = PoolStory(pool_id=pool.id, slug="SPARE")
    db_session.add(story)
    bulletin.is_locked = True
    bulletin.locked_by = admin_user.id
    await db_session.flush()

    with pytest.raises(BulletinLockedError):
        await assign_pool_story(db_session, story, bulletin, editor_user, block_code="A")
    assert story.status == StoryStatus.DRAFT
    assert story.used_in_bulletin_id is None
