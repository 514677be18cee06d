import pytest
from httpx import AsyncClient

from newsroom.models.bulletin import Bulletin

BULLETIN = {
    "title": "Morning Bulletin",
    "air_date": "2026-10-18",
    "start_time": "06:00",
    "planned_duration_secs": 1800,
}


@pytest.mark.asyncio
async def test_create_bulletin_with_template(client: AsyncClient, producer_headers: dict):
    response = await client.post("/api/v1/bulletins", json=BULLETIN, headers=producer_headers)
    assert response.status_code == 201
    data = response.json()

    assert data["bulletin"]["title"] == "Morning Bulletin"
    assert len(data["rows"]) == 27
    assert data["rows"][0]["page_code"] == "A1"
    assert data["rows"][0]["front_time_secs"] == 6 * 3600
    assert data["timing"]["rows"][0]["front_time_display"] == "06:00:00"
    assert data["timing"]["totals"]["total_commercial_secs"] == 540


@pytest.mark.asyncio
async def test_create_bulletin_without_template(client: AsyncClient, producer_headers: dict):
    response = await client.post(
        "/api/v1/bulletins", json={**BULLETIN, "generate_template": False}, headers=producer_headers
    )
    assert response.status_code == 201
    data = response.json()
    assert data["rows"] == []
    assert data["timing"]["totals"]["variance_display"] == "Under 30:00"


@pytest.mark.asyncio
async def test_create_bulletin_rejects_bad_start_time(client: AsyncClient, producer_headers: dict):
    response = await client.post(
        "/api/v1/bulletins", json={**BULLETIN, "start_time": "6 o'clock"}, headers=producer_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_reporter_cannot_create_bulletin(client: AsyncClient, reporter_headers: dict):
    response = await client.post("/api/v1/bulletins", json=BULLETIN, headers=reporter_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_bulletins_filters_by_date(client: AsyncClient, producer_headers: dict, bulletin: Bulletin):
    await client.post(
        "/api/v1/bulletins",
        json={**BULLETIN, "air_date": "2026-10-19", "generate_template": False},
        headers=producer_headers,
    )

    response = await client.get("/api/v1/bulletins", params={"air_date": "2026-10-18"}, headers=producer_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["bulletins"][0]["title"] == "Evening News"


@pytest.mark.asyncio
async def test_patch_start_time_recalculates(client: AsyncClient, producer_headers: dict):
    created = (await client.post("/api/v1/bulletins", json=BULLETIN, headers=producer_headers)).json()
    bulletin_id = created["bulletin"]["id"]

    response = await client.patch(
        f"/api/v1/bulletins/{bulletin_id}", json={"start_time": "07:30"}, headers=producer_headers
    )
    assert response.status_code == 200

    detail = (await client.get(f"/api/v1/bulletins/{bulletin_id}", headers=producer_headers)).json()
    assert detail["rows"][0]["front_time_secs"] == 7 * 3600 + 30 * 60
    assert detail["timing"]["rows"][0]["front_time_display"] == "07:30:00"


@pytest.mark.asyncio
async def test_lock_and_unlock(
    client: AsyncClient, auth_headers: dict, producer_headers: dict, editor_headers: dict, bulletin: Bulletin
):
    url = f"/api/v1/bulletins/{bulletin.id}/lock"

    response = await client.post(url, headers=producer_headers)
    assert response.status_code == 200
    assert response.json()["is_locked"] is True

    # Re-locking by the owner is allowed
    assert (await client.post(url, headers=producer_headers)).status_code == 200
    assert (await client.post(url, headers=auth_headers)).status_code == 409

    row = await client.post(
        f"/api/v1/bulletins/{bulletin.id}/rows", json={"block_code": "A", "slug": "X"}, headers=editor_headers
    )
    assert row.status_code == 423

    # Admin may break someone else's lock
    response = await client.delete(url, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["is_locked"] is False


@pytest.mark.asyncio
async def test_unlock_by_other_producer_is_forbidden(client: AsyncClient, auth_headers: dict, producer_headers: dict, bulletin: Bulletin):
    url = f"/api/v1/bulletins/{bulletin.id}/lock"
    await client.post(url, headers=auth_headers)

    response = await client.delete(url, headers=producer_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_bulletin_moves_it_to_trash(client: AsyncClient, auth_headers: dict, bulletin: Bulletin):
    response = await client.delete(f"/api/v1/bulletins/{bulletin.id}", headers=auth_headers)
    assert response.status_code == 204

    assert (await client.get(f"/api/v1/bulletins/{bulletin.id}", headers=auth_headers)).status_code == 404

    trash = (await client.get("/api/v1/trash", headers=auth_headers)).json()
    assert [b["id"] for b in trash["bulletins"]] == [str(bulletin.id)]
    assert trash["bulletins"][0]["days_left"] == 7

    response = await client.post(
        "/api/v1/trash/restore", json={"type": "bulletin", "id": str(bulletin.id)}, headers=auth_headers
    )
    assert response.status_code == 200
    assert (await client.get(f"/api/v1/bulletins/{bulletin.id}", headers=auth_headers)).status_code == 200


@pytest.mark.asyncio
async def test_producer_cannot_delete_bulletin(client: AsyncClient, producer_headers: dict, bulletin: Bulletin):
    response = await client.delete(f"/api/v1/bulletins/{bulletin.id}", headers=producer_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_rows_reorder_and_recalculate(client: AsyncClient, editor_headers: dict, bulletin: Bulletin):
    url = f"/api/v1/bulletins/{bulletin.id}/rows"
    first = (await client.post(url, json={"block_code": "A", "slug": "ONE", "est_duration_secs": 60}, headers=editor_headers)).json()
    second = (await client.post(url, json={"block_code": "A", "slug": "TWO", "est_duration_secs": 30}, headers=editor_headers)).json()

    assert first["row"]["page_code"] == "A1"
    assert second["row"]["front_time_secs"] == 19 * 3600 + 60
    assert second["timing"]["totals"]["total_est_duration_secs"] == 90

    response = await client.put(
        f"{url}/reorder",
        json={"rows": [{"id": second["row"]["id"], "sort_order": 0}]},
        headers=editor_headers,
    )
    assert response.status_code == 200
    timing = response.json()
    assert [r["id"] for r in timing["rows"]] == [second["row"]["id"], first["row"]["id"]]
    assert timing["rows"][1]["front_time_display"] == "19:00:30"

    response = await client.post(f"/api/v1/bulletins/{bulletin.id}/recalculate", headers=editor_headers)
    assert response.json() == timing

    rows = (await client.get(url, headers=editor_headers)).json()
    assert [r["slug"] for r in rows] == ["TWO", "ONE"]


@pytest.mark.asyncio
async def test_apply_template_endpoint(client: AsyncClient, producer_headers: dict, bulletin: Bulletin):
    response = await client.post(
        f"/api/v1/bulletins/{bulletin.id}/template",
        json={"story_duration_secs": 60},
        headers=producer_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["created"] == 27
    assert len(data["timing"]["rows"]) == 27


@pytest.mark.asyncio
async def test_auto_generate_endpoint(client: AsyncClient, auth_headers: dict, editor_headers: dict, bulletin: Bulletin):
    url = "/api/v1/bulletins/auto-generate"

    response = await client.post(url, json={"air_date": "2026-10-18"}, headers=editor_headers)
    assert response.status_code == 201
    data = response.json()
    assert (data["created"], data["skipped"]) == (12, 1)
    assert all(b["status"] == "PLANNING" for b in data["bulletins"])

    again = (await client.post(url, json={"air_date": "2026-10-18"}, headers=editor_headers)).json()
    assert (again["created"], again["skipped"]) == (0, 13)

    listed = await client.get("/api/v1/bulletins", params={"air_date": "2026-10-18"}, headers=editor_headers)
    assert listed.json()["total"] == 13

    audit = await client.get("/api/v1/users/audit-log", params={"resource_type": "BULLETIN"}, headers=auth_headers)
    actions = [entry["action"] for entry in audit.json()["logs"]]
    assert actions.count("AUTO_GENERATE") == 2


@pytest.mark.asyncio
async def test_reporter_cannot_auto_generate(client: AsyncClient, reporter_headers: dict):
    response = await client.post(
        "/api/v1/bulletins/auto-generate", json={"air_date": "2026-10-18"}, headers=reporter_headers
    )
    assert response.status_code == 403
