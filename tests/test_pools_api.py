import pytest
from httpx import AsyncClient

from newsroom.models.bulletin import Bulletin


async def _pool(client: AsyncClient, headers: dict, code: str = "nat") -> dict:
    response = await client.post("/api/v1/pools", json={"name": "National", "code": code}, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_pool_uppercases_code(client: AsyncClient, producer_headers: dict):
    pool = await _pool(client, producer_headers)
    assert pool["code"] == "NAT"
    assert pool["type"] == "STORY_POOL"

    duplicate = await client.post("/api/v1/pools", json={"name": "Other", "code": "Nat"}, headers=producer_headers)
    assert duplicate.status_code == 409

    pools = (await client.get("/api/v1/pools", headers=producer_headers)).json()
    assert [p["code"] for p in pools] == ["NAT"]


@pytest.mark.asyncio
async def test_editor_cannot_create_pool(client: AsyncClient, editor_headers: dict):
    response = await client.post("/api/v1/pools", json={"name": "Sport", "code": "SPT"}, headers=editor_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_pool_story_status_must_be_draft_or_ready(
    client: AsyncClient, producer_headers: dict, editor_headers: dict
):
    pool = await _pool(client, producer_headers)
    response = await client.post(
        f"/api/v1/pools/{pool['id']}/stories", json={"slug": "X", "status": "USED"}, headers=editor_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_assign_story_to_bulletin(
    client: AsyncClient, producer_headers: dict, editor_headers: dict, bulletin: Bulletin
):
    pool = await _pool(client, producer_headers)
    story = (
        await client.post(
            f"/api/v1/pools/{pool['id']}/stories",
            json={"slug": "FLOODS", "est_duration_secs": 120, "status": "READY"},
            headers=editor_headers,
        )
    ).json()
    assert story["status"] == "READY"

    url = f"/api/v1/pool-stories/{story['id']}/assign"
    response = await client.post(url, json={"bulletin_id": str(bulletin.id), "block_code": "B"}, headers=editor_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["row"]["slug"] == "FLOODS"
    assert data["row"]["page_code"] == "B1"
    assert data["row"]["status"] == "READY"
    assert data["row"]["source_pool_id"] == pool["id"]
    assert data["timing"]["totals"]["total_est_duration_secs"] == 120

    stories = (await client.get(f"/api/v1/pools/{pool['id']}/stories", headers=editor_headers)).json()
    assert stories[0]["status"] == "ASSIGNED"
    assert stories[0]["used_in_row_id"] == data["row"]["id"]

    again = await client.post(url, json={"bulletin_id": str(bulletin.id)}, headers=editor_headers)
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_assign_unknown_story(client: AsyncClient, editor_headers: dict, bulletin: Bulletin):
    response = await client.post(
        "/api/v1/pool-stories/00000000-0000-0000-0000-000000000000/assign",
        json={"bulletin_id": str(bulletin.id)},
        headers=editor_headers,
    )
    assert response.status_code == 404
