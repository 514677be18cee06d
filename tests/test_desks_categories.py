import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_desk_crud(client: AsyncClient, producer_headers: dict):
    response = await client.post("/api/v1/desks", json={"name": "Metro", "code": "MET"}, headers=producer_headers)
    assert response.status_code == 201
    desk = response.json()

    duplicate = await client.post("/api/v1/desks", json={"name": "Metro", "code": "MX"}, headers=producer_headers)
    assert duplicate.status_code == 409

    response = await client.patch(
        f"/api/v1/desks/{desk['id']}", json={"description": "City news"}, headers=producer_headers
    )
    assert response.json()["description"] == "City news"

    assert (await client.delete(f"/api/v1/desks/{desk['id']}", headers=producer_headers)).status_code == 204
    assert (await client.get("/api/v1/desks", headers=producer_headers)).json() == []


@pytest.mark.asyncio
async def test_reporter_cannot_create_desk(client: AsyncClient, reporter_headers: dict):
    response = await client.post("/api/v1/desks", json={"name": "Metro", "code": "MET"}, headers=reporter_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_categories_list_active_only(client: AsyncClient, producer_headers: dict, reporter_headers: dict):
    politics = (
        await client.post("/api/v1/categories", json={"name": "Politics"}, headers=producer_headers)
    ).json()
    await client.post("/api/v1/categories", json={"name": "Arts", "color": "#ff0000"}, headers=producer_headers)

    await client.patch(f"/api/v1/categories/{politics['id']}", json={"is_active": False}, headers=producer_headers)

    names = [c["name"] for c in (await client.get("/api/v1/categories", headers=reporter_headers)).json()]
    assert names == ["Arts"]
