import pytest
from httpx import AsyncClient

from newsroom.models.user import User


@pytest.mark.asyncio
async def test_create_user(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/api/v1/users",
        json={"email": "New.Reporter@Test.com", "password": "password123", "display_name": "New"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "new.reporter@test.com"
    assert data["role"] == "REPORTER"

    login = await client.post(
        "/api/v1/auth/login", json={"email": "new.reporter@test.com", "password": "password123"}
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_create_duplicate_user(client: AsyncClient, auth_headers: dict, editor_user: User):
    response = await client.post(
        "/api/v1/users",
        json={"email": "editor@test.com", "password": "password123"},
        headers=auth_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_user_management_is_admin_only(client: AsyncClient, producer_headers: dict):
    assert (await client.get("/api/v1/users", headers=producer_headers)).status_code == 403


@pytest.mark.asyncio
async def test_update_role_and_delete(client: AsyncClient, auth_headers: dict, reporter_user: User):
    response = await client.patch(
        f"/api/v1/users/{reporter_user.id}", json={"role": "EDITOR"}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["role"] == "EDITOR"

    assert (await client.delete(f"/api/v1/users/{reporter_user.id}", headers=auth_headers)).status_code == 204
    users = (await client.get("/api/v1/users", headers=auth_headers)).json()
    assert str(reporter_user.id) not in [u["id"] for u in users["users"]]


@pytest.mark.asyncio
async def test_cannot_delete_self(client: AsyncClient, auth_headers: dict, admin_user: User):
    response = await client.delete(f"/api/v1/users/{admin_user.id}", headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_audit_log_filters(client: AsyncClient, auth_headers: dict, bulletin):
    await client.post(f"/api/v1/bulletins/{bulletin.id}/lock", headers=auth_headers)

    response = await client.get(
        "/api/v1/users/audit-log",
        params={"resource_type": "BULLETIN", "bulletin_id": str(bulletin.id)},
        headers=auth_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    entry = data["logs"][0]
    assert entry["action"] == "LOCK"
    assert entry["user_email"] == "testadmin@test.com"
