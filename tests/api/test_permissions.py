"""Tests for /api/v1/permissions: CRUD and resource/action lookup."""

from httpx import AsyncClient


async def test_create_permission(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/permissions",
        json={
            "name": "user:create",
            "display_name": "Create users",
            "resource": "user",
            "action": "create",
        },
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "user:create"
    assert data["resource"] == "user"
    assert data["action"] == "create"
    assert data["description"] == ""
    assert data["status"] == 1


async def test_create_permission_duplicate_name_returns_409(
    client: AsyncClient, create_permission
) -> None:
    await create_permission("user", "create")
    response = await client.post(
        "/api/v1/permissions",
        json={
            "name": "user:create",
            "display_name": "Again",
            "resource": "user",
            "action": "create",
        },
    )
    assert response.status_code == 409


async def test_create_permission_missing_resource_returns_422(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/permissions",
        json={"name": "x", "display_name": "X", "action": "read"},
    )
    assert response.status_code == 422


async def test_lookup_by_resource_and_action(client: AsyncClient, create_permission) -> None:
    await create_permission("user", "create")
    wanted = await create_permission("user", "delete")

    response = await client.get(
        "/api/v1/permissions/lookup", params={"resource": "user", "action": "delete"}
    )
    assert response.status_code == 200
    assert response.json()["id"] == wanted["id"]


async def test_lookup_unknown_returns_404(client: AsyncClient) -> None:
    response = await client.get(
        "/api/v1/permissions/lookup", params={"resource": "user", "action": "fly"}
    )
    assert response.status_code == 404


async def test_update_and_delete_permission(client: AsyncClient, create_permission) -> None:
    permission = await create_permission("post", "read")
    response = await client.put(
        f"/api/v1/permissions/{permission['id']}",
        json={"display_name": "Read posts", "description": "View any post"},
    )
    assert response.status_code == 200
    assert response.json()["display_name"] == "Read posts"
    assert response.json()["name"] == "post:read"

    assert (await client.delete(f"/api/v1/permissions/{permission['id']}")).status_code == 204
    assert (await client.get(f"/api/v1/permissions/{permission['id']}")).status_code == 404
    lookup = await client.get(
        "/api/v1/permissions/lookup", params={"resource": "post", "action": "read"}
    )
    assert lookup.status_code == 404


async def test_list_permissions(client: AsyncClient, create_permission) -> None:
    await create_permission("post", "read")
    await create_permission("post", "edit")
    data = (await client.get("/api/v1/permissions")).json()
    assert data["total"] == 2
    assert [p["name"] for p in data["items"]] == ["post:read", "post:edit"]
