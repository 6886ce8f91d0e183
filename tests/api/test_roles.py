"""Tests for /api/v1/roles: CRUD, permission and user assignment."""

from httpx import AsyncClient


async def test_create_and_get_role(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/roles",
        json={"name": "admin", "display_name": "Administrator", "description": "All access"},
    )
    assert response.status_code == 201
    role = response.json()
    assert role["name"] == "admin"
    assert role["permissions"] == []

    fetched = await client.get(f"/api/v1/roles/{role['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["display_name"] == "Administrator"


async def test_create_role_duplicate_name_returns_409(client: AsyncClient, create_role) -> None:
    await create_role("admin")
    response = await client.post("/api/v1/roles", json={"name": "admin", "display_name": "Again"})
    assert response.status_code == 409
    assert response.json()["error"] == "DUPLICATE_RESOURCE"


async def test_create_role_missing_display_name_returns_422(client: AsyncClient) -> None:
    response = await client.post("/api/v1/roles", json={"name": "admin"})
    assert response.status_code == 422


async def test_update_role(client: AsyncClient, create_role) -> None:
    role = await create_role("editor")
    response = await client.put(
        f"/api/v1/roles/{role['id']}",
        json={"description": "Edits content", "status": 0},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["description"] == "Edits content"
    assert data["status"] == 0
    assert data["name"] == "editor"


async def test_delete_role(client: AsyncClient, create_role) -> None:
    role = await create_role("editor")
    assert (await client.delete(f"/api/v1/roles/{role['id']}")).status_code == 204
    assert (await client.get(f"/api/v1/roles/{role['id']}")).status_code == 404
    assert (await client.get("/api/v1/roles")).json()["total"] == 0


async def test_list_roles_includes_permissions(
    client: AsyncClient, create_role, create_permission
) -> None:
    role = await create_role("editor")
    await create_role("viewer")
    permission = await create_permission("post", "edit")
    await client.post(
        f"/api/v1/roles/{role['id']}/permissions",
        json={"permission_ids": [permission["id"]]},
    )

    data = (await client.get("/api/v1/roles")).json()
    assert data["total"] == 2
    by_name = {r["name"]: r for r in data["items"]}
    assert [p["name"] for p in by_name["editor"]["permissions"]] == ["post:edit"]
    assert by_name["viewer"]["permissions"] == []


async def test_assign_and_remove_permissions(
    client: AsyncClient, create_role, create_permission
) -> None:
    role = await create_role("editor")
    read = await create_permission("post", "read")
    edit = await create_permission("post", "edit")

    response = await client.post(
        f"/api/v1/roles/{role['id']}/permissions",
        json={"permission_ids": [read["id"], edit["id"], 999]},
    )
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [read["id"], edit["id"]]

    response = await client.request(
        "DELETE",
        f"/api/v1/roles/{role['id']}/permissions",
        json={"permission_ids": [read["id"]]},
    )
    assert [p["id"] for p in response.json()] == [edit["id"]]

    listed = (await client.get(f"/api/v1/roles/{role['id']}/permissions")).json()
    assert [p["name"] for p in listed] == ["post:edit"]


async def test_deleted_permission_disappears_from_role(
    client: AsyncClient, create_role, create_permission
) -> None:
    role = await create_role("editor")
    permission = await create_permission("post", "edit")
    await client.post(
        f"/api/v1/roles/{role['id']}/permissions",
        json={"permission_ids": [permission["id"]]},
    )
    await client.delete(f"/api/v1/permissions/{permission['id']}")

    listed = (await client.get(f"/api/v1/roles/{role['id']}/permissions")).json()
    assert listed == []


async def test_assign_and_remove_users(
    client: AsyncClient, create_role, create_user
) -> None:
    role = await create_role("editor")
    alice = await create_user("alice")
    bob = await create_user("bob")

    response = await client.post(
        f"/api/v1/roles/{role['id']}/users",
        json={"user_ids": [bob["id"], alice["id"], 404]},
    )
    assert response.status_code == 200
    assert [u["username"] for u in response.json()] == ["alice", "bob"]
    assert "password" not in response.json()[0]

    response = await client.request(
        "DELETE",
        f"/api/v1/roles/{role['id']}/users",
        json={"user_ids": [alice["id"]]},
    )
    assert [u["username"] for u in response.json()] == ["bob"]

    alice_roles = (await client.get(f"/api/v1/users/{alice['id']}/roles")).json()
    assert alice_roles == []


async def test_deleted_user_disappears_from_role(
    client: AsyncClient, create_role, create_user
) -> None:
    role = await create_role("editor")
    alice = await create_user("alice")
    await client.post(f"/api/v1/roles/{role['id']}/users", json={"user_ids": [alice["id"]]})
    await client.delete(f"/api/v1/users/{alice['id']}")

    assert (await client.get(f"/api/v1/roles/{role['id']}/users")).json() == []


async def test_missing_role_returns_404(client: AsyncClient) -> None:
    assert (await client.get("/api/v1/roles/77")).status_code == 404
    assert (await client.get("/api/v1/roles/77/permissions")).status_code == 404
    assert (await client.get("/api/v1/roles/77/users")).status_code == 404
    assert (await client.put("/api/v1/roles/77", json={"description": "x"})).status_code == 404
    assert (await client.delete("/api/v1/roles/77")).status_code == 404
