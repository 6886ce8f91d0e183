"""Change history recorded for writes made through the API (/api/v1/audit-logs)."""

import json

from httpx import AsyncClient

from app.infrastructure.services.change_audit_recorder import ChangeAuditRecorder

_VOLATILE = ("id", "name", "created_at", "updated_at")


async def test_create_records_snapshot_without_secrets(
    client: AsyncClient, create_user, audit_entries
) -> None:
    user = await create_user("alice", nickname="Al")

    entries = await audit_entries(table_name="users")
    assert len(entries) == 1
    entry = entries[0]
    assert entry["action"] == "create"
    assert entry["record_id"] == user["id"]
    assert entry["old_values"] == ""
    assert entry["user_id"] == 0
    assert entry["ip"] == "127.0.0.1"

    new_values = json.loads(entry["new_values"])
    assert list(new_values) == [
        "id",
        "username",
        "email",
        "nickname",
        "status",
        "created_at",
        "updated_at",
    ]
    assert new_values["username"] == "alice"
    assert new_values["nickname"] == "Al"
    assert "password" not in entry["new_values"]


async def test_update_records_before_and_after(
    client: AsyncClient, create_user, audit_entries
) -> None:
    user = await create_user("alice", nickname="Al")
    response = await client.put(f"/api/v1/users/{user['id']}", json={"nickname": "Alice"})
    assert response.status_code == 200

    entries = await audit_entries(table_name="users", action="update")
    assert len(entries) == 1
    old_values = json.loads(entries[0]["old_values"])
    new_values = json.loads(entries[0]["new_values"])
    assert old_values["nickname"] == "Al"
    assert new_values["nickname"] == "Alice"
    assert old_values["id"] == new_values["id"] == user["id"]


async def test_password_change_is_recorded_without_hash(
    client: AsyncClient, create_user, audit_entries
) -> None:
    user = await create_user("alice")
    await client.put(f"/api/v1/users/{user['id']}", json={"password": "another-one"})

    entry = (await audit_entries(table_name="users", action="update"))[0]
    assert "password" not in entry["old_values"]
    assert "password" not in entry["new_values"]
    assert "$2b$" not in entry["new_values"]


async def test_delete_records_prior_state(
    client: AsyncClient, create_role, audit_entries
) -> None:
    role = await create_role("editor", description="Edits")
    assert (await client.delete(f"/api/v1/roles/{role['id']}")).status_code == 204

    entries = await audit_entries(table_name="roles", action="delete")
    assert len(entries) == 1
    entry = entries[0]
    assert entry["record_id"] == role["id"]
    assert entry["new_values"] == ""
    old_values = json.loads(entry["old_values"])
    assert old_values["name"] == "editor"
    assert old_values["description"] == "Edits"
    assert "deleted_at" not in old_values


async def test_assignment_rows_are_audited(
    client: AsyncClient, create_user, create_role, audit_entries
) -> None:
    user = await create_user("alice")
    role = await create_role("editor")
    await client.post(f"/api/v1/users/{user['id']}/roles", json={"role_ids": [role["id"]]})
    await client.request(
        "DELETE", f"/api/v1/users/{user['id']}/roles", json={"role_ids": [role["id"]]}
    )

    entries = await audit_entries(table_name="user_roles")
    assert [e["action"] for e in entries] == ["delete", "create"]
    deleted, created = entries
    assert deleted["record_id"] == created["record_id"]
    link = json.loads(created["new_values"])
    assert link["user_id"] == user["id"]
    assert link["role_id"] == role["id"]
    assert json.loads(deleted["old_values"])["role_id"] == role["id"]


async def test_acting_user_comes_from_bearer_token(
    client: AsyncClient, create_user, audit_entries
) -> None:
    admin = await create_user("admin", password="secret123")
    login = await client.post(
        "/api/v1/auth/login", json={"email": "admin@example.com", "password": "secret123"}
    )
    token = login.json()["access_token"]

    response = await client.post(
        "/api/v1/roles",
        json={"name": "auditor", "display_name": "Auditor"},
        headers={"Authorization": f"Bearer {token}", "X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
    )
    assert response.status_code == 201

    entry = (await audit_entries(table_name="roles"))[0]
    assert entry["user_id"] == admin["id"]
    assert entry["ip"] == "203.0.113.9"


async def test_invalid_token_is_recorded_as_anonymous(
    client: AsyncClient, audit_entries
) -> None:
    response = await client.post(
        "/api/v1/roles",
        json={"name": "auditor", "display_name": "Auditor"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 201
    assert (await audit_entries(table_name="roles"))[0]["user_id"] == 0


async def test_failed_write_records_nothing(
    client: AsyncClient, create_role, audit_entries
) -> None:
    await create_role("editor")
    duplicate = await client.post("/api/v1/roles", json={"name": "editor", "display_name": "Dup"})
    assert duplicate.status_code == 409
    missing = await client.put("/api/v1/roles/999", json={"description": "x"})
    assert missing.status_code == 404

    entries = await audit_entries()
    assert [(e["table_name"], e["action"]) for e in entries] == [("roles", "create")]


async def test_reads_record_nothing(client: AsyncClient, create_user, audit_entries) -> None:
    user = await create_user("alice")
    await client.get(f"/api/v1/users/{user['id']}")
    await client.get("/api/v1/users")
    assert len(await audit_entries()) == 1


async def test_filters_and_get_by_id(
    client: AsyncClient, create_user, create_role, audit_entries
) -> None:
    alice = await create_user("alice")
    await create_user("bob")
    await create_role("editor")

    by_record = await audit_entries(table_name="users", record_id=alice["id"])
    assert len(by_record) == 1
    assert len(await audit_entries(action="create")) == 3
    assert await audit_entries(action="delete") == []

    entry_id = by_record[0]["id"]
    response = await client.get(f"/api/v1/audit-logs/{entry_id}")
    assert response.status_code == 200
    assert response.json()["record_id"] == alice["id"]


async def test_entries_are_newest_first_and_paginated(
    client: AsyncClient, create_role
) -> None:
    for name in ("a-role", "b-role", "c-role"):
        await create_role(name)
    response = await client.get("/api/v1/audit-logs", params={"page": 1, "page_size": 2})
    data = response.json()
    assert data["total"] == 3
    ids = [e["id"] for e in data["items"]]
    assert ids == sorted(ids, reverse=True)
    assert len(ids) == 2


async def test_unknown_entry_returns_404(client: AsyncClient) -> None:
    assert (await client.get("/api/v1/audit-logs/12345")).status_code == 404


async def test_invalid_action_filter_returns_422(client: AsyncClient) -> None:
    response = await client.get("/api/v1/audit-logs", params={"action": "truncate"})
    assert response.status_code == 422


async def test_forwarded_header_that_is_not_an_address_records_peer(
    client: AsyncClient, audit_entries
) -> None:
    response = await client.post(
        "/api/v1/roles",
        json={"name": "auditor", "display_name": "Auditor"},
        headers={"X-Forwarded-For": "not-an-ip-" + "x" * 80},
    )
    assert response.status_code == 201

    [entry] = await audit_entries(table_name="roles")
    assert entry["ip"] == "127.0.0.1"


async def _role_lifecycle(client: AsyncClient, name: str) -> list[tuple[int, dict | None]]:
    """Create, update and delete a role; return (status, body without volatile keys)."""
    results = []
    created = await client.post("/api/v1/roles", json={"name": name, "display_name": "Ops"})
    role_id = created.json()["id"]
    updated = await client.put(f"/api/v1/roles/{role_id}", json={"description": "Runs things"})
    deleted = await client.delete(f"/api/v1/roles/{role_id}")
    for response in (created, updated, deleted):
        body = response.json() if response.content else None
        if isinstance(body, dict):
            body = {k: v for k, v in body.items() if k not in _VOLATILE}
        results.append((response.status_code, body))
    return results


async def test_broken_audit_sink_does_not_change_responses(
    client: AsyncClient, running_app, session_factories, audit_entries
) -> None:
    session_factory, _ = session_factories
    audited = await _role_lifecycle(client, "ops-audited")

    def broken_sink():
        raise RuntimeError("sink is down")

    real_recorder = running_app.state.audit_recorder
    running_app.state.audit_recorder = ChangeAuditRecorder(session_factory, broken_sink)
    try:
        unaudited = await _role_lifecycle(client, "ops-unaudited")
    finally:
        running_app.state.audit_recorder = real_recorder

    assert [status for status, _ in audited] == [201, 200, 204]
    assert unaudited == audited
    entries = await audit_entries(table_name="roles")
    assert [e["action"] for e in entries] == ["delete", "update", "create"]
