"""API tests for API key management."""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

KEYS_URL = "/api/settings/api-keys"


async def create_key(client: AsyncClient, **overrides) -> dict:
    payload = {"name": "Payroll sync", "permissions": ["read:employees"], **overrides}
    response = await client.post(KEYS_URL, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestApiKeyManagement:
    """Test creating, listing and revoking keys."""

    async def test_create_and_list(self, hr_client: AsyncClient):
        created = await create_key(hr_client)

        assert created["key"].startswith("hrms_live_")
        assert created["key_prefix"] == created["key"][:16]
        assert created["message"].startswith("IMPORTANT")

        listed = (await hr_client.get(KEYS_URL)).json()
        assert [key["id"] for key in listed] == [created["id"]]
        assert "key" not in listed[0]
        assert "key_hash" not in listed[0]

    async def test_invalid_permissions(self, hr_client: AsyncClient):
        response = await hr_client.post(
            KEYS_URL, json={"name": "Bad", "permissions": ["read:employees", "launch:rockets"]}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid permissions"
        assert body["invalid"] == ["launch:rockets"]
        assert "read:employees" in body["valid"]

    async def test_revoke(self, hr_client: AsyncClient, make_client):
        created = await create_key(hr_client)
        key_client = make_client({"X-API-Key": created["key"]})
        assert (await key_client.get("/api/employees")).status_code == 200

        response = await hr_client.delete(f"{KEYS_URL}/{created['id']}")
        assert response.json() == {"message": "API key revoked successfully"}

        rejected = await key_client.get("/api/employees")
        assert rejected.status_code == 401
        assert rejected.json()["error"] == "API key has been revoked"

    async def test_other_users_key_is_hidden(
        self, hr_client: AsyncClient, viewer_client: AsyncClient
    ):
        created = await create_key(hr_client)

        assert (await viewer_client.delete(f"{KEYS_URL}/{created['id']}")).status_code == 404
        assert (await viewer_client.get(f"{KEYS_URL}/{created['id']}/usage")).status_code == 404
        assert (await viewer_client.get(KEYS_URL)).json() == []


class TestApiKeyRotation:
    """Test rotation and the grace period."""

    async def test_rotate_keeps_old_key_during_grace(
        self, hr_client: AsyncClient, make_client
    ):
        created = await create_key(hr_client)

        response = await hr_client.post(
            f"{KEYS_URL}/{created['id']}/rotate", json={"grace_period_hours": 2}
        )

        assert response.status_code == 200, response.text
        rotated = response.json()
        assert rotated["name"] == "Payroll sync (Rotated)"
        assert rotated["key"] != created["key"]
        assert rotated["message"].startswith("Key rotated. Old key valid until ")
        assert rotated["message"].endswith("Save the new key securely!")

        for key in (created["key"], rotated["key"]):
            client = make_client({"Authorization": f"Bearer {key}"})
            assert (await client.get("/api/employees")).status_code == 200

    async def test_rotate_without_body(self, hr_client: AsyncClient):
        created = await create_key(hr_client)

        response = await hr_client.post(f"{KEYS_URL}/{created['id']}/rotate")

        assert response.status_code == 200

    async def test_rotate_revoked_key(self, hr_client: AsyncClient):
        created = await create_key(hr_client)
        await hr_client.delete(f"{KEYS_URL}/{created['id']}")

        response = await hr_client.post(f"{KEYS_URL}/{created['id']}/rotate")

        assert response.status_code == 400
        assert response.json()["error"] == "Cannot rotate a revoked key"

    async def test_usage(self, hr_client: AsyncClient, make_client):
        created = await create_key(hr_client, rate_limit_per_hour=50)
        key_client = make_client({"X-API-Key": created["key"]})
        await key_client.get("/api/employees")
        await hr_client.post(f"{KEYS_URL}/{created['id']}/rotate")

        usage = (await hr_client.get(f"{KEYS_URL}/{created['id']}/usage")).json()

        assert usage["key_id"] == created["id"]
        assert usage["last_used"] is not None
        assert usage["remaining_this_hour"] == 49
        assert usage["rotation_count"] == 1
        assert usage["is_revoked"] is False


class TestRequestLimits:
    """Test per-client request budgets."""

    async def test_sixth_key_request_in_an_hour_rejected(self, hr_client: AsyncClient):
        for n in range(5):
            await create_key(hr_client, name=f"Key {n}")

        response = await hr_client.post(
            KEYS_URL, json={"name": "One too many", "permissions": ["read:employees"]}
        )

        assert response.status_code == 429
        assert response.json() == {"error": "Too many API key requests, please try again later"}
        assert len((await hr_client.get(KEYS_URL)).json()) == 5

    async def test_rotation_shares_key_budget(self, hr_client: AsyncClient):
        created = await create_key(hr_client)
        for _ in range(4):
            assert (await hr_client.post(f"{KEYS_URL}/{created['id']}/rotate")).status_code == 200

        response = await hr_client.post(f"{KEYS_URL}/{created['id']}/rotate")

        assert response.status_code == 429

    async def test_api_budget_per_client(self, hr_client: AsyncClient):
        statuses = [(await hr_client.get("/api/user")).status_code for _ in range(100)]

        assert statuses[0] == 200
        assert statuses[-1] == 429
        response = await hr_client.get("/api/user")
        assert response.json() == {"error": "Too many requests, please try again later"}
        # Health checks are not counted
        assert (await hr_client.get("/health")).status_code == 200
        assert (await hr_client.get("/ready")).status_code == 200
