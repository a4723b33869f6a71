"""Shared helpers for the integration flows."""

import uuid

from httpx import AsyncClient


def unique_user() -> dict[str, object]:
    """Fresh registration payload to avoid test pollution."""
    uid = uuid.uuid4().hex[:8]
    return {
        "name": f"Tester {uid}",
        "email": f"test_{uid}@example.com",
        "password": "TestPass1",
        "age": 30,
        "address": "1 Market Street",
    }


async def register(client: AsyncClient) -> tuple[str, dict[str, str]]:
    """Register a fresh user; returns (user_id, auth headers)."""
    resp = await client.post("/api/auth/register", json=unique_user())
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]
    return data["user"]["id"], {"Authorization": f"Bearer {data['tokens']['accessToken']}"}
