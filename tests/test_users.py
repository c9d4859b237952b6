"""Tests for user info and admin tier management."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from conftest import headers_for, make_user


@pytest.mark.asyncio
async def test_user_info_fresh_user(client: AsyncClient, auth_headers, user):
    resp = await client.get("/api/v1/user/info", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["email"] == user.email
    assert data["tier"] == "free"
    assert data["tierName"] == "Free"
    assert data["cooldownSeconds"] == 6 * 3600
    assert data["retentionDays"] == 7
    assert data["canExecute"] is True
    assert data["retryAfter"] is None


@pytest.mark.asyncio
async def test_user_info_in_cooldown(client: AsyncClient, db):
    paid = await make_user(
        db,
        email="paid@example.com",
        tier="paid_tier_1",
        last_execution_at=datetime.now(timezone.utc) - timedelta(minutes=20),
    )
    resp = await client.get("/api/v1/user/info", headers=headers_for(paid))
    data = resp.json()
    assert data["tierName"] == "Premium"
    assert data["canExecute"] is False
    assert data["retryAfter"] is not None
    assert data["retryAfterText"] in ("40 minutes", "41 minutes")


@pytest.mark.asyncio
async def test_admin_lists_users(client: AsyncClient, admin_headers, user):
    resp = await client.get("/api/v1/admin/users", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert {u["email"] for u in data["items"]} == {"admin@example.com", "test@example.com"}


@pytest.mark.asyncio
async def test_non_admin_forbidden(client: AsyncClient, auth_headers):
    resp = await client.get("/api/v1/admin/users", headers=auth_headers)
    assert resp.status_code == 403
    assert resp.json()["kind"] == "forbidden"


@pytest.mark.asyncio
async def test_admin_changes_tier(client: AsyncClient, admin_headers, user, auth_headers):
    resp = await client.patch(f"/api/v1/admin/users/{user.id}", json={"tier": "paid_tier_1"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["tier"] == "paid_tier_1"

    resp = await client.get("/api/v1/user/info", headers=auth_headers)
    assert resp.json()["retentionDays"] == 28


@pytest.mark.asyncio
async def test_admin_rejects_unknown_tier(client: AsyncClient, admin_headers, user):
    resp = await client.patch(f"/api/v1/admin/users/{user.id}", json={"tier": "platinum"}, headers=admin_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_admin_tier_is_never_rate_limited(client: AsyncClient, admin_headers):
    body = {"model": "openai/gpt-4o", "promptContent": "hi"}
    for _ in range(3):
        resp = await client.post("/api/v1/execute/", json=body, headers=admin_headers)
        assert resp.status_code == 201
