"""Tests for the keywords (entity catalog) API."""

import pytest
from httpx import AsyncClient

from conftest import headers_for, make_user


@pytest.mark.asyncio
async def test_create_and_list_keywords(client: AsyncClient, auth_headers):
    resp = await client.post(
        "/api/v1/keywords/",
        json={
            "name": "  Sony WH-1000XM5 ",
            "aliases": ["XM5", " XM5 ", "", "Sony XM5"],
            "category": "Headphones",
            "price": 399.0,
        },
        headers=auth_headers,
    )
    assert resp.status_code == 201
    created = resp.json()
    assert created["name"] == "Sony WH-1000XM5"
    assert created["aliases"] == ["XM5", "Sony XM5"]
    assert created["price"] == 399.0
    assert "createdAt" in created

    resp = await client.get("/api/v1/keywords/", headers=auth_headers)
    assert resp.status_code == 200
    assert [k["name"] for k in resp.json()] == ["Sony WH-1000XM5"]


@pytest.mark.asyncio
async def test_blank_name_rejected(client: AsyncClient, auth_headers):
    resp = await client.post("/api/v1/keywords/", json={"name": "   "}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["kind"] == "validation_error"


@pytest.mark.asyncio
async def test_negative_price_rejected(client: AsyncClient, auth_headers):
    resp = await client.post("/api/v1/keywords/", json={"name": "Bose QC45", "price": -1}, headers=auth_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_update_keyword(client: AsyncClient, auth_headers, keywords):
    keyword_id = keywords[1].id
    resp = await client.put(
        f"/api/v1/keywords/{keyword_id}",
        json={"aliases": ["QC45"], "description": "Comfortable"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "Bose QC45"
    assert data["aliases"] == ["QC45"]
    assert data["description"] == "Comfortable"


@pytest.mark.asyncio
async def test_delete_keyword(client: AsyncClient, auth_headers, keywords):
    keyword_id = keywords[0].id
    resp = await client.delete(f"/api/v1/keywords/{keyword_id}", headers=auth_headers)
    assert resp.status_code == 204

    resp = await client.get(f"/api/v1/keywords/{keyword_id}", headers=auth_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_keywords_are_owner_scoped(client: AsyncClient, keywords, db):
    intruder = await make_user(db, email="intruder@example.com")
    headers = headers_for(intruder)

    resp = await client.get("/api/v1/keywords/", headers=headers)
    assert resp.json() == []

    resp = await client.get(f"/api/v1/keywords/{keywords[0].id}", headers=headers)
    assert resp.status_code == 404

    resp = await client.delete(f"/api/v1/keywords/{keywords[0].id}", headers=headers)
    assert resp.status_code == 404
