"""Tests for result history and tier retention."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from app.models import Result
from conftest import headers_for, make_user


async def _add_result(db, user, *, days_ago: float, model="openai/gpt-4o", prompt_id=None, mentions=None):
    row = Result(
        user_id=user.id,
        prompt_id=prompt_id,
        llm_model=model,
        response=f"answer from {days_ago} days ago",
        keywords_mentioned=mentions or [],
        created_at=datetime.now(timezone.utc) - timedelta(days=days_ago),
    )
    db.add(row)
    await db.commit()
    return row


@pytest.mark.asyncio
async def test_free_tier_sees_last_seven_days(client: AsyncClient, auth_headers, db, user):
    await _add_result(db, user, days_ago=1)
    await _add_result(db, user, days_ago=6)
    await _add_result(db, user, days_ago=8)
    await _add_result(db, user, days_ago=30)

    resp = await client.get("/api/v1/results/", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert [r["response"] for r in data["results"]] == ["answer from 1 days ago", "answer from 6 days ago"]
    assert data["limit"] == 50
    assert data["skip"] == 0
    assert "retentionCutoff" in data


@pytest.mark.asyncio
async def test_paid_tier_sees_28_days(client: AsyncClient, db):
    paid = await make_user(db, email="paid@example.com", tier="paid_tier_1")
    await _add_result(db, paid, days_ago=8)
    await _add_result(db, paid, days_ago=27)
    await _add_result(db, paid, days_ago=29)

    resp = await client.get("/api/v1/results/", headers=headers_for(paid))
    assert resp.json()["total"] == 2


@pytest.mark.asyncio
async def test_pagination(client: AsyncClient, auth_headers, db, user):
    for i in range(5):
        await _add_result(db, user, days_ago=i * 0.1)

    resp = await client.get("/api/v1/results/", params={"limit": 2, "skip": 2}, headers=auth_headers)
    data = resp.json()
    assert data["total"] == 5
    assert len(data["results"]) == 2
    assert data["results"][0]["response"] == "answer from 0.2 days ago"


@pytest.mark.asyncio
async def test_results_are_owner_scoped(client: AsyncClient, auth_headers, db):
    other = await make_user(db, email="other@example.com")
    await _add_result(db, other, days_ago=1)

    resp = await client.get("/api/v1/results/", headers=auth_headers)
    assert resp.json()["total"] == 0


@pytest.mark.asyncio
async def test_names_are_resolved(client: AsyncClient, auth_headers, db, user, keywords, prompt):
    mention = {"keyword": keywords[1].id, "position": 4, "sentiment": "neutral", "context": "The Bose QC45"}
    row = await _add_result(db, user, days_ago=0, prompt_id=prompt.id, mentions=[mention])

    resp = await client.get("/api/v1/results/", headers=auth_headers)
    result = resp.json()["results"][0]
    assert result["promptTitle"] == "Best headphones"
    assert result["llmModel"] == "openai/gpt-4o"
    assert result["keywordsMentioned"][0]["keywordName"] == "Bose QC45"

    resp = await client.get(f"/api/v1/results/{row.id}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == row.id


@pytest.mark.asyncio
async def test_expired_result_is_not_found(client: AsyncClient, auth_headers, db, user):
    row = await _add_result(db, user, days_ago=10)
    resp = await client.get(f"/api/v1/results/{row.id}", headers=auth_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_executed_result_shows_up_in_history(client: AsyncClient, auth_headers, keywords, fake_invoker):
    fake_invoker.default = "I would pick the Bose QC45."
    resp = await client.post(
        "/api/v1/execute/",
        json={"model": "openai/gpt-4o", "promptContent": "Which headphones?"},
        headers=auth_headers,
    )
    assert resp.status_code == 201

    resp = await client.get("/api/v1/results/", headers=auth_headers)
    data = resp.json()
    assert data["total"] == 1
    assert data["results"][0]["keywordsMentioned"][0]["keywordName"] == "Bose QC45"
