"""Tests for the game API endpoints."""

from __future__ import annotations

import json

import pytest


async def _submit(client, name, high_score):
    return await client.post(
        "/api/user",
        content=json.dumps({"name": name, "highScore": high_score}),
        headers={"content-type": "application/json"},
    )


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["storage"]["tiers"] == ["file"]
    assert "uptime_seconds" in data
    assert "disk_free_gb" in data["storage"]


@pytest.mark.asyncio
async def test_unknown_user_is_404(client):
    resp = await client.get("/api/user/unknown")
    assert resp.status_code == 404
    assert resp.json() == {"error": "User not found"}


@pytest.mark.asyncio
async def test_submit_then_get_user(client):
    resp = await _submit(client, "alice", 120)
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["user"]["highScore"] == 120
    assert data["user"]["lastPlayed"].endswith("Z")

    resp = await client.get("/api/user/alice")
    assert resp.status_code == 200
    assert resp.json() == data["user"]


@pytest.mark.asyncio
async def test_lower_score_keeps_best(client):
    await _submit(client, "a", 10)
    resp = await _submit(client, "a", 5)
    assert resp.status_code == 200
    assert resp.json()["user"]["highScore"] == 10


@pytest.mark.asyncio
async def test_missing_score_defaults_to_zero(client):
    resp = await client.post("/api/user", json={"name": "bob"})
    assert resp.status_code == 200
    assert resp.json()["user"]["highScore"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"highScore": 5},
    {"name": "", "highScore": 5},
    {"name": "carol", "highScore": "lots"},
    {"name": "carol", "highScore": -1},
    {"name": "carol", "highScore": 2.5},
    {"name": "carol", "highScore": True},
    ["carol", 5],
])
async def test_invalid_submission_rejected(client, payload):
    resp = await client.post("/api/user", json=payload)
    assert resp.status_code == 422
    assert resp.json()["success"] is False

    resp = await client.get("/api/stats")
    assert resp.json()["totalUsers"] == 0


@pytest.mark.asyncio
async def test_invalid_json(client):
    resp = await client.post(
        "/api/user",
        content=b"not json at all",
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_visit_counts_unique_forwarded_ips(client):
    resp = await client.post("/api/visit", headers={"x-forwarded-for": "1.2.3.4"})
    assert resp.json() == {"success": True, "count": 1}

    resp = await client.post("/api/visit", headers={"x-forwarded-for": "1.2.3.4"})
    assert resp.json() == {"success": True, "count": 1}

    # The header is used verbatim: a proxy chain is a different visitor.
    resp = await client.post("/api/visit", headers={"x-forwarded-for": "1.2.3.4, 10.0.0.1"})
    assert resp.json()["count"] == 2


@pytest.mark.asyncio
async def test_visit_without_header_uses_peer_address(client):
    resp = await client.post("/api/visit")
    assert resp.status_code == 200
    assert resp.json()["count"] == 1

    resp = await client.post("/api/visit")
    assert resp.json()["count"] == 1


@pytest.mark.asyncio
async def test_stats_empty(client):
    resp = await client.get("/api/stats")
    assert resp.status_code == 200
    assert resp.json() == {"uniqueVisitors": 0, "totalUsers": 0}


@pytest.mark.asyncio
async def test_stats_after_activity(client):
    await _submit(client, "alice", 3)
    await _submit(client, "bob", 7)
    await client.post("/api/visit", headers={"x-forwarded-for": "9.9.9.9"})

    resp = await client.get("/api/stats")
    assert resp.json() == {"uniqueVisitors": 1, "totalUsers": 2}


@pytest.mark.asyncio
async def test_leaderboard_empty(client):
    resp = await client.get("/api/leaderboard")
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.asyncio
async def test_leaderboard_top_ten(client):
    for i in range(12):
        await _submit(client, f"player-{i:02d}", i * 10)

    resp = await client.get("/api/leaderboard")
    board = resp.json()
    assert len(board) == 10
    assert board[0] == {
        "name": "player-11",
        "highScore": 110,
        "lastPlayed": board[0]["lastPlayed"],
    }
    scores = [entry["highScore"] for entry in board]
    assert scores == sorted(scores, reverse=True)
    assert board[-1]["name"] == "player-02"


@pytest.mark.asyncio
async def test_health_counts_operations(client):
    await _submit(client, "alice", 1)
    await client.get("/api/user/nobody")

    data = (await client.get("/api/health")).json()
    assert data["game"]["scores_submitted"] == 1
    assert data["game"]["user_lookups_missed"] == 1
    assert data["storage"]["saves"] == {"file": 1}
