from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from outage_board.services.outage_store import OutageStore


@pytest.mark.asyncio
async def test_health(client, clock):
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["timestamp"].startswith("2026-03-02T14:30:00")


@pytest.mark.asyncio
async def test_report_then_confirm_then_restore(client, clock):
    resp = await client.post("/api/outages", json={"service": "Gas", "area": "East Side"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["isDuplicate"] is False
    assert body["message"] == "New outage reported"
    outage = body["outage"]
    assert outage["confirmCount"] == 1
    assert outage["confidenceLevel"] == "unverified"
    assert outage["status"] == "ongoing"
    assert outage["upTime"] is None
    assert outage["durationMinutes"] is None
    assert "areaKey" not in outage

    resp = await client.post("/api/outages", json={"service": "Gas", "area": "east side"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["isDuplicate"] is True
    assert body["outage"]["id"] == outage["id"]
    assert body["outage"]["confirmCount"] == 2
    assert body["outage"]["confidenceLevel"] == "likely"

    clock.advance(minutes=75)
    resp = await client.put(f"/api/outages/{outage['id']}/restore")
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Service restored"
    assert body["outage"]["status"] == "resolved"
    assert body["outage"]["durationMinutes"] == 75
    assert body["outage"]["upTime"] is not None

    resp = await client.put(f"/api/outages/{outage['id']}/restore")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Outage already resolved"}


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"service": "Water"},
    {"area": "Downtown"},
    {"service": "", "area": "Downtown"},
    {},
])
async def test_report_missing_fields(client, payload):
    resp = await client.post("/api/outages", json=payload)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Service and area are required"}


@pytest.mark.asyncio
async def test_report_invalid_service(client):
    resp = await client.post("/api/outages", json={"service": "Wifi", "area": "Downtown"})
    assert resp.status_code == 400
    assert "Invalid service" in resp.json()["error"]


@pytest.mark.asyncio
async def test_report_malformed_body(client):
    resp = await client.post(
        "/api/outages", content="not json", headers={"content-type": "application/json"},
    )
    assert resp.status_code == 400
    assert "error" in resp.json()


@pytest.mark.asyncio
async def test_list_outages_filter(client, clock):
    first = (await client.post("/api/outages", json={"service": "Water", "area": "North"})).json()
    clock.advance(minutes=1)
    second = (await client.post("/api/outages", json={"service": "Internet", "area": "North"})).json()
    clock.advance(minutes=1)
    await client.put(f"/api/outages/{first['outage']['id']}/restore")

    resp = await client.get("/api/outages")
    assert resp.status_code == 200
    assert [o["id"] for o in resp.json()] == [second["outage"]["id"], first["outage"]["id"]]

    resp = await client.get("/api/outages", params={"status": "ongoing"})
    assert [o["id"] for o in resp.json()] == [second["outage"]["id"]]

    resp = await client.get("/api/outages", params={"status": "resolved"})
    assert [o["id"] for o in resp.json()] == [first["outage"]["id"]]


@pytest.mark.asyncio
async def test_list_outages_bad_status(client):
    resp = await client.get("/api/outages", params={"status": "paused"})
    assert resp.status_code == 400
    assert "error" in resp.json()


@pytest.mark.asyncio
async def test_restore_unknown(client):
    resp = await client.put("/api/outages/nope/restore")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Outage not found"}


@pytest.mark.asyncio
async def test_stats_shape(client, clock):
    created = (await client.post("/api/outages", json={"service": "Water", "area": "Bay"})).json()
    clock.advance(minutes=30)
    await client.put(f"/api/outages/{created['outage']['id']}/restore")
    await client.post("/api/outages", json={"service": "Water", "area": "Bay"})

    resp = await client.get("/api/outages/stats")
    assert resp.status_code == 200
    data = resp.json()
    assert data["totalOutages"] == 2
    assert data["ongoingOutages"] == 1
    assert data["resolvedOutages"] == 1
    assert data["avgResolutionTime"] == 30
    assert data["serviceBreakdown"] == [{"service": "Water", "count": 2, "ongoing": 1}]
    assert data["areaBreakdown"] == [{"area": "Bay", "count": 2}]


@pytest.mark.asyncio
async def test_insights_shape(client):
    await client.post("/api/outages", json={"service": "Sanitation", "area": "Elm"})
    resp = await client.get("/api/outages/insights")
    assert resp.status_code == 200
    assert resp.json() == {
        "recentOutages": 1,
        "mostReliableService": "Sanitation",
        "mostReliableCount": 1,
        "peakOutageHour": 14,
        "confidenceLevels": [{"level": "unverified", "count": 1}],
    }


@pytest.mark.asyncio
async def test_impact_shape(client):
    for area in ("A", "B"):
        await client.post("/api/outages", json={"service": "Electricity", "area": area})
    resp = await client.get("/api/outages/impact")
    assert resp.status_code == 200
    assert resp.json() == {
        "criticalOutages": 2,
        "totalDowntimeHours": 0,
        "longestOutage": None,
        "crisisLevel": "Moderate",
        "ongoingCount": 2,
    }


@pytest.mark.asyncio
async def test_delete_requires_password(client, test_settings):
    created = (await client.post("/api/outages", json={"service": "Water", "area": "Downtown"})).json()
    outage_id = created["outage"]["id"]

    resp = await client.delete(f"/api/outages/{outage_id}")
    assert resp.status_code == 403
    assert resp.json() == {"error": "Unauthorized"}

    resp = await client.delete(f"/api/outages/{outage_id}", headers={"x-admin-password": "guess"})
    assert resp.status_code == 403
    assert len((await client.get("/api/outages")).json()) == 1

    resp = await client.delete(
        f"/api/outages/{outage_id}", headers={"x-admin-password": test_settings.admin_password},
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "Outage deleted"
    assert resp.json()["outage"]["id"] == outage_id

    resp = await client.delete(
        f"/api/outages/{outage_id}", headers={"x-admin-password": test_settings.admin_password},
    )
    assert resp.status_code == 404
    resp = await client.put(f"/api/outages/{outage_id}/restore")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_store_failure_is_500(client):
    boom = OperationalError("SELECT 1", {}, Exception("disk I/O error"))
    with patch.object(OutageStore, "count", side_effect=boom):
        resp = await client.get("/api/outages/impact")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Server error"}
