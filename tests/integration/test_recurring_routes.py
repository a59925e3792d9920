from datetime import date, timedelta

import pytest
from sqlalchemy import select

from app.infrastructure.db.models import ExpenseModel


async def _create(client, headers, **overrides):
    payload = {"title": "Rent", "amount": "800", "start_date": "2024-01-01", **overrides}
    resp = await client.post("/api/v1/recurring-transactions", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_uses_defaults(client, auth_headers):
    rule = await _create(client, auth_headers)

    assert rule["frequency"] == "monthly"
    assert rule["type"] == "expense"
    assert rule["is_active"] is True
    assert rule["last_generated"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_rejects_end_before_start(client, auth_headers):
    resp = await client.post(
        "/api/v1/recurring-transactions",
        json={"title": "Rent", "amount": "800", "start_date": "2024-02-01", "end_date": "2024-01-01"},
        headers=auth_headers,
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_merges_fields(client, auth_headers):
    rule = await _create(client, auth_headers, description="flat")

    resp = await client.patch(
        f"/api/v1/recurring-transactions/{rule['id']}",
        json={"amount": "850", "frequency": "weekly", "end_date": "2024-12-31"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["amount"] == 850.0
    assert body["frequency"] == "weekly"
    assert body["end_date"] == "2024-12-31"
    assert body["description"] == "flat"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_rejects_invalid_merge(client, auth_headers):
    rule = await _create(client, auth_headers, start_date="2024-06-01")

    resp = await client.patch(
        f"/api/v1/recurring-transactions/{rule['id']}",
        json={"end_date": "2024-05-01"},
        headers=auth_headers,
    )
    assert resp.status_code == 422

    resp = await client.patch(
        f"/api/v1/recurring-transactions/{rule['id']}",
        json={"title": None},
        headers=auth_headers,
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_last_generated_is_not_client_writable(client, auth_headers):
    rule = await _create(client, auth_headers)

    resp = await client.patch(
        f"/api/v1/recurring-transactions/{rule['id']}",
        json={"last_generated": "2024-03-01"},
        headers=auth_headers,
    )
    assert resp.status_code == 422

    resp = await client.get(f"/api/v1/recurring-transactions/{rule['id']}", headers=auth_headers)
    assert resp.json()["last_generated"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_rules_are_scoped_to_owner(client, register_user):
    ana, _ = await register_user("ana@example.com")
    ben, _ = await register_user("ben@example.com")
    rule = await _create(client, ana)

    assert (await client.get(f"/api/v1/recurring-transactions/{rule['id']}", headers=ben)).status_code == 404
    assert (await client.patch(
        f"/api/v1/recurring-transactions/{rule['id']}", json={"amount": "1"}, headers=ben
    )).status_code == 404
    assert (await client.get("/api/v1/recurring-transactions", headers=ben)).json() == []

    resp = await client.delete(f"/api/v1/recurring-transactions/{rule['id']}", headers=ana)
    assert resp.status_code == 204


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_generate_endpoint_reports_callers_entries(client, register_user, session_maker):
    ana, ana_user = await register_user("ana@example.com")
    ben, _ = await register_user("ben@example.com")

    ana_rule = await _create(client, ana, frequency="daily")
    await _create(client, ben, frequency="daily", title="Gym", amount="30")

    resp = await client.post(
        "/api/v1/recurring-transactions/generate",
        params={"reference_date": "2024-03-01"},
        headers=ana,
    )
    assert resp.status_code == 200
    report = resp.json()
    assert report["reference_date"] == "2024-03-01"
    assert report["generated"] == 1
    assert len(report["entries"]) == 1
    entry = report["entries"][0]
    assert entry["rule_id"] == ana_rule["id"]
    assert entry["outcome"] == "generated"
    assert entry["transaction_type"] == "expense"

    async with session_maker() as session:
        result = await session.execute(select(ExpenseModel).where(ExpenseModel.user_id == ana_user["id"]))
        expenses = list(result.scalars().all())
    assert [(e.date, e.title) for e in expenses] == [(date(2024, 3, 1), "Rent")]

    rule = await client.get(f"/api/v1/recurring-transactions/{ana_rule['id']}", headers=ana)
    assert rule.json()["last_generated"] == "2024-03-01"

    # Same day again: nothing new
    resp = await client.post(
        "/api/v1/recurring-transactions/generate",
        params={"reference_date": "2024-03-01"},
        headers=ana,
    )
    assert resp.json()["generated"] == 0
    assert resp.json()["entries"][0]["outcome"] == "skipped"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_generate_rejects_future_reference_date(client, auth_headers):
    future = (date.today() + timedelta(days=2)).isoformat()
    resp = await client.post(
        "/api/v1/recurring-transactions/generate",
        params={"reference_date": future},
        headers=auth_headers,
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_generate_only_touches_callers_rules(client, register_user, session_maker):
    ana, ana_user = await register_user("ana@example.com")
    ben, _ = await register_user("ben@example.com")
    ana_rule = await _create(client, ana, frequency="daily")

    for day in ("2024-01-05", "2024-01-06", "2024-01-07"):
        resp = await client.post(
            "/api/v1/recurring-transactions/generate",
            params={"reference_date": day},
            headers=ben,
        )
        assert resp.status_code == 200
        assert resp.json()["entries"] == []
        assert resp.json()["generated"] == 0

    async with session_maker() as session:
        result = await session.execute(select(ExpenseModel).where(ExpenseModel.user_id == ana_user["id"]))
        assert list(result.scalars().all()) == []

    rule = await client.get(f"/api/v1/recurring-transactions/{ana_rule['id']}", headers=ana)
    assert rule.json()["last_generated"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_start_date_cannot_move_past_last_generated(client, auth_headers):
    rule = await _create(client, auth_headers, frequency="daily")
    resp = await client.post(
        "/api/v1/recurring-transactions/generate",
        params={"reference_date": "2024-03-05"},
        headers=auth_headers,
    )
    assert resp.json()["generated"] == 1

    resp = await client.patch(
        f"/api/v1/recurring-transactions/{rule['id']}",
        json={"start_date": "2024-06-01"},
        headers=auth_headers,
    )
    assert resp.status_code == 422

    body = (await client.get(f"/api/v1/recurring-transactions/{rule['id']}", headers=auth_headers)).json()
    assert body["start_date"] == "2024-01-01"
    assert body["last_generated"] == "2024-03-05"

    resp = await client.patch(
        f"/api/v1/recurring-transactions/{rule['id']}",
        json={"start_date": "2024-03-05"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
