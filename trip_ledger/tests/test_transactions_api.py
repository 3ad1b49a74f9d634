"""
Transactions API tests.

Covers the HTTP surface: routing by unified id, error codes, audit trail.
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select, text

from trip_ledger.app.models.adhoc_transaction import AdhocTransaction
from trip_ledger.app.models.fixed_transaction import FixedTransaction

BASE = "/v1/transactions"


@pytest.mark.asyncio
async def test_requires_bearer_token(client):
    response = await client.get(BASE)

    assert response.status_code == 401
    assert response.json()["error_code"] == "ERR_AUTH_001"


@pytest.mark.asyncio
async def test_rejects_invalid_token(client):
    response = await client.get(BASE, headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_adhoc_trip(client, auth_headers, adhoc_draft):
    response = await client.post(BASE, json=adhoc_draft(), headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["unified_id"] == "ADH-1"
    assert body["store"] == "Adhoc"
    assert body["local_id"] == 1
    assert body["trip_type"] == "Adhoc"
    assert body["fixed"] is None
    assert body["adhoc"]["trip_no"] == "TRIP-0042"
    assert body["adhoc"]["advance"]["paid_mode"] == "UPI"
    assert Decimal(body["financials"]["total_freight"]) == Decimal("1550")
    assert Decimal(body["financials"]["balance_to_be_paid"]) == Decimal("1050")
    assert Decimal(body["financials"]["variance"]) == Decimal("-50")
    assert Decimal(body["charges"]["advance_paid"]) == Decimal("500")


@pytest.mark.asyncio
async def test_create_fixed_trip(client, auth_headers, fixed_draft):
    response = await client.post(BASE, json=fixed_draft(), headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["unified_id"] == "FIX-1"
    assert body["fixed"]["vehicle_ids"] == [5, 6]
    assert body["fixed"]["primary_vehicle_id"] == 5
    assert body["fixed"]["primary_driver_id"] == 9
    assert body["charges"]["per_km_variable_rate"] is None
    assert body["financials"]["km_travelled"] == 80
    assert Decimal(body["financials"]["total_freight"]) == Decimal("900")


@pytest.mark.asyncio
async def test_both_stores_start_at_one_without_collision(client, auth_headers, adhoc_draft, fixed_draft):
    fixed = await client.post(BASE, json=fixed_draft(), headers=auth_headers)
    adhoc = await client.post(BASE, json=adhoc_draft(), headers=auth_headers)

    assert fixed.json()["local_id"] == adhoc.json()["local_id"] == 1
    assert fixed.json()["unified_id"] != adhoc.json()["unified_id"]

    fetched = await client.get(f"{BASE}/ADH-1", headers=auth_headers)
    assert fetched.json()["trip_type"] == "Adhoc"


@pytest.mark.asyncio
async def test_create_missing_fields_lists_them(client, auth_headers, adhoc_draft):
    draft = adhoc_draft()
    del draft["driver_number"]
    del draft["vendor_name"]

    response = await client.post(BASE, json=draft, headers=auth_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "ERR_VALIDATION_001"
    assert body["details"]["fields"] == ["driver_number", "vendor_name"]


@pytest.mark.asyncio
async def test_create_rejects_derived_field(client, auth_headers, adhoc_draft):
    response = await client.post(BASE, json=adhoc_draft(total_freight="1.00"), headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["details"]["fields"] == ["total_freight"]


@pytest.mark.asyncio
async def test_create_rejects_unknown_field(client, auth_headers, fixed_draft):
    response = await client.post(BASE, json=fixed_draft(vehicle_number="KA01"), headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["details"]["fields"] == ["vehicle_number"]


@pytest.mark.asyncio
async def test_get_unknown_id_is_404(client, auth_headers):
    response = await client.get(f"{BASE}/FIX-99", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_id,error_code", [
    ("12", "ERR_ID_001"),
    ("FIX-0", "ERR_ID_001"),
    ("FIX-abc", "ERR_ID_001"),
    ("FIX-2147483648", "ERR_ID_001"),
    ("ADH-99999999999999999999", "ERR_ID_001"),
    ("ZZZ-1", "ERR_ID_002"),
])
async def test_bad_ids_are_400(client, auth_headers, bad_id, error_code):
    for method in ("get", "delete"):
        response = await getattr(client, method)(f"{BASE}/{bad_id}", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == error_code

    response = await client.put(f"{BASE}/{bad_id}", json={"remarks": "x"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error_code"] == error_code


@pytest.mark.asyncio
async def test_update_patches_only_target_record(client, auth_headers, adhoc_draft, fixed_draft):
    await client.post(BASE, json=fixed_draft(), headers=auth_headers)
    await client.post(BASE, json=adhoc_draft(), headers=auth_headers)

    response = await client.put(
        f"{BASE}/ADH-1", json={"closing_km": 200, "remarks": "odometer corrected"}, headers=auth_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["remarks"] == "odometer corrected"
    assert body["financials"]["km_travelled"] == 100
    assert Decimal(body["financials"]["total_freight"]) == Decimal("2050")

    fixed = await client.get(f"{BASE}/FIX-1", headers=auth_headers)
    assert fixed.json()["remarks"] is None
    assert fixed.json()["closing_km"] == 1080


@pytest.mark.asyncio
async def test_update_rejections(client, auth_headers, adhoc_draft):
    await client.post(BASE, json=adhoc_draft(), headers=auth_headers)

    for patch, field in (
        ({"trip_type": "Fixed"}, "trip_type"),
        ({"margin": "10"}, "margin"),
        ({"unified_id": "ADH-9"}, "unified_id"),
        ({"driver_number": "123"}, "driver_number"),
    ):
        response = await client.put(f"{BASE}/ADH-1", json=patch, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["details"]["fields"] == [field]


@pytest.mark.asyncio
async def test_update_missing_is_404(client, auth_headers):
    response = await client.put(f"{BASE}/ADH-5", json={"remarks": "x"}, headers=auth_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_then_gone(client, auth_headers, fixed_draft):
    await client.post(BASE, json=fixed_draft(), headers=auth_headers)

    response = await client.delete(f"{BASE}/FIX-1", headers=auth_headers)
    assert response.status_code == 204

    assert (await client.get(f"{BASE}/FIX-1", headers=auth_headers)).status_code == 404
    assert (await client.delete(f"{BASE}/FIX-1", headers=auth_headers)).status_code == 404


@pytest.mark.asyncio
async def test_list_merges_stores(client, auth_headers, adhoc_draft, fixed_draft):
    await client.post(BASE, json=fixed_draft(), headers=auth_headers)
    await client.post(BASE, json=adhoc_draft(), headers=auth_headers)
    await client.post(BASE, json=adhoc_draft(trip_type="Replacement"), headers=auth_headers)

    response = await client.get(BASE, params={"limit": 2}, headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["total_approx"] == 3
    assert body["limit"] == 2
    assert body["warnings"] == []
    assert [item["display_serial"] for item in body["items"]] == [1, 2]

    response = await client.get(BASE, params={"offset": 2, "limit": 2}, headers=auth_headers)
    assert [item["display_serial"] for item in response.json()["items"]] == [3]


@pytest.mark.asyncio
async def test_list_filters_by_trip_type(client, auth_headers, adhoc_draft, fixed_draft):
    await client.post(BASE, json=fixed_draft(), headers=auth_headers)
    await client.post(BASE, json=adhoc_draft(), headers=auth_headers)

    response = await client.get(BASE, params={"trip_type": "Fixed"}, headers=auth_headers)

    assert [item["unified_id"] for item in response.json()["items"]] == ["FIX-1"]


@pytest.mark.asyncio
async def test_list_limit_ceiling(client, auth_headers):
    response = await client.get(BASE, params={"limit": 501}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["details"]["fields"] == ["limit"]


@pytest.mark.asyncio
async def test_list_inverted_date_range(client, auth_headers):
    response = await client.get(
        BASE, params={"from_date": "2026-10-05", "to_date": "2026-10-01"}, headers=auth_headers
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_bad_query_type_is_422(client, auth_headers):
    response = await client.get(BASE, params={"limit": "ten"}, headers=auth_headers)

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_summary_endpoint(client, auth_headers, adhoc_draft, fixed_draft):
    await client.post(BASE, json=fixed_draft(), headers=auth_headers)
    await client.post(BASE, json=adhoc_draft(revenue_override="2000.00"), headers=auth_headers)

    response = await client.get(f"{BASE}/summary", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["transaction_count"] == 2
    assert body["by_trip_type"] == {"Fixed": 1, "Adhoc": 1}
    assert body["total_km"] == 130
    assert Decimal(body["total_freight"]) == Decimal("2450")
    assert Decimal(body["total_revenue"]) == Decimal("2900")
    assert Decimal(body["total_margin"]) == Decimal("450")


@pytest.mark.asyncio
async def test_health_and_root(client):
    assert (await client.get("/health")).json()["status"] == "healthy"
    assert (await client.get("/")).json()["transactions"] == "/v1/transactions"


@pytest.mark.asyncio
async def test_correlation_id_echoed(client, auth_headers):
    response = await client.get(BASE, headers={**auth_headers, "X-Correlation-ID": "trace-123"})

    assert response.headers["X-Correlation-ID"] == "trace-123"


@pytest.mark.asyncio
async def test_audit_trail_endpoint(client, auth_headers, adhoc_draft):
    await client.post(BASE, json=adhoc_draft(), headers=auth_headers)
    await client.put(f"{BASE}/ADH-1", json={"remarks": "late"}, headers=auth_headers)
    await client.delete(f"{BASE}/adh-1", headers=auth_headers)

    response = await client.get(f"{BASE}/adh-1/audit", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["unified_id"] == "ADH-1"
    assert body["total"] == 3
    assert {log["action"] for log in body["logs"]} == {
        "TRANSACTION_CREATED",
        "TRANSACTION_UPDATED",
        "TRANSACTION_DELETED",
    }
    assert all(log["target_id"] == "ADH-1" for log in body["logs"])
    assert all(log["actor_id"] == 7 and log["actor_username"] == "ops_desk" for log in body["logs"])
    updated = next(log for log in body["logs"] if log["action"] == "TRANSACTION_UPDATED")
    assert updated["meta_data"] == {"store": "ADH", "fields": ["remarks"]}


@pytest.mark.asyncio
async def test_audit_trail_is_per_record(client, auth_headers, adhoc_draft, fixed_draft):
    await client.post(BASE, json=fixed_draft(), headers=auth_headers)
    await client.post(BASE, json=adhoc_draft(), headers=auth_headers)

    fixed = (await client.get(f"{BASE}/FIX-1/audit", headers=auth_headers)).json()
    untouched = (await client.get(f"{BASE}/ADH-9/audit", headers=auth_headers)).json()

    assert [log["target_id"] for log in fixed["logs"]] == ["FIX-1"]
    assert fixed["logs"][0]["meta_data"] == {"store": "FIX", "trip_type": "Fixed"}
    assert untouched == {"unified_id": "ADH-9", "logs": [], "total": 0}


@pytest.mark.asyncio
async def test_audit_trail_rejects_bad_ids(client, auth_headers):
    malformed = await client.get(f"{BASE}/FIX-0/audit", headers=auth_headers)
    unknown = await client.get(f"{BASE}/ZZZ-1/audit", headers=auth_headers)

    assert malformed.status_code == 400
    assert malformed.json()["error_code"] == "ERR_ID_001"
    assert unknown.status_code == 400
    assert unknown.json()["error_code"] == "ERR_ID_002"


async def count_rows(db_session, model):
    result = await db_session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_create_without_audit_store_persists_nothing(client, auth_headers, adhoc_draft, fixed_draft, db_session):
    await db_session.execute(text("DROP TABLE audit_logs"))
    await db_session.commit()

    for draft in (fixed_draft(), adhoc_draft()):
        response = await client.post(BASE, json=draft, headers=auth_headers)
        assert response.status_code == 503
        assert response.json()["error_code"] == "ERR_STORE_IO_001"

    assert await count_rows(db_session, FixedTransaction) == 0
    assert await count_rows(db_session, AdhocTransaction) == 0


@pytest.mark.asyncio
async def test_update_and_delete_without_audit_store_change_nothing(client, auth_headers, adhoc_draft, db_session):
    await client.post(BASE, json=adhoc_draft(), headers=auth_headers)
    await db_session.execute(text("DROP TABLE audit_logs"))
    await db_session.commit()

    updated = await client.put(f"{BASE}/ADH-1", json={"remarks": "late"}, headers=auth_headers)
    deleted = await client.delete(f"{BASE}/ADH-1", headers=auth_headers)

    assert updated.status_code == 503
    assert deleted.status_code == 503
    response = await client.get(f"{BASE}/ADH-1", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["remarks"] is None


@pytest.mark.asyncio
async def test_list_filters_by_vehicle(client, auth_headers, adhoc_draft, fixed_draft):
    await client.post(BASE, json=fixed_draft(vehicle_ids=[5, 6]), headers=auth_headers)
    await client.post(BASE, json=fixed_draft(vehicle_ids=[15]), headers=auth_headers)
    await client.post(BASE, json=adhoc_draft(vehicle_number="KA01AB1234"), headers=auth_headers)
    await client.post(BASE, json=adhoc_draft(vehicle_number="MH12XY9999"), headers=auth_headers)

    by_id = await client.get(BASE, params={"vehicle_id": 5}, headers=auth_headers)
    by_number = await client.get(BASE, params={"vehicle_number": " ka01 ab1234 "}, headers=auth_headers)

    assert [item["unified_id"] for item in by_id.json()["items"]] == ["FIX-1"]
    assert by_id.json()["total_approx"] == 1
    assert [item["unified_id"] for item in by_number.json()["items"]] == ["ADH-1"]


@pytest.mark.asyncio
async def test_summary_filters_by_vehicle(client, auth_headers, adhoc_draft, fixed_draft):
    await client.post(BASE, json=fixed_draft(vehicle_ids=[5]), headers=auth_headers)
    await client.post(BASE, json=fixed_draft(vehicle_ids=[7]), headers=auth_headers)
    await client.post(BASE, json=adhoc_draft(), headers=auth_headers)

    response = await client.get(f"{BASE}/summary", params={"vehicle_id": 7}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["transaction_count"] == 1
    assert response.json()["by_trip_type"] == {"Fixed": 1}
