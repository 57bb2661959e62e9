# tests/test_dashboard.py

"""
Tests for dashboard aggregation.
"""

from datetime import date
from unittest.mock import patch

from fastapi.testclient import TestClient

from services.dashboard import build_dashboard, last_months

TODAY = date(2025, 3, 15)

CONDOS = [{"id": "c1"}, {"id": "c2"}]
SUPPLIERS = [{"id": "s1"}, {"id": "s2"}, {"id": "s3"}]


def _request(rid, status, opening_date, service_types, final_value=None, condo=("c1", "Aurora"), supplier=("s1", "Hidro Já")):
    return {
        "id": rid,
        "status": status,
        "opening_date": opening_date,
        "service_types": service_types,
        "final_value": final_value,
        "condominium_id": condo[0] if condo else None,
        "condominium": {"name": condo[1]} if condo else None,
        "supplier_id": supplier[0] if supplier else None,
        "supplier": {"name": supplier[1]} if supplier else None,
    }


REQUESTS = [
    _request("m1", "completed", "2025-03-02T10:00:00Z", ["Hidráulica", "Obras"], 1000.1),
    _request("m2", "completed", "2025-02-10T10:00:00Z", ["Elétrica"], 250.0, supplier=("s2", "Eletro")),
    _request("m3", "open", "2025-03-10T10:00:00Z", ["Hidráulica"], condo=("c2", "Bela Vista")),
    _request("m4", "in_progress", "2024-12-20T10:00:00Z", ["Pintura"], 80.0, condo=None, supplier=None),
    _request("m5", "open", "2024-08-01T10:00:00Z", ["Limpeza"]),
]


def test_counts_and_totals():
    data = build_dashboard(CONDOS, SUPPLIERS, REQUESTS, today=TODAY)

    assert data["total_condominiums"] == 2
    assert data["total_suppliers"] == 3
    assert data["open_maintenance"] == 2
    assert data["in_progress_maintenance"] == 1
    assert data["completed_maintenance"] == 2
    # only completed requests count towards spending
    assert data["total_spent"] == 1250.1


def test_spent_by_service_type_counts_each_type_fully():
    data = build_dashboard(CONDOS, SUPPLIERS, REQUESTS, today=TODAY)

    assert data["total_spent_by_service_type"] == {
        "Hidráulica": 1000.1,
        "Obras": 1000.1,
        "Elétrica": 250.0,
    }


def test_completed_without_final_value_not_in_spend_by_type():
    unpriced = _request("m9", "completed", "2025-03-05T10:00:00Z", ["Jardinagem"])
    data = build_dashboard(CONDOS, SUPPLIERS, REQUESTS + [unpriced], today=TODAY)

    assert "Jardinagem" not in data["total_spent_by_service_type"]
    assert data["completed_maintenance"] == 3


def test_monthly_trend_last_six_months():
    data = build_dashboard(CONDOS, SUPPLIERS, REQUESTS, today=TODAY)
    trend = data["monthly_trend"]

    assert [m["month"] for m in trend] == ["out", "nov", "dez", "jan", "fev", "mar"]
    assert trend[0]["year_month"] == "2024-10"
    assert trend[-1] == {"month": "mar", "year_month": "2025-03", "count": 2, "spent": 1000.1}
    # trend spending includes any status with a final value
    assert trend[2] == {"month": "dez", "year_month": "2024-12", "count": 1, "spent": 80.0}


def test_last_months_crosses_year():
    assert last_months(date(2025, 1, 31), 3) == [(2024, 11), (2024, 12), (2025, 1)]


def test_top_suppliers_and_condominium_stats():
    data = build_dashboard(CONDOS, SUPPLIERS, REQUESTS, today=TODAY)

    assert data["top_suppliers"][0] == {"name": "Hidro Já", "count": 3}
    assert {"name": "Eletro", "count": 1} in data["top_suppliers"]

    stats = data["condominium_stats"]
    assert stats[0]["name"] == "Aurora"
    assert stats[0]["total_maintenance"] == 3
    assert stats[0]["completed_maintenance"] == 2
    assert stats[0]["service_types"]["Hidráulica"] == 1
    assert any(s["name"] == "Sem condomínio" for s in stats)


def test_filters_apply_before_recent_limit():
    many = [
        _request(f"x{i}", "open", f"2025-03-{i + 1:02d}T08:00:00Z", ["Limpeza"], condo=("c2", "Bela Vista"))
        for i in range(10)
    ]
    data = build_dashboard(CONDOS, SUPPLIERS, REQUESTS + many, condominium_id="c1", today=TODAY)

    recent_ids = [r["id"] for r in data["recent_maintenance"]]
    assert recent_ids == ["m1", "m2", "m5"]
    # unfiltered totals
    assert data["total_condominiums"] == 2


def test_recent_limited_to_eight_newest():
    many = [
        _request(f"x{i}", "open", f"2025-02-{i + 1:02d}T08:00:00Z", ["Limpeza"])
        for i in range(12)
    ]
    data = build_dashboard(CONDOS, SUPPLIERS, many, today=TODAY)

    assert [r["id"] for r in data["recent_maintenance"]] == [f"x{i}" for i in range(11, 3, -1)]


def test_service_type_filter_and_all():
    only_paint = build_dashboard(CONDOS, SUPPLIERS, REQUESTS, service_type="Pintura", today=TODAY)
    everything = build_dashboard(CONDOS, SUPPLIERS, REQUESTS, service_type="all", today=TODAY)

    assert only_paint["in_progress_maintenance"] == 1
    assert only_paint["open_maintenance"] == 0
    assert len(everything["recent_maintenance"]) == 5


def test_dashboard_endpoint(auth_client: TestClient, make_query, make_client):
    supabase = make_client({
        "condominiums": make_query(CONDOS),
        "suppliers": make_query(SUPPLIERS),
        "maintenance_requests": make_query(REQUESTS),
    })

    with patch("routers.dashboard.require_client", return_value=supabase):
        response = auth_client.get("/dashboard", params={"supplier_id": "s2"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["completed_maintenance"] == 1
    assert data["total_spent"] == 250.0
