from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from finance_model import SpendingSnapshot
from inflation_engine import compare_inflation
from main import app, reload_engine_settings_for_tests


def build_payload(**profile_overrides) -> dict:
    profile = {
        "user_id": "user-1",
        "age": 28,
        "monthly_income": 125000,
        "location": "Mumbai, Maharashtra",
        "risk_tier": "aggressive",
        "profession": "Software Engineer",
    }
    profile.update(profile_overrides)
    return {
        "profile": profile,
        "spending": {"food": 20000, "housing": 35000, "transport": 10000, "entertainment": 8000},
        "portfolio": {"bank_balance": 300000, "mutual_funds": 200000, "stocks": 100000},
        "existing_goals": [],
        "as_of": "2024-03-15",
    }


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_health_route_reports_personalization_service(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "personalization-service"}


def test_personalize_returns_full_view(client: TestClient) -> None:
    response = client.post("/personalize", json=build_payload())

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"inflation", "thresholds", "goals", "recommendations", "location"}
    assert body["inflation"]["personal_rate"] > 6.5
    assert body["goals"][0]["id"] == "emergency_fund"
    assert body["goals"][0]["target_date"] == "2025-03-15"
    assert body["location"]["tier"] == "Tier 1"


def test_personalize_keeps_existing_goals(client: TestClient) -> None:
    payload = build_payload()
    payload["existing_goals"] = [
        {
            "id": "emergency_fund",
            "title": "My Emergency Fund",
            "category": "Safety",
            "target_amount": 400000,
            "current_amount": 50000,
            "monthly_contribution": 10000,
            "target_date": "2025-01-01",
        }
    ]

    body = client.post("/personalize", json=payload).json()
    emergency = [goal for goal in body["goals"] if goal["id"] == "emergency_fund"]

    assert len(emergency) == 1
    assert emergency[0]["title"] == "My Emergency Fund"
    assert emergency[0]["base_target_amount"] == 400000


def test_out_of_range_age_maps_to_invalid_input(client: TestClient) -> None:
    response = client.post("/personalize", json=build_payload(age=17))

    assert response.status_code == 422
    assert response.json()["error"] == "invalid_input"
    assert "age" in response.json()["detail"]


def test_negative_spending_maps_to_invalid_input(client: TestClient) -> None:
    payload = build_payload()
    payload["spending"]["food"] = -100

    response = client.post("/personalize", json=payload)

    assert response.status_code == 422
    assert response.json()["error"] == "invalid_input"


def test_unknown_risk_tier_fails_schema_validation(client: TestClient) -> None:
    response = client.post("/personalize", json=build_payload(risk_tier="reckless"))

    assert response.status_code == 422
    assert "detail" in response.json()
    assert "error" not in response.json()


def test_inflation_endpoint(client: TestClient) -> None:
    response = client.post(
        "/inflation",
        json={"spending": {}, "location": "Delhi", "as_of": "2024-07-01"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["personal_rate"] == body["location_adjusted_baseline"]
    assert body["government_baseline"] == 6.5


def test_request_id_is_echoed(client: TestClient) -> None:
    response = client.get("/health", headers={"x-request-id": "req-123"})

    assert response.headers["x-request-id"] == "req-123"


def test_settings_reload_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("PERSONALIZATION_MAX_OPTIMIZATIONS", "1")
    try:
        assert reload_engine_settings_for_tests().max_optimizations_per_goal == 1
    finally:
        monkeypatch.delenv("PERSONALIZATION_MAX_OPTIMIZATIONS")
        reload_engine_settings_for_tests()


def test_inflation_horizon_defaults_to_configured_setting(client: TestClient, monkeypatch) -> None:
    spending = {"food": 20000, "housing": 10000, "transport": 5000}
    monkeypatch.setenv("PERSONALIZATION_INFLATION_HORIZON_MONTHS", "3")
    try:
        reload_engine_settings_for_tests()
        response = client.post("/inflation", json={"spending": spending, "location": "Delhi", "as_of": "2024-07-01"})
    finally:
        monkeypatch.delenv("PERSONALIZATION_INFLATION_HORIZON_MONTHS")
        reload_engine_settings_for_tests()

    expected = compare_inflation(SpendingSnapshot(amounts=spending), date(2024, 7, 1), "Delhi", 3)
    assert response.status_code == 200
    assert response.json()["personal_rate"] == expected.personal_rate
