"""Tests for the HTTP API."""

from __future__ import annotations

import copy

import pytest
from fastapi.testclient import TestClient

from main import app
from tests.conftest import make_raw_quote, make_zone_pricing


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


RATE_REQUEST = {
    "zone": "withinMetro",
    "actualWeight": 1.0,
    "length": 30,
    "breadth": 20,
    "height": 15,
    "paymentType": "cod",
    "collectableAmount": 500,
    "couriers": [
        {
            "courier": {
                "id": "101",
                "name": "Delhivery Surface",
                "courier_code": "delhivery_surface",
            },
            "pricing": {
                "courierId": "101",
                "cod_charge_hard": 25,
                "cod_charge_percent": 2,
                "zonePricing": make_zone_pricing(),
            },
        }
    ],
}


class TestStatus:
    def test_status(self, client: TestClient) -> None:
        response = client.get("/status")
        assert response.status_code == 200
        assert response.json() == {"status": "OK"}


class TestRateCalculator:
    """Tests for POST /api/v1/ratecalculator."""

    def test_rates(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/ratecalculator",
            json=RATE_REQUEST,
            headers={"X-Account-Id": "42", "X-Request-Id": "req-1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] is True
        assert body["message"] == "Rates calculated successfully"
        assert "status_code" not in body
        assert body["data"][0]["zone"] == "C"
        assert body["data"][0]["pricing"]["totalPrice"] == 140
        assert response.headers["X-Request-Id"] == "req-1"

    def test_no_rates(self, client: TestClient) -> None:
        request = copy.deepcopy(RATE_REQUEST)
        request["couriers"][0]["courier"]["is_active"] = False

        response = client.post("/api/v1/ratecalculator", json=request)

        assert response.status_code == 200
        assert response.json()["data"] == []
        assert response.json()["message"] == "No rates available"

    def test_invalid_weight(self, client: TestClient) -> None:
        request = dict(RATE_REQUEST, actualWeight=-1)

        response = client.post("/api/v1/ratecalculator", json=request)

        assert response.status_code == 422
        assert response.json()["status"] is False

    def test_missing_zone_in_rate_card(self, client: TestClient) -> None:
        request = copy.deepcopy(RATE_REQUEST)
        del request["couriers"][0]["pricing"]["zonePricing"]["E"]

        response = client.post("/api/v1/ratecalculator", json=request)

        assert response.status_code == 422
        body = response.json()
        assert body["status"] is False
        assert "zonePricing" in body["data"]["fields"]


class TestNormalizeRates:
    def test_normalize(self, client: TestClient) -> None:
        broken = make_raw_quote()
        del broken["courier"]["courier_code"]

        response = client.post(
            "/api/v1/rates/normalize",
            json={"quotes": [make_raw_quote(total_price=90), broken, make_raw_quote()]},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["dropped"] == 1
        assert [quote["pricing"]["totalPrice"] for quote in data["quotes"]] == [90, 140]


class TestPlanEndpoints:
    """Tests for the shipping plan endpoints."""

    def test_diff(self, client: TestClient) -> None:
        original = [
            {"courierId": "1", "zonePricing": make_zone_pricing()},
            {"courierId": "2", "zonePricing": make_zone_pricing()},
        ]
        current = copy.deepcopy(original)
        current[1]["zonePricing"]["B"]["base_price"] = 40.02

        response = client.post(
            "/api/v1/plans/diff", json={"current": current, "original": original}
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"hasChanges": True, "changedCouriers": [1]}

    def test_keyed_diff(self, client: TestClient) -> None:
        original = [
            {"courierId": "1", "zonePricing": make_zone_pricing()},
            {"courierId": "2", "zonePricing": make_zone_pricing()},
        ]
        current = [
            {"courierId": "2", "zonePricing": make_zone_pricing(45)},
            {"courierId": "1", "zonePricing": make_zone_pricing()},
        ]

        response = client.post(
            "/api/v1/plans/diff",
            json={"current": current, "original": original, "keyed_by_courier_id": True},
        )

        assert response.json()["data"] == {"hasChanges": True, "changedCouriers": ["2"]}

    def test_price_adjustment(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/plans/price-adjustment",
            json={
                "courierPricing": [
                    {"courierId": "1", "zonePricing": make_zone_pricing()},
                    {"courierId": "2", "zonePricing": make_zone_pricing()},
                ],
                "selectedIndices": [0],
                "adjustmentPercent": 10,
            },
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["courierPricing"][0]["zonePricing"]["A"]["base_price"] == 44
        assert data["courierPricing"][1]["zonePricing"]["A"]["base_price"] == 40
        assert data["diff"] == {"hasChanges": True, "changedCouriers": [0]}

    def test_price_adjustment_rejects_unknown_index(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/plans/price-adjustment",
            json={
                "courierPricing": [{"courierId": "1", "zonePricing": make_zone_pricing()}],
                "selectedIndices": [3],
                "adjustmentPercent": 10,
            },
        )

        assert response.status_code == 400
        assert response.json()["status"] is False

    def test_price_adjustment_rejects_cut_below_zero(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/plans/price-adjustment",
            json={
                "courierPricing": [{"courierId": "1", "zonePricing": make_zone_pricing()}],
                "selectedIndices": [0],
                "adjustmentPercent": -150,
            },
        )

        assert response.status_code == 400
        assert response.json()["status"] is False
