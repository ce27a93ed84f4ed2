# tests/test_api.py

import pytest
from fastapi.testclient import TestClient

from pcb_quote.api.endpoints.quote import get_quote_service
from pcb_quote.main import app
from pcb_quote.services.config_loader import EngineConfig
from pcb_quote.services.quote_service import QuoteService

REFERENCE_SPEC = {
    "layer_count": 2,
    "single_board_length_mm": 100,
    "single_board_width_mm": 100,
    "single_board_count": 10,
}


@pytest.fixture
def client():
    """
    TestClient without the lifespan, so the default quote service is used and
    no logging configuration is applied.
    """
    yield TestClient(app)
    app.dependency_overrides.clear()


def post_quote(client, **extra):
    body = {"spec": REFERENCE_SPEC, "order_time": "2025-06-09T10:00:00"}
    body.update(extra)
    return client.post("/api/v1/pcb/quote", json=body)


def test_quote_reference_order(client):
    response = post_quote(client)

    assert response.status_code == 200
    data = response.json()
    assert data["price_breakdown"]["total_extra_price"] == 300
    assert data["price_breakdown"]["detail"] == {"basePrice": 300, "testMethod": 0}
    assert data["price_breakdown"]["needs_review"] is False
    assert data["lead_time"]["cycle_days"] == 5
    assert data["estimated_finish_date"] == "2025-06-16"
    assert data["currency"] == "CNY"
    assert data["total_count"] == 10
    assert data["total_area_m2"] == 0.1


def test_quote_after_cutoff(client):
    response = post_quote(client, order_time="2025-06-09T20:00:00")
    data = response.json()

    assert data["lead_time"]["cycle_days"] == 6
    assert data["estimated_finish_date"] == "2025-06-17"


def test_quote_with_shipping_and_exchange_rate(client):
    response = post_quote(client, shipping_cost=50, exchange_rate=0.5, currency="USD")
    data = response.json()

    assert response.status_code == 200
    assert data["currency"] == "USD"
    assert data["price_breakdown"]["total_extra_price"] == pytest.approx(175)
    assert data["price_breakdown"]["detail"]["shippingCost"] == pytest.approx(25)
    assert data["price_breakdown"]["detail"]["basePrice"] == pytest.approx(150)


def test_currency_without_rate_is_rejected(client):
    response = post_quote(client, currency="USD")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_PARAMETERS"


def test_invalid_spec_is_rejected(client):
    response = client.post(
        "/api/v1/pcb/quote",
        json={"spec": {**REFERENCE_SPEC, "layer_count": 0}, "order_time": "2025-06-09T10:00:00"},
    )

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert any("layer_count" in detail["field"] for detail in error["details"])


def test_unknown_enum_value_is_rejected(client):
    response = client.post(
        "/api/v1/pcb/quote",
        json={"spec": {**REFERENCE_SPEC, "surface_finish": "Gold Plate"}, "order_time": "2025-06-09T10:00:00"},
    )
    assert response.status_code == 422


def test_urgent_options(client):
    response = client.post("/api/v1/pcb/urgent-options", json={"spec": REFERENCE_SPEC})
    data = response.json()

    assert response.status_code == 200
    assert data["supported"] is True
    assert data["max_reduce_days"] == 3
    assert [option["fee"] for option in data["options"]] == [100, 300, 600]


def test_urgent_options_not_supported(client):
    response = client.post("/api/v1/pcb/urgent-options", json={"spec": {**REFERENCE_SPEC, "layer_count": 12}})
    data = response.json()

    assert data["supported"] is False
    assert data["options"] == []


def test_health(client):
    response = client.get("/api/v1/pcb/health/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["table_version"] == "2025.1"


def test_injected_service_config(client):
    service = QuoteService(config=EngineConfig(order_cutoff_hour=9))
    app.dependency_overrides[get_quote_service] = lambda: service

    data = post_quote(client).json()

    assert data["lead_time"]["cycle_days"] == 6
    assert client.get("/api/v1/pcb/health/").json()["order_cutoff_hour"] == 9
