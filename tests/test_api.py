"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from gst_invoicing.api.main import app


@pytest.fixture
def client():
    return TestClient(app)


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["version"] == "1.0.0"


def test_profile(client):
    data = client.get("/api/profile").json()

    assert data["name"] == "default"
    assert data["tax_presets"] == [0.0, 5.0, 18.0, 40.0]
    assert data["default_unit"] == "Piece"


def test_recompute(client):
    response = client.post("/api/documents/recompute", json={
        "type": "sales",
        "companyGstin": "27ABCDE1234F1Z5",
        "items": [
            {"product": "p1", "quantity": 2, "pricePerUnit": 100},
            {"service": "s1", "amount": 1000, "gstPercentage": 5},
        ],
    })

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "OK"
    assert data["tax_enabled"] is True
    assert data["payload"]["products"][0]["lineTotal"] == 236.0
    assert data["payload"]["services"][0]["lineTotal"] == 1050.0
    assert data["payload"]["invoiceTotal"] == 1286.0
    assert any(c["field"] == "invoice_total" for c in data["changes"])


def test_recompute_with_edit_intent(client):
    response = client.post("/api/documents/recompute", json={
        "taxEnabled": True,
        "items": [{"product": "p1", "quantity": 2, "lineTotal": 118}],
        "editIntents": {"0": "lineTotal"},
    })

    product = response.json()["payload"]["products"][0]
    assert product["amount"] == 100.0
    assert product["pricePerUnit"] == 50.0


def test_recompute_without_gstin(client):
    data = client.post("/api/documents/recompute", json={
        "items": [{"product": "p1", "quantity": 1, "pricePerUnit": 100}],
    }).json()

    assert data["tax_enabled"] is False
    assert data["payload"]["taxAmount"] == 0.0
    assert data["payload"]["invoiceTotal"] == 100.0


def test_recompute_reports_validation(client):
    data = client.post("/api/documents/recompute", json={
        "items": [{"product": "", "quantity": 0, "pricePerUnit": 10}],
    }).json()

    assert data["status"] == "REVIEW"
    assert {e["message"] for e in data["errors"]} == {"Select a product", "Quantity must be > 0"}
    assert data["errors"][0]["line_index"] == 0


@pytest.mark.parametrize(
    "body",
    [
        {"type": "credit_note"},
        {"items": [{"product": "p1"}], "editIntents": {"0": "discount"}},
    ],
)
def test_recompute_bad_request(client, body):
    assert client.post("/api/documents/recompute", json=body).status_code == 400


def test_negative_stored_amount_reported_not_rejected(client):
    response = client.post("/api/documents/recompute", json={
        "companyGstin": "27ABCDE1234F1Z5",
        "items": [{"product": "p1", "quantity": 1, "pricePerUnit": 10, "amount": -5}],
        "editIntents": {"0": "amount"},
    })

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "REVIEW"
    assert "Amount must be >= 0" in [e["message"] for e in data["errors"]]


def test_negative_line_total_can_be_posted_back(client):
    body = {
        "companyGstin": "27ABCDE1234F1Z5",
        "items": [{"product": "p1", "quantity": 1, "pricePerUnit": 0, "lineTotal": -10}],
        "editIntents": {"0": "lineTotal"},
    }
    first = client.post("/api/documents/recompute", json=body).json()
    row = first["payload"]["products"][0]
    assert row["amount"] == -8.47
    assert row["pricePerUnit"] == -8.47

    body["items"] = [row]
    response = client.post("/api/documents/recompute", json=body)

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "REVIEW"
    assert all(change["line_index"] is None for change in data["changes"])
    assert "Amount must be >= 0" in [e["message"] for e in data["errors"]]


def test_profile_selected_by_environment(client, tmp_path, monkeypatch):
    (tmp_path / "retail.yaml").write_text(
        "name: retail\ndefault_tax_rate: 5\ndefault_unit: Kg\n", encoding="utf-8"
    )
    monkeypatch.setenv("GST_INVOICING_PROFILES_DIR", str(tmp_path))
    monkeypatch.setenv("GST_INVOICING_PROFILE", "retail")

    profile = client.get("/api/profile").json()
    assert profile["name"] == "retail"
    assert profile["default_unit"] == "Kg"

    data = client.post("/api/documents/recompute", json={"companyGstin": "27ABCDE1234F1Z5"}).json()
    product = data["payload"]["products"][0]
    assert product["unitType"] == "Kg"
    assert product["gstPercentage"] == 5.0
