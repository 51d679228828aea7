"""HTTP API tests for the FastAPI session server."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tabsplit.runtime.ocr_client import OCRServiceUnavailable
from tabsplit.runtime.server import create_app, tip_policy_from_fields
from tabsplit.runtime.session_store import SessionStore
from tabsplit.split.tip import FixedCashAmount, PercentOfSubtotal


@pytest.fixture
def client(store: SessionStore) -> TestClient:
    return TestClient(create_app(store=store, ocr_url="http://ocr.test"))


def _chat(client: TestClient, text: str) -> dict:
    response = client.post("/api/chat", json={"text": text})
    assert response.status_code == 200, response.text
    return response.json()


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_chat_creates_orders_and_people(client: TestClient) -> None:
    payload = _chat(client, "Timo en Bart een biertje en pizza")

    assert payload["success"] is True
    assert payload["message"] == "Added 4 order(s)"
    assert [(o["person_name"], o["item"], o["quantity"]) for o in payload["orders"]] == [
        ("Timo", "bier", 1),
        ("Timo", "pizza", 1),
        ("Bart", "bier", 1),
        ("Bart", "pizza", 1),
    ]
    assert [p["name"] for p in payload["people"]] == ["Timo", "Bart"]

    orders = client.get("/api/orders").json()
    assert len(orders) == 4
    assert orders[0]["price"] is None
    assert orders[0]["estimated_price"] == "3.50"

    people = client.get("/api/people").json()
    assert [(p["name"], p["initial"], p["color"]) for p in people] == [("Timo", "T", "blue"), ("Bart", "B", "green")]


@pytest.mark.parametrize("body", [{"text": ""}, {"text": 5}, {}])
def test_chat_requires_text(client: TestClient, body: dict) -> None:
    assert client.post("/api/chat", json=body).status_code == 400


def test_chat_rejects_invalid_json(client: TestClient) -> None:
    response = client.post("/api/chat", content=b"not json", headers={"content-type": "application/json"})

    assert response.status_code == 400


def test_chat_without_orders(client: TestClient) -> None:
    response = client.post("/api/chat", json={"text": "Timo"})

    assert response.status_code == 422
    assert response.json()["success"] is False


def test_order_patch_and_delete(client: TestClient) -> None:
    orders = _chat(client, "Timo bier en cola")["orders"]
    bier_id, cola_id = orders[0]["id"], orders[1]["id"]

    response = client.patch(f"/api/orders/{bier_id}", json={"delta": 1})
    assert response.json()["order"]["quantity"] == 2

    response = client.patch(f"/api/orders/{bier_id}", json={"person_name": "Bart"})
    assert response.json()["order"]["person_name"] == "Bart"

    response = client.patch(f"/api/orders/{bier_id}", json={"person_name": None})
    assert response.json()["order"]["person_name"] is None

    assert client.patch(f"/api/orders/{bier_id}", json={"quantity": "2"}).status_code == 400
    assert client.patch(f"/api/orders/{bier_id}", json={"quantity": -1}).status_code == 400
    assert client.patch("/api/orders/missing", json={"delta": 1}).status_code == 404

    response = client.patch(f"/api/orders/{cola_id}", json={"quantity": 0})
    assert response.json() == {"success": True, "deleted": True}

    assert client.delete(f"/api/orders/{bier_id}").status_code == 200
    assert client.delete(f"/api/orders/{bier_id}").status_code == 404
    assert client.get("/api/orders").json() == []


def test_clear_orders(client: TestClient) -> None:
    _chat(client, "Timo bier en cola")

    response = client.delete("/api/orders")

    assert response.json()["message"] == "Cleared 2 order(s)"
    assert client.get("/api/orders").json() == []


def test_people_endpoints(client: TestClient) -> None:
    _chat(client, "Timo bier")

    created = client.post("/api/people", json={"name": "Kees"})
    assert created.status_code == 201
    assert client.post("/api/people", json={"name": "kees"}).status_code == 200
    assert client.post("/api/people", json={"name": ""}).status_code == 400

    timo_id = client.get("/api/people").json()[0]["id"]
    renamed = client.patch(f"/api/people/{timo_id}", json={"name": "Tim"})
    assert renamed.json()["person"]["initial"] == "T"
    assert client.get("/api/orders").json()[0]["person_name"] == "Tim"
    assert client.patch("/api/people/missing", json={"name": "X"}).status_code == 404

    removed = client.delete(f"/api/people/{timo_id}")
    assert removed.json() == {"success": True, "removed_orders": 1}
    assert client.get("/api/orders").json() == []
    assert client.delete(f"/api/people/{timo_id}").status_code == 404


def test_receipt_text_form_field(client: TestClient, cafe_receipt_text: str) -> None:
    _chat(client, "Timo 2 bier")
    _chat(client, "Bart pizza")

    response = client.post("/api/receipt", data={"text": cafe_receipt_text, "tip_percent": "10"})

    assert response.status_code == 200, response.text
    payload = response.json()
    assert payload["updated_count"] == 2
    split = payload["split"]
    assert split["total_tip"] == "1.55"
    assert split["grand_total"] == "17.05"
    assert [(r["person_name"], r["total"]) for r in split["results"]] == [("Timo", "7.78"), ("Bart", "9.27")]
    assert payload["receipt"]["totals"] == {"tip": "1.50", "subtotal": "15.50", "total": "17.00", "tax": None}

    history = client.get("/api/receipts").json()
    assert len(history) == 1
    assert history[0]["items"][0] == {"label": "Bier", "quantity": 2, "unit_price": "3.50", "total": "7.00"}
    assert history[0]["processed_at"]


def test_receipt_image_goes_through_ocr(
    client: TestClient, cafe_receipt_text: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: list[str] = []

    def fake_extract(image_bytes: bytes, filename: str, ocr_url: str) -> str:
        seen.append(ocr_url)
        return cafe_receipt_text

    monkeypatch.setattr("tabsplit.application.receipts.process.extract_receipt_text", fake_extract)
    _chat(client, "Timo 2 bier")

    response = client.post("/api/receipt", files={"receipt": ("kroeg.jpg", b"fake-jpeg", "image/jpeg")})

    assert response.status_code == 200, response.text
    assert seen == ["http://ocr.test"]
    # No tip field: the receipt's own tip line is used.
    assert response.json()["split"]["total_tip"] == "1.50"
    assert response.json()["receipt"]["file_name"] == "kroeg.jpg"


def test_receipt_ocr_outage_is_503(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_extract(image_bytes: bytes, filename: str, ocr_url: str) -> str:
        raise OCRServiceUnavailable("OCR service error: 500")

    monkeypatch.setattr("tabsplit.application.receipts.process.extract_receipt_text", failing_extract)
    _chat(client, "Timo 2 bier")

    response = client.post("/api/receipt", files={"receipt": ("kroeg.jpg", b"fake-jpeg", "image/jpeg")})

    assert response.status_code == 503


def test_receipt_request_errors(client: TestClient, cafe_receipt_text: str) -> None:
    assert client.post("/api/receipt", data={"text": cafe_receipt_text}).status_code == 400
    assert client.post("/api/receipt", data={"other": "x"}).status_code == 400

    _chat(client, "Timo bier")
    response = client.post("/api/receipt", data={"text": cafe_receipt_text, "tip_percent": "10", "tip_amount": "2"})
    assert response.status_code == 400


def test_split_endpoint(client: TestClient) -> None:
    assert client.post("/api/split", json={}).status_code == 400

    _chat(client, "Timo 2 bier")
    _chat(client, "Bart pizza")

    response = client.post("/api/split", json={"use_estimates": True, "tip_amount": "1,00"})

    assert response.status_code == 200
    split = response.json()["split"]
    assert split["grand_subtotal"] == "15.50"
    assert [(r["person_name"], r["tip_and_tax"]) for r in split["results"]] == [("Timo", "0.50"), ("Bart", "0.50")]
    assert client.post("/api/split", json={"tip_percent": "-5"}).status_code == 400


def test_tip_policy_from_fields() -> None:
    assert tip_policy_from_fields({}) is None
    assert tip_policy_from_fields({"tip_from_receipt": "true"}) is None
    assert tip_policy_from_fields({"tip_percent": "10"}) == PercentOfSubtotal(10)
    assert tip_policy_from_fields({"tip_amount": 2.5}) == FixedCashAmount("2.50")
    with pytest.raises(ValueError):
        tip_policy_from_fields({"tip_percent": "10", "tip_amount": "2"})
    with pytest.raises(ValueError):
        tip_policy_from_fields({"tip_amount": "veel"})
