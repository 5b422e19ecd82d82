"""
HTTP tests for the assistant, session, catalog and webhook routes.
"""

from __future__ import annotations

import base64

import pytest
from fastapi.testclient import TestClient

from shopmate.application.use_cases.converse import COLLECT_INFO_MARKER
from shopmate.application.use_cases.manage_orders import ManageOrdersUseCase
from shopmate.main import app
from shopmate.wiring import dependencies

IMAGE_B64 = base64.b64encode(b"fake-jpeg-bytes").decode("ascii")


@pytest.fixture
def client(llm, catalog, orders, matcher, converse, create_order, sessions):
    app.dependency_overrides = {
        dependencies.get_match_product_use_case: lambda: matcher,
        dependencies.get_converse_use_case: lambda: converse,
        dependencies.get_create_order_use_case: lambda: create_order,
        dependencies.get_session_controller: lambda: sessions,
        dependencies.get_catalog: lambda: catalog,
        dependencies.get_manage_orders_use_case: lambda: ManageOrdersUseCase(orders=orders, catalog=catalog),
    }
    yield TestClient(app)
    app.dependency_overrides = {}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_analyze_image_found(client, llm):
    llm.keywords = "boots"

    resp = client.post("/api/analyze-image", json={"imageBase64": IMAGE_B64, "imageMime": "image/jpeg"})

    assert resp.status_code == 200
    product = resp.json()["foundProduct"]
    assert product["code"] == "BOOT-BR"
    assert product["stock"] == 8


def test_analyze_image_accepts_data_url(client, llm):
    llm.keywords = "boots"

    resp = client.post("/api/analyze-image", json={"imageBase64": f"data:image/png;base64,{IMAGE_B64}"})

    assert resp.status_code == 200
    assert resp.json()["foundProduct"]["id"] == "p-3"


def test_analyze_image_not_found_has_message(client, llm):
    llm.keywords = "teapot"

    body = client.post("/api/analyze-image", json={"imageBase64": IMAGE_B64}).json()

    assert body["foundProduct"] is None
    assert body["message"]


def test_analyze_image_requires_valid_base64(client, llm):
    assert client.post("/api/analyze-image", json={}).status_code == 400
    assert client.post("/api/analyze-image", json={"imageBase64": "%%%not-base64"}).status_code == 400
    assert llm.calls == []


def test_analyze_image_upstream_failure(client, llm, upstream_error):
    llm.fail_with = upstream_error

    resp = client.post("/api/analyze-image", json={"imageBase64": IMAGE_B64})

    assert resp.status_code == 502
    assert "quota" in resp.json()["detail"]


def test_chat_with_intent(client, llm):
    llm.chat_reply = f"Please share your details.{COLLECT_INFO_MARKER}"

    resp = client.post(
        "/api/chat",
        json={
            "productContext": {"id": "p-3", "name": "Leather Chelsea Boots", "price": 4800, "stock": 8},
            "chatHistory": [{"role": "model", "parts": [{"text": "Hi!"}]}, {"role": "user", "text": "nice"}],
            "userMessage": "I want to order this",
        },
    )

    assert resp.status_code == 200
    assert resp.json() == {"reply": "Please share your details.", "intent": "COLLECT_INFO"}
    history = llm.chat_calls[0]["history"]
    assert [t.text for t in history] == ["Hi!", "nice"]


def test_chat_without_intent_omits_field(client, llm):
    llm.chat_reply = "Hello!"

    resp = client.post("/api/chat", json={"productContext": None, "chatHistory": [], "userMessage": "hi"})

    assert resp.json() == {"reply": "Hello!"}


def test_chat_requires_message(client):
    assert client.post("/api/chat", json={"chatHistory": []}).status_code == 400


def test_create_order_flow(client, orders):
    resp = client.post("/api/create-order", json={"productId": "p-1"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert orders.get(body["orderId"]).customer_details == {"source": "button"}


def test_create_order_errors(client):
    missing = client.post("/api/create-order", json={})
    assert missing.status_code == 400
    assert missing.json()["success"] is False

    unknown = client.post("/api/create-order", json={"productId": "nope"})
    assert unknown.status_code == 404


def test_create_order_duplicate_key(client, orders):
    first = client.post("/api/create-order", json={"productId": "p-1", "idempotencyKey": "k1"}).json()

    retry = client.post("/api/create-order", json={"productId": "p-1", "idempotencyKey": "k1"})

    assert retry.status_code == 409
    assert retry.json()["orderId"] == first["orderId"]
    assert len(orders.list_orders()) == 1


def test_session_routes(client, llm):
    session = client.post("/api/sessions")
    assert session.status_code == 201
    token = session.json()["token"]

    llm.keywords = "boots"
    state = client.post(f"/api/sessions/{token}/image", json={"imageBase64": IMAGE_B64}).json()
    assert state["activeProduct"]["id"] == "p-3"

    llm.chat_reply = f"Details please.{COLLECT_INFO_MARKER}"
    state = client.post(f"/api/sessions/{token}/messages", json={"text": "order"}).json()
    assert state["collectingCustomerInfo"] is True

    state = client.post(f"/api/sessions/{token}/messages", json={"text": "John, 1 Road, 555"}).json()
    assert state["orderPlaced"] is True
    assert state["history"][-1]["role"] == "system"

    assert client.get(f"/api/sessions/{token}").status_code == 200
    assert client.delete(f"/api/sessions/{token}").status_code == 204
    assert client.get(f"/api/sessions/{token}").status_code == 404


def test_products_and_orders(client):
    products = client.get("/api/products").json()
    assert [p["id"] for p in products] == ["p-3", "p-2", "p-1"]

    order_id = client.post("/api/create-order", json={"productId": "p-2"}).json()["orderId"]
    listed = client.get("/api/orders").json()
    assert listed[0]["id"] == order_id
    assert listed[0]["product"]["name"] == "White Pique Polo"
    assert listed[0]["status"] == "pending"

    updated = client.patch(f"/api/orders/{order_id}", json={"status": "shipped"})
    assert updated.json()["status"] == "shipped"
    assert client.patch(f"/api/orders/{order_id}", json={"status": "lost"}).status_code == 400
    assert client.patch("/api/orders/missing", json={"status": "shipped"}).status_code == 404


def test_webhook_verification(client, monkeypatch):
    monkeypatch.setattr(dependencies.settings, "META_VERIFY_TOKEN", "verify-me")

    ok = client.get(
        "/webhooks/meta",
        params={"hub.mode": "subscribe", "hub.verify_token": "verify-me", "hub.challenge": "42"},
    )
    assert ok.status_code == 200
    assert ok.text == "42"

    denied = client.get(
        "/webhooks/meta",
        params={"hub.mode": "subscribe", "hub.verify_token": "wrong", "hub.challenge": "42"},
    )
    assert denied.status_code == 403


def test_webhook_rejects_bad_body(client):
    resp = client.post("/webhooks/meta", content=b"{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
