from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import salonbook.wiring.dependencies as wiring
from salonbook.infrastructure.payments.mock_gateway import MockPaymentGateway
from salonbook.infrastructure.store.memory_store import MemoryDocumentStore
from salonbook.main import app

from conftest import seed_documents

CUSTOMER = {"Authorization": "Bearer cust_1"}
OWNER = {"Authorization": "Bearer owner_1"}

BOOKING = {
    "salon_id": "salon_1",
    "service_ids": ["svc_cut"],
    "staff_id": "staff_priya",
    "date": "2024-06-14",
    "time": "10:00",
}


@pytest.fixture
def api_gateway(monkeypatch) -> MockPaymentGateway:
    gateway = MockPaymentGateway()
    monkeypatch.setattr(wiring, "_document_store", MemoryDocumentStore(seed=seed_documents()))
    monkeypatch.setattr(wiring, "_payment_gateway", gateway)
    return gateway


@pytest.fixture
def client(api_gateway) -> TestClient:
    return TestClient(app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_session_requires_known_bearer(client):
    assert client.get("/api/v1/session").status_code == 401
    assert client.get("/api/v1/session", headers={"Authorization": "Bearer nobody"}).status_code == 401
    assert client.get("/api/v1/session", headers={"Authorization": "Bearer cust_off"}).status_code == 401

    body = client.get("/api/v1/session", headers=OWNER).json()
    assert body == {"user_id": "owner_1", "role": "salon_owner", "home_path": "/salon-dashboard"}


def test_quote_with_promo(client):
    resp = client.post("/api/v1/checkout/quote", json={"booking": BOOKING, "promo_code": "FIRST20"}, headers=CUSTOMER)

    assert resp.status_code == 200
    body = resp.json()
    assert body["promo_discount"] == "99.80"
    assert body["amount_to_pay"] == "399.20"
    assert body["promo_code"] == "FIRST20"


def test_invalid_promo_and_unknown_service_are_bad_requests(client):
    resp = client.post("/api/v1/checkout/quote", json={"booking": BOOKING, "promo_code": "BADCODE"}, headers=CUSTOMER)
    assert resp.status_code == 400

    booking = {**BOOKING, "service_ids": ["svc_missing"]}
    assert client.post("/api/v1/checkout/quote", json={"booking": booking}, headers=CUSTOMER).status_code == 400


def test_incompatible_staff_is_rejected(client):
    booking = {**BOOKING, "service_ids": ["svc_cut", "svc_mani"], "staff_id": "staff_rahul"}

    assert client.post("/api/v1/checkout", json={"booking": booking}, headers=CUSTOMER).status_code == 400


def test_gateway_checkout_then_confirm(client, api_gateway):
    resp = client.post("/api/v1/checkout", json={"booking": BOOKING, "promo_code": "FIRST20"}, headers=CUSTOMER)
    assert resp.status_code == 200
    body = resp.json()
    assert body["booking"] is None
    assert body["order"]["amount"] == 39920
    assert body["order"]["key"] == "rzp_test_mock"
    assert body["intent"]["status"] == "awaiting_payment"

    intent_id = body["intent"]["id"]
    order_id = body["order"]["order_id"]
    confirmation = {
        "razorpay_order_id": order_id,
        "razorpay_payment_id": "pay_api",
        "razorpay_signature": "forged",
    }
    assert client.post(f"/api/v1/checkout/{intent_id}/confirm", json=confirmation, headers=CUSTOMER).status_code == 400

    confirmation["razorpay_signature"] = api_gateway.sign(order_id, "pay_api")
    resp = client.post(f"/api/v1/checkout/{intent_id}/confirm", json=confirmation, headers=CUSTOMER)
    assert resp.status_code == 200
    assert resp.json()["status"] == "confirmed"
    assert resp.json()["payment"]["razorpayPaymentId"] == "pay_api"

    assert client.get(f"/api/v1/checkout/{intent_id}", headers=CUSTOMER).json()["status"] == "settled"
    assert client.get(f"/api/v1/checkout/{intent_id}", headers={"Authorization": "Bearer cust_2"}).status_code == 403


def test_wallet_only_checkout(client, api_gateway):
    booking = {**BOOKING, "service_ids": ["svc_mani"]}
    resp = client.post("/api/v1/checkout", json={"booking": booking, "use_wallet": True}, headers=CUSTOMER)

    body = resp.json()
    assert body["order"] is None
    assert body["booking"]["status"] == "confirmed"
    assert api_gateway.orders == {}
    assert client.get("/api/v1/wallet", headers=CUSTOMER).json()["balance"] == "200.00"


def test_owner_cannot_check_out(client):
    assert client.post("/api/v1/checkout", json={"booking": BOOKING}, headers=OWNER).status_code == 403


def test_booking_lifecycle_over_http(client):
    created = client.post("/api/v1/bookings/requests", json=BOOKING, headers=CUSTOMER).json()
    booking_id = created["id"]
    assert created["status"] == "pending"

    resp = client.post(f"/api/v1/bookings/{booking_id}/status", json={"status": "confirmed"}, headers=CUSTOMER)
    assert resp.status_code == 403

    resp = client.post(
        f"/api/v1/bookings/{booking_id}/status", json={"status": "confirmed", "expected_version": 1}, headers=OWNER
    )
    assert resp.status_code == 200
    assert resp.json()["version"] == 2

    resp = client.post(f"/api/v1/bookings/{booking_id}/status", json={"status": "pending"}, headers=CUSTOMER)
    assert resp.status_code == 409

    resp = client.post(
        f"/api/v1/bookings/{booking_id}/status", json={"status": "cancelled", "expected_version": 1}, headers=CUSTOMER
    )
    assert resp.status_code == 409

    listed = client.get("/api/v1/bookings", params={"status": "confirmed"}, headers=OWNER).json()
    assert [b["id"] for b in listed] == [booking_id]

    assert client.delete(f"/api/v1/bookings/{booking_id}", headers=OWNER).status_code == 403
    assert client.delete(f"/api/v1/bookings/{booking_id}", headers={"Authorization": "Bearer admin_1"}).status_code == 204
    assert client.get(f"/api/v1/bookings/{booking_id}", headers=CUSTOMER).status_code == 404


def test_walk_in(client):
    resp = client.post("/api/v1/bookings/walk-in", json={"booking": BOOKING, "customer_id": "cust_2"}, headers=OWNER)

    assert resp.status_code == 200
    assert resp.json()["status"] == "confirmed"


def test_wizard_actions(client):
    resp = client.post("/api/v1/wizard/advance", json={"salon_id": "salon_1"})
    assert resp.status_code == 400

    resp = client.post(
        "/api/v1/wizard/toggle_service", json={"salon_id": "salon_1", "service_id": "svc_cut"}
    )
    body = resp.json()
    assert body["can_advance"] is True
    assert body["summary"]["total_price"] == "499.00"
    assert set(body["compatible_staff_ids"]) == {"staff_priya", "staff_rahul"}

    state = client.post("/api/v1/wizard/advance", json={"salon_id": "salon_1", "state": body["state"]}).json()["state"]
    assert state["stage"] == 2

    state["service_ids"].append("svc_mani")
    resp = client.post(
        "/api/v1/wizard/select_staff", json={"salon_id": "salon_1", "state": state, "staff_id": "staff_rahul"}
    )
    assert resp.status_code == 400

    assert client.post("/api/v1/wizard/jump", json={"salon_id": "salon_1"}).status_code == 404


def test_availability_endpoint(client):
    client.post("/api/v1/bookings/requests", json=BOOKING, headers=CUSTOMER)

    slots = client.get(
        "/api/v1/salons/salon_1/availability",
        params={"date": "2024-06-14", "staff_id": "staff_priya", "duration": 30},
    ).json()
    by_time = {s["time"]: s["available"] for s in slots}
    assert by_time["10:00"] is False
    assert by_time["11:00"] is True


def test_payment_webhook_settles_order(client):
    body = client.post("/api/v1/checkout", json={"booking": BOOKING}, headers=CUSTOMER).json()
    event = {
        "event": "payment.captured",
        "payload": {"payment": {"entity": {"id": "pay_hook", "order_id": body["order"]["order_id"]}}},
    }

    assert client.post("/api/v1/payments/webhook", json=event).status_code == 200
    intent = client.get(f"/api/v1/checkout/{body['intent']['id']}", headers=CUSTOMER).json()
    assert intent["status"] == "settled"


def test_wallet_recharge(client, api_gateway):
    started = client.post("/api/v1/wallet/recharge", json={"amount": "250"}, headers=CUSTOMER).json()
    order_id = started["order"]["order_id"]
    assert started["order"]["amount"] == 25000

    resp = client.post(
        f"/api/v1/wallet/recharge/{started['recharge_id']}/confirm",
        json={"razorpay_payment_id": "pay_rc", "razorpay_signature": api_gateway.sign(order_id, "pay_rc")},
        headers=CUSTOMER,
    )
    assert resp.status_code == 200
    assert resp.json()["balance"] == "750.00"


def test_earnings_for_owner_only(client):
    assert client.get("/api/v1/earnings", headers=CUSTOMER).status_code == 403

    body = client.get("/api/v1/earnings", headers=OWNER).json()
    assert body["completed_bookings"] == 0
    assert client.post("/api/v1/earnings/payouts", json={"amount": "10"}, headers=OWNER).status_code == 409


def test_webhook_with_unexpected_shape_is_bad_request(client):
    assert client.post("/api/v1/payments/webhook", json=[{"event": "payment.captured"}]).status_code == 400
    assert client.post("/api/v1/payments/webhook", json={"event": 7, "payload": "x"}).status_code == 400
    nested = {"event": "payment.captured", "payload": {"payment": "pay_1"}}
    assert client.post("/api/v1/payments/webhook", json=nested).status_code == 400


def test_wizard_checkout_without_staff_is_bad_request(client):
    state = {"stage": 4, "service_ids": ["svc_cut"], "date": "2024-06-14", "time": "10:00"}

    resp = client.post("/api/v1/wizard/checkout", json={"salon_id": "salon_1", "state": state})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Select a staff member"

    state["staff_id"] = "staff_rahul"
    assert client.post("/api/v1/wizard/checkout", json={"salon_id": "salon_1", "state": state}).status_code == 200


def test_salon_search_endpoint(client):
    body = client.get("/api/v1/salons", params={"q": "glow", "services": ["Hair"], "sort_by": "price-low"}).json()

    assert [s["id"] for s in body] == ["salon_1"]
    assert body[0]["starting_price"] == "300.00"
    assert body[0]["categories"] == ["hair", "nails", "skin"]
    assert client.get("/api/v1/salons", params={"q": "nothing"}).json() == []
    assert client.get("/api/v1/salons", params={"price_range": "cheap"}).status_code == 400
    assert client.get("/api/v1/salons/salon_1").json()["name"] == "Glow Studio"
    assert client.get("/api/v1/salons/missing").status_code == 404


def test_admin_moderation_over_http(client):
    admin = {"Authorization": "Bearer admin_1"}

    assert client.get("/api/v1/admin/salons", headers=CUSTOMER).status_code == 403
    assert client.post("/api/v1/admin/users/cust_2/active", json={"is_active": False}, headers=OWNER).status_code == 403

    resp = client.post("/api/v1/admin/salons/salon_1/approval", json={"status": "pending"}, headers=admin)
    assert resp.status_code == 200
    assert resp.json()["approval_status"] == "pending"
    assert client.get("/api/v1/salons").json() == []
    assert client.post("/api/v1/admin/salons/salon_1/approval", json={"status": "open"}, headers=admin).status_code == 422

    resp = client.post("/api/v1/admin/users/cust_2/active", json={"is_active": False}, headers=admin)
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False
    assert client.get("/api/v1/session", headers={"Authorization": "Bearer cust_2"}).status_code == 401

    assert client.delete("/api/v1/admin/users/cust_2", headers=admin).status_code == 204
    assert client.delete("/api/v1/admin/users/cust_2", headers=admin).status_code == 404
    assert client.delete("/api/v1/admin/salons/salon_1", headers=admin).status_code == 204
