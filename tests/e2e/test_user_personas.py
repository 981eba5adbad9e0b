"""
E2E tests for user personas against the mock payment gateway.

These tests require the mock gateway server to be running:
    GATEWAY_KEY_SECRET=mock_secret uvicorn mock.gateway_server.main:app --port 8001

User personas:
- saver: sets a goal, pays through the gateway, stays under the limit
- overspender: blows through a weekly goal and loses coins
- refunder: pays, then gets a full refund
- forger: replays one order's callback against another
- strategist: plays Debt Destroyer with both strategies
"""

import os
import httpx
import pytest
from datetime import datetime
from fastapi.testclient import TestClient
from finquest.api.dependencies import get_payment_client
from finquest.config import settings
from finquest.infrastructure.clients.payment_gateway import PaymentGatewayClient

MOCK_GATEWAY_URL = os.getenv("MOCK_GATEWAY_URL", "http://localhost:8001")
MOCK_SECRET = "mock_secret"


@pytest.fixture
def live_client(client: TestClient, monkeypatch) -> TestClient:
    """Test client wired to the running mock gateway instead of the in-process fake"""
    try:
        httpx.get(f"{MOCK_GATEWAY_URL}/health", timeout=1.0).raise_for_status()
    except httpx.HTTPError:
        pytest.skip(f"mock gateway not running at {MOCK_GATEWAY_URL}")

    monkeypatch.setattr(settings, "gateway_key_secret", MOCK_SECRET)
    client.app.dependency_overrides[get_payment_client] = lambda: PaymentGatewayClient(
        base_url=f"{MOCK_GATEWAY_URL}/v1",
        key_id="rzp_test_mock",
        key_secret=MOCK_SECRET,
        timeout=5.0,
    )
    return client


def pay(client: TestClient, headers, amount: float, category: str) -> dict:
    """Create an order, complete checkout at the gateway, verify the callback"""
    order = client.post(
        "/api/payments/orders",
        json={
            "amount": amount,
            "description": f"{category} purchase",
            "category": category,
            "merchant": "Persona Store",
            "payment_method": "upi",
        },
        headers=headers,
    )
    assert order.status_code == 201, order.text

    callback = httpx.post(f"{MOCK_GATEWAY_URL}/mock/checkout/{order.json()['data']['order_id']}").json()

    verified = client.post("/api/payments/verify", json=callback, headers=headers)
    assert verified.status_code == 200, verified.text
    return verified.json()["data"]


@pytest.mark.integration
def test_saver_achieves_goal(live_client: TestClient, auth_headers, clock):
    """
    saver: weekly limit 2000, spends 800 through the gateway
    Expected: goal achieved, +10 creation bonus and +20 reward
    """
    clock.now = datetime.now()
    live_client.post("/api/goals", json={"name": "Groceries", "weekly_limit": 2000}, headers=auth_headers)

    transaction = pay(live_client, auth_headers, 800, "food")
    assert transaction["status"] == "completed"

    synced = live_client.post("/api/goals/sync", headers=auth_headers).json()["data"]
    assert synced["goals"][0]["current_spending"] == 800

    end = datetime.fromisoformat(synced["goals"][0]["end_date"])
    clock.now = datetime.fromordinal(end.toordinal() + 1)

    settled = live_client.post("/api/goals/settle", headers=auth_headers).json()["data"]
    assert settled["coins"] == 30
    assert settled["settlements"][0]["action"] == "reward"


@pytest.mark.integration
def test_overspender_loses_coins(live_client: TestClient, auth_headers, clock):
    """
    overspender: weekly limit 1000, spends 1500
    Expected: goal failed, penalty 5 taken from the 10 creation bonus
    """
    clock.now = datetime.now()
    goal = live_client.post("/api/goals", json={"name": "Treats", "weekly_limit": 1000}, headers=auth_headers)
    end = datetime.fromisoformat(goal.json()["data"]["goal"]["end_date"])

    pay(live_client, auth_headers, 900, "entertainment")
    pay(live_client, auth_headers, 600, "shopping")
    live_client.post("/api/goals/sync", headers=auth_headers)

    clock.now = datetime.fromordinal(end.toordinal() + 1)
    settled = live_client.post("/api/goals/settle", headers=auth_headers).json()["data"]

    assert settled["settlements"][0]["goal"]["status"] == "failed"
    assert settled["coins"] == 5


@pytest.mark.integration
def test_refunder_gets_cancelled_transaction(live_client: TestClient, auth_headers):
    """
    refunder: pays 350 then requests a full refund
    Expected: gateway shows the payment refunded, transaction cancelled
    """
    transaction = pay(live_client, auth_headers, 350, "shopping")

    refund = live_client.post(f"/api/payments/{transaction['payment_id']}/refund", json={}, headers=auth_headers)
    assert refund.status_code == 200
    assert refund.json()["data"]["amount"] == 35000

    payment = live_client.get(f"/api/payments/{transaction['payment_id']}", headers=auth_headers).json()["data"]
    assert payment["status"] == "refunded"

    detail = live_client.get(f"/api/transactions/{transaction['id']}", headers=auth_headers).json()["data"]
    assert detail["status"] == "cancelled"


@pytest.mark.integration
def test_forged_callback_is_rejected(live_client: TestClient, auth_headers):
    """
    forger: replays a real payment id against a different order
    Expected: signature check fails and the order is marked failed
    """
    order_json = {"description": "Gadget", "category": "shopping", "merchant": "Mega", "payment_method": "card"}
    cheap = live_client.post("/api/payments/orders", json={"amount": 100, **order_json}, headers=auth_headers)
    pricey = live_client.post("/api/payments/orders", json={"amount": 5000, **order_json}, headers=auth_headers)
    callback = httpx.post(f"{MOCK_GATEWAY_URL}/mock/checkout/{cheap.json()['data']['order_id']}").json()

    forged = live_client.post(
        "/api/payments/verify",
        json={**callback, "order_id": pricey.json()["data"]["order_id"]},
        headers=auth_headers,
    )

    assert forged.status_code == 400
    detail = live_client.get(
        f"/api/transactions/{pricey.json()['data']['transaction_id']}", headers=auth_headers
    ).json()["data"]
    assert detail["status"] == "failed"


@pytest.mark.integration
def test_strategist_earns_both_rewards(live_client: TestClient, auth_headers):
    debts = [
        {"name": "Card", "amount": 3000, "interest_rate": 24, "min_payment": 90},
        {"name": "Loan", "amount": 800, "interest_rate": 8, "min_payment": 40},
    ]

    avalanche = live_client.post(
        "/api/games/debt-destroyer",
        json={"debts": debts, "extra_payment": 300, "strategy": "avalanche"},
        headers=auth_headers,
    ).json()["data"]
    snowball = live_client.post(
        "/api/games/debt-destroyer",
        json={"debts": debts, "extra_payment": 300, "strategy": "snowball"},
        headers=auth_headers,
    ).json()["data"]

    assert avalanche["payoff_order"] == ["Card", "Loan"]
    assert snowball["payoff_order"] == ["Loan", "Card"]
    assert avalanche["total_interest"] <= snowball["total_interest"]
    assert snowball["coins"] == 350
