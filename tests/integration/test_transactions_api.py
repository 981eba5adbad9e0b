"""Integration tests for recorded transactions, analytics and money management"""

from fastapi.testclient import TestClient


def record(client: TestClient, headers, amount: float, category: str = "food", **extra):
    response = client.post(
        "/api/transactions",
        json={"amount": amount, "description": f"{category} spend", "category": category, **extra},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_create_transaction(client: TestClient, auth_headers):
    data = record(client, auth_headers, 250.0, merchant="Cafe", payment_method="cash")

    assert data["status"] == "completed"
    assert data["currency"] == "INR"
    assert data["merchant"] == "Cafe"
    assert data["order_id"] is None


def test_create_transaction_requires_auth(client: TestClient):
    response = client.post("/api/transactions", json={"amount": 1, "description": "x", "category": "food"})
    assert response.status_code == 401


def test_create_transaction_rejects_unknown_category(client: TestClient, auth_headers):
    response = client.post(
        "/api/transactions",
        json={"amount": 10, "description": "Chips", "category": "gambling"},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["errors"].startswith("category: ")


def test_get_transaction(client: TestClient, auth_headers):
    created = record(client, auth_headers, 99.0)

    response = client.get(f"/api/transactions/{created['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["id"] == created["id"]


def test_get_transaction_invalid_and_missing(client: TestClient, auth_headers):
    assert client.get("/api/transactions/not-a-uuid", headers=auth_headers).status_code == 400

    fake_uuid = "00000000-0000-0000-0000-000000000000"
    response = client.get(f"/api/transactions/{fake_uuid}", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "Transaction not found"


def test_other_users_transaction_is_hidden(client: TestClient, register):
    owner = register()
    other = register(mobile="9000000000", email="other@example.com")
    created = record(client, owner, 50.0)

    assert client.get(f"/api/transactions/{created['id']}", headers=other).status_code == 404


def test_list_transactions_pagination_and_filters(client: TestClient, auth_headers):
    record(client, auth_headers, 100.0, "food")
    record(client, auth_headers, 200.0, "transport")
    record(client, auth_headers, 300.0, "food")

    page_one = client.get("/api/transactions?limit=2", headers=auth_headers).json()["data"]
    assert len(page_one["transactions"]) == 2
    assert page_one["pagination"] == {"current": 1, "pages": 2, "total": 3, "has_next": True, "has_prev": False}

    page_two = client.get("/api/transactions?limit=2&page=2", headers=auth_headers).json()["data"]
    assert len(page_two["transactions"]) == 1
    assert page_two["pagination"]["has_prev"] is True

    food = client.get("/api/transactions?category=food", headers=auth_headers).json()["data"]
    assert food["pagination"]["total"] == 2
    assert {t["category"] for t in food["transactions"]} == {"food"}


def test_list_transactions_limit_bounds(client: TestClient, auth_headers):
    response = client.get("/api/transactions?limit=500", headers=auth_headers)
    assert response.status_code == 400
    assert "limit:" in response.json()["errors"]


def test_analytics_breakdown(client: TestClient, auth_headers):
    record(client, auth_headers, 300.0, "food")
    record(client, auth_headers, 500.0, "food")
    record(client, auth_headers, 200.0, "bills")

    response = client.get("/api/transactions/analytics?period=month", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["period"] == "month"
    assert data["total_spent"] == 1000
    assert data["transaction_count"] == 3
    assert data["category_breakdown"][0] == {
        "category": "food",
        "amount": 800,
        "count": 2,
        "average": 400,
        "percentage": 80,
    }


def test_analytics_invalid_period(client: TestClient, auth_headers):
    assert client.get("/api/transactions/analytics?period=decade", headers=auth_headers).status_code == 400


def test_money_management(client: TestClient, auth_headers):
    """Test income estimate, level-scaled limits and spend totals"""
    record(client, auth_headers, 1200.0, "food")

    response = client.get("/api/financial/money-management", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["monthly_income"] == 30000
    assert data["total_spent"] == 1200
    assert data["remaining_money"] == 28800
    assert data["spending_percentage"] == 4
    assert data["transaction_count"] == 1
    assert data["last_transaction"] is not None
    food = next(c for c in data["categories"] if c["name"] == "food")
    assert food == {"name": "food", "spent": 1200, "limit": 12000}


def test_money_management_income_grows_with_coins_and_level(client: TestClient, auth_headers):
    client.post("/api/users/complete-quiz", json={"coins": 100, "level": "Expert"}, headers=auth_headers)

    data = client.get("/api/financial/money-management", headers=auth_headers).json()["data"]

    # (30000 + 100 * 50) * 2.0
    assert data["monthly_income"] == 70000
    assert data["last_transaction"] is None
