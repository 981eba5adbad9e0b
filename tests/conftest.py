"""Pytest fixtures for testing"""

import json
import pytest
import httpx
from datetime import datetime
from typing import Callable, Dict, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finquest.api.main import create_app
from finquest.api.dependencies import get_now, get_payment_client
from finquest.config import settings
from finquest.infrastructure.clients.payment_gateway import PaymentGatewayClient
from finquest.infrastructure.database.models import Base
from finquest.infrastructure.database.session import get_db

GATEWAY_SECRET = "test_gateway_secret"

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Fast bcrypt and a known gateway secret for signature checks"""
    monkeypatch.setattr(settings, "bcrypt_rounds", 4)
    monkeypatch.setattr(settings, "gateway_key_id", "rzp_test_key")
    monkeypatch.setattr(settings, "gateway_key_secret", GATEWAY_SECRET)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


class Clock:
    """Settable replacement for the get_now dependency"""

    def __init__(self):
        self.now = None

    def __call__(self) -> datetime:
        return self.now or datetime.now()


@pytest.fixture
def clock() -> Clock:
    return Clock()


class FakeGateway:
    """Records gateway requests and answers them like the real REST API"""

    def __init__(self):
        self.requests = []
        self.fail_with = None
        self.orders = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"error": {"description": "Gateway unavailable"}})

        body = json.loads(request.content) if request.content else {}
        path = request.url.path
        if request.method == "POST" and path.endswith("/orders"):
            self.orders += 1
            return httpx.Response(
                200,
                json={"id": f"order_test{self.orders}", "amount": body["amount"], "currency": body["currency"]},
            )
        if request.method == "POST" and path.endswith("/refund"):
            payment_id = path.split("/")[-2]
            return httpx.Response(200, json={"id": "rfnd_test1", "payment_id": payment_id, **body})
        if request.method == "GET" and "/payments/" in path:
            return httpx.Response(200, json={"id": path.split("/")[-1], "status": "captured"})
        return httpx.Response(404, json={"error": {"description": "Not found"}})

    def client(self) -> PaymentGatewayClient:
        return PaymentGatewayClient(
            base_url="https://gateway.test/v1",
            key_id="rzp_test_key",
            key_secret=GATEWAY_SECRET,
            timeout=1.0,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def client(db: Session, clock: Clock, gateway: FakeGateway) -> TestClient:
    """Create FastAPI test client with test database, clock and gateway"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = clock
    app.dependency_overrides[get_payment_client] = gateway.client
    return TestClient(app)


@pytest.fixture
def register(client: TestClient) -> Callable[..., Dict[str, str]]:
    """Register a user and return bearer auth headers"""

    def _register(mobile: str = "9876543210", email: str = "asha@example.com", password: str = "secret123"):
        response = client.post(
            "/api/auth/register",
            json={"name": "Asha", "mobile": mobile, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['data']['token']}"}

    return _register


@pytest.fixture
def auth_headers(register) -> Dict[str, str]:
    return register()
