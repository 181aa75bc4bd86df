"""
Shared test fixtures — isolated in-memory stores, a controllable clock, test client, paid token.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from smeta.config import Settings, get_settings
from smeta.main import app
from smeta.stores import (
    InMemoryPaymentRegistry,
    InMemoryTokenStore,
    get_payment_registry,
    get_token_store,
)


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: datetime = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token_store(clock):
    store = InMemoryTokenStore(clock=clock)
    store.init()
    yield store
    store.clear()


@pytest.fixture
def registry():
    reg = InMemoryPaymentRegistry()
    reg.init()
    yield reg
    reg.clear()


@pytest.fixture
def settings():
    """Default settings, independent of any .env on the machine."""
    return Settings(_env_file=None)


@pytest.fixture
def use_settings():
    """Swap the app's settings for one test: use_settings(PAYMENT_CONFIRMATION_MODE="redirect")."""
    def _use(**overrides) -> Settings:
        custom = Settings(_env_file=None, **overrides)
        app.dependency_overrides[get_settings] = lambda: custom
        return custom
    return _use


@pytest.fixture
def client(token_store, registry, settings):
    """FastAPI test client wired to this test's stores and settings."""
    app.dependency_overrides[get_token_store] = lambda: token_store
    app.dependency_overrides[get_payment_registry] = lambda: registry
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def paid_token(client, registry):
    """Run the purchase flow for user 42 and return the issued token."""
    payment_id = registry.register("42")
    response = client.get("/api/payment-success", params={"userId": "42", "paymentId": payment_id})
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def auth_headers(paid_token):
    return {"Authorization": paid_token}
