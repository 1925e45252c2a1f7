"""
conftest.py — Shared pytest fixtures for BetGuard tests.
"""
import pytest
from fastapi.testclient import TestClient

from api import create_app
from services import BettingService
from stores import Backend


@pytest.fixture
def legit_bet():
    """A bet that triggers no fraud rule."""
    return {
        "matchId": "M1",
        "selection": "home",
        "odds": 2.5,
        "amount": 50,
    }


@pytest.fixture
def user_payload():
    return {
        "username": "punter01",
        "email": "punter01@example.com",
        "password": "s3cret-Pass1A!",
    }


@pytest.fixture
def backend():
    return Backend()


@pytest.fixture
def service(backend):
    return BettingService(backend)


@pytest.fixture
def client(service):
    """TestClient over a fresh app; state never leaks between tests."""
    return TestClient(create_app(service))


@pytest.fixture
def auth_headers(client, user_payload):
    """Register the default user and return bearer headers for it."""
    response = client.post("/auth/register", json=user_payload)
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['token']}"}
