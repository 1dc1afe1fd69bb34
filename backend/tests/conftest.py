"""
Pytest fixtures for stampcard backend tests.

Every test gets a fresh application, so sessions, ledgers, audit trails
and rate windows start empty.
"""

from datetime import datetime, timedelta, timezone

import pytest
from stampcard import create_app
from stampcard.extensions import get_services


# Demo directory password for every built-in user
DEMO_PASSWORD = "1234"


class ManualClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class ManualDateTimeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(scope='function')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'BCRYPT_ROUNDS': 4,  # bcrypt minimum; keeps the demo directory fast
        'DIRECTORY_FILE': None,
    })
    with app.app_context():
        yield app


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def services(app):
    return get_services()


def get_auth_token(client, store_id: str, username: str, password: str = DEMO_PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/auth/login', json={
        'storeId': store_id,
        'username': username,
        'password': password,
    })
    assert response.status_code == 200, response.get_json()
    return response.get_json()['token']


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def staff_s1_headers(client):
    return auth_headers(get_auth_token(client, 's1', 'staff1'))


@pytest.fixture(scope='function')
def manager_s1_headers(client):
    return auth_headers(get_auth_token(client, 's1', 'manager1'))


@pytest.fixture(scope='function')
def staff_s2_headers(client):
    return auth_headers(get_auth_token(client, 's2', 'staff1'))


@pytest.fixture(scope='function')
def manager_s2_headers(client):
    return auth_headers(get_auth_token(client, 's2', 'manager1'))
