"""Root conftest for all tests.

Every test gets its own in-memory SQLite store, so tests never share rows.
"""

import copy
from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from sweatsync.config.settings import Settings
from sweatsync.db.store import Store
from sweatsync.main import create_app
from sweatsync.users.account_repository import AccountRepository

SCENARIO_PLAN = {
    "name": "A",
    "schedule": {
        "monday": {
            "name": "Push",
            "exercises": [{"name": "Bench", "sets": 3, "type": "reps", "notes": ""}],
        }
    },
}


@pytest.fixture
def app_settings() -> Settings:
    """Settings pointing at an in-memory database and the bundled default plan."""
    return Settings(
        DATABASE_URL="sqlite:///:memory:",
        AUTH_SECRET_KEY="test-secret-key",
        LOG_LEVEL="WARNING",
        TIMEZONE="UTC",
    )


@pytest.fixture
def store(app_settings: Settings) -> Generator[Store, None, None]:
    """Open, schema-initialized store that is closed after the test."""
    handle = Store(app_settings.database_url).open()
    handle.create_all()
    try:
        yield handle
    finally:
        handle.close()


@pytest.fixture
def make_account(store: Store) -> Callable[[str], int]:
    """Create an account directly in the store and return its id."""

    def _make(username: str) -> int:
        with store.session("create_account") as session:
            account = AccountRepository.create(session, username, "not-a-real-hash")
            return account.id

    return _make


@pytest.fixture
def client(app_settings: Settings, store: Store) -> Generator[TestClient, None, None]:
    app = create_app(app_settings, store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client: TestClient) -> Callable[[str], dict[str, str]]:
    """Register an account through the API and return its auth headers."""

    def _register(username: str, password: str = "secret-password") -> dict[str, str]:
        response = client.post("/api/auth/register", json={"username": username, "password": password})
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _register


@pytest.fixture
def scenario_plan() -> dict:
    """Plan "A": Monday is "Push" with a single "Bench" exercise, every other day is free."""
    return copy.deepcopy(SCENARIO_PLAN)
