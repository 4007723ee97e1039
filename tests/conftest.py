"""
Pytest fixtures for the MediControl test suite.

Provides:
- ``app_settings``: settings pointing at a throwaway SQLite file
- ``storage``: a Storage over that file with the schema applied
- ``client``: a TestClient running the full application lifespan
- ``auth_headers``: bearer token for the built-in operator
- ``make_medication``: factory inserting catalog rows directly
"""

import pytest
from fastapi.testclient import TestClient

from medicontrol.core.config import PROJECT_ROOT, Settings
from medicontrol.database import Storage
from medicontrol.db.queries import QueryRegistry
from medicontrol.db.schema import ensure_schema
from medicontrol.main import create_app
from medicontrol.repositories import medications
from medicontrol.schemas.medication import MedicationCreate


@pytest.fixture
def app_settings(tmp_path):
    return Settings(
        _env_file=None,
        ENV="test",
        DATABASE_URL=f"sqlite:///{tmp_path / 'medicontrol.db'}",
        SQL_DIR=PROJECT_ROOT / "sql",
        SEED_FILE=tmp_path / "seed.json",
        SEED_ON_STARTUP=False,
        BACKFILL_PRICES_ON_STARTUP=False,
        RATE_LIMIT_ENABLED=False,
        BCRYPT_ROUNDS=4,
        SECRET_KEY="test-secret",
    )


@pytest.fixture
def storage(app_settings):
    queries = QueryRegistry.from_directory(app_settings.sql_dir)
    store = Storage(
        app_settings.DATABASE_URL,
        queries,
        busy_timeout=app_settings.DB_BUSY_TIMEOUT_SECONDS,
    )
    ensure_schema(store)
    yield store
    store.dispose()


@pytest.fixture
def client(app_settings):
    app = create_app(app_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client, app_settings):
    response = client.post(
        "/api/login",
        json={
            "username": app_settings.ADMIN_USERNAME,
            "password": app_settings.ADMIN_PASSWORD,
        },
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def make_medication(storage):
    def _make(name="Dipirona", quantity=10, price=5.0, **fields):
        data = MedicationCreate(name=name, quantity=quantity, price=price, **fields)
        with storage.transaction() as db:
            return medications.add(db, data)

    return _make
