# File: tests/conftest.py

import pytest
from fastapi.testclient import TestClient

from agentrpg.core.config import Settings
from agentrpg.db.credential_store import CredentialStore
from agentrpg.main import create_application
from agentrpg.services.auth_service import CredentialService


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'agents.db'}"


@pytest.fixture
def store(database_url):
    store = CredentialStore.from_url(database_url, timeout=5.0)
    store.init_schema()
    yield store
    store.dispose()


@pytest.fixture
def service(store):
    return CredentialService(store)


@pytest.fixture
def degraded_service():
    return CredentialService(None)


@pytest.fixture
def client(store, database_url):
    app = create_application(Settings(database_url=database_url), store=store)
    return TestClient(app)


@pytest.fixture
def degraded_client():
    app = create_application(Settings(database_url=None))
    return TestClient(app)
