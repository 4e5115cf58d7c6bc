import pytest
from fastapi.testclient import TestClient

from shared.app import app, registry
from providers.local.database import MemoryStore


@pytest.fixture(autouse=True)
def reset_registry():
    registry.reset()
    yield
    registry.reset()


@pytest.fixture
def memory_store():
    store = MemoryStore()
    registry.configure(store=store)
    return store


@pytest.fixture
def client(memory_store):
    return TestClient(app)
