from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from task_api.api.main import create_app
from task_api.config.settings import Settings
from task_api.storage.memory import InMemoryTaskStore


@pytest.fixture
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def client(store: InMemoryTaskStore) -> Iterator[TestClient]:
    app = create_app(
        storage=store,
        settings_override=Settings(storage_backend="memory", table_name="test-tasks-api"),
    )
    with TestClient(app) as test_client:
        yield test_client
