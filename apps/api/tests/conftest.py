from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from tweet_index.config import get_settings
from tweet_index.main import app, get_run_registry


@pytest.fixture(autouse=True)
def reset_api_caches() -> Iterator[None]:
    get_settings.cache_clear()
    get_run_registry.cache_clear()
    yield
    get_settings.cache_clear()
    get_run_registry.cache_clear()


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
