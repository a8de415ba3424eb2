from typing import Generator

import pytest

from fake_services import FakeStore, create_app
from live_server import get_free_port, start_server
from storefront.client import ServiceClient
from storefront.main import app, get_api


@pytest.fixture(scope="session")
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture(scope="session")
def services_url(fake_store) -> Generator:
    server, thread, url = start_server(create_app(fake_store))
    yield url
    server.should_exit = True
    thread.join(timeout=5)


@pytest.fixture(scope="function")
def store(fake_store, services_url) -> FakeStore:
    fake_store.reset()
    return fake_store


@pytest.fixture(scope="function")
def api(store, services_url) -> Generator:
    api = ServiceClient(services_url, timeout=5)
    try:
        yield api
    finally:
        api.close()


@pytest.fixture(scope="function")
def offline_api() -> Generator:
    # Nothing listens on a freshly released port.
    api = ServiceClient(f"http://127.0.0.1:{get_free_port()}", timeout=2)
    try:
        yield api
    finally:
        api.close()


def _client_for(api_client):
    def override_get_api():
        yield api_client

    app.dependency_overrides[get_api] = override_get_api
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture(scope="function")
def client(api):
    with _client_for(api) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def offline_client(offline_api):
    with _client_for(offline_api) as c:
        yield c
    app.dependency_overrides.clear()
