from __future__ import annotations

import pytest

from fintrack.app import ClientApp
from fintrack.config import Config

from fakes import BASE_URL, COOKIE, FakeBackend


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def cfg(tmp_path) -> Config:
    return Config(
        API_BASE_URL=BASE_URL,
        AUTH_COOKIE_NAME=COOKIE,
        DEBUG=False,
        COOKIE_JAR_PATH=str(tmp_path / "cookies.txt"),
        CORS_ALLOW_ORIGINS="",
    )


@pytest.fixture
def client_app(cfg: Config, backend: FakeBackend) -> ClientApp:
    return ClientApp(cfg, session=backend.session())


@pytest.fixture
def logged_in(client_app: ClientApp, backend: FakeBackend) -> ClientApp:
    backend.add_user()
    client_app.auth.login(email="alice@example.com", password="secret123")
    return client_app
