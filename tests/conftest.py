from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from hydrodash.api import deps
from hydrodash.core.config import Settings
from hydrodash.factory import create_app
from hydrodash.services.seed import SeedLoader, SeedStore
from tests.fakes import FakeRaptClient


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        env="test",
        debug=True,
        docs_enabled=False,
        secret_key="test_secret_key_must_be_32_chars_minimum",
        cors_origins=["http://localhost"],
        trusted_hosts=["testserver", "localhost"],
        rapt_auth_url="http://rapt.test/connect/token",
        rapt_api_url="http://rapt.test/api",
        rapt_username="brewer@example.com",
        rapt_portal_secret="portal-secret",
        rapt_timeout_seconds=1.0,
        seed_revalidate_seconds=3600,
        max_views=8,
    )


@pytest.fixture()
def fake_rapt() -> FakeRaptClient:
    return FakeRaptClient()


@pytest.fixture()
def client(settings: Settings, fake_rapt: FakeRaptClient) -> TestClient:
    app = create_app(settings)
    seed_store = SeedStore(
        loader=SeedLoader(
            client=fake_rapt,
            client_id=settings.rapt_client_id,
            username=settings.rapt_username,
            password=settings.rapt_portal_secret,
        ),
        revalidate_seconds=settings.seed_revalidate_seconds,
    )
    app.dependency_overrides[deps.get_rapt_client] = lambda: fake_rapt
    app.dependency_overrides[deps.get_seed_store] = lambda: seed_store
    with TestClient(app) as client:
        yield client
