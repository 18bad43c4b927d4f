from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from hydrodash.core.errors import RaptError, SeedLoadError
from hydrodash.models.telemetry import HydrometerSession
from hydrodash.services.seed import SeedLoader, SeedStore, normalize_start_date
from tests.fakes import FakeRaptClient


def _loader(fake: FakeRaptClient, password: str | None = "portal-secret") -> SeedLoader:
    return SeedLoader(
        client=fake, client_id="rapt-user", username="brewer@example.com", password=password
    )


def test_normalize_start_date_converts_to_utc_z() -> None:
    local = datetime(2024, 5, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))
    assert normalize_start_date(local) == "2024-05-01T08:00:00.000Z"


def test_load_chains_token_devices_and_telemetry() -> None:
    fake = FakeRaptClient()
    seed = _loader(fake).load()

    assert fake.token_calls == [
        {"client_id": "rapt-user", "username": "brewer@example.com", "password": "portal-secret"}
    ]
    assert seed.token == "fake-token"
    assert seed.hydrometer_id == "hydro-1"
    assert seed.start_date == "2024-05-01T08:00:00.000Z"
    assert [s.gravity for s in seed.series] == [1050, 1200, 1045]

    call = fake.telemetry_calls[0]
    assert call["hydrometer_id"] == "hydro-1"
    assert call["start_date"] == seed.start_date
    assert call["end_date"].endswith("Z")


def test_load_uses_first_device() -> None:
    fake = FakeRaptClient()
    fake.sessions.append(
        HydrometerSession(
            hydrometer_id="hydro-2", start_date=datetime(2024, 1, 1, tzinfo=timezone.utc)
        )
    )
    assert _loader(fake).load().hydrometer_id == "hydro-1"


def test_missing_secret_fails_without_calling_upstream() -> None:
    fake = FakeRaptClient()
    with pytest.raises(SeedLoadError):
        _loader(fake, password=None).load()
    assert fake.token_calls == []


@pytest.mark.parametrize(
    "breakage",
    ["token", "devices", "telemetry", "shape"],
)
def test_any_upstream_failure_aborts_load(breakage: str) -> None:
    fake = FakeRaptClient()
    if breakage == "token":
        fake.token_error = RaptError("Upstream responded with HTTP 400")
    elif breakage == "devices":
        fake.sessions = []
    elif breakage == "telemetry":
        fake.responses = [RaptError("Upstream responded with HTTP 502")]
    else:
        fake.seed_payload = {"unexpected": True}
    with pytest.raises(SeedLoadError):
        _loader(fake).load()


def test_store_caches_within_interval() -> None:
    fake = FakeRaptClient()
    store = SeedStore(loader=_loader(fake), revalidate_seconds=60)
    first = store.get()
    assert store.get() is first
    assert len(fake.token_calls) == 1

    later = datetime.now(tz=timezone.utc) + timedelta(seconds=61)
    assert store.get(now=later) is not first
    assert len(fake.token_calls) == 2


def test_store_failure_does_not_serve_stale_seed() -> None:
    fake = FakeRaptClient()
    store = SeedStore(loader=_loader(fake), revalidate_seconds=0)
    store.get()
    fake.token_error = RaptError("Upstream responded with HTTP 500")
    with pytest.raises(SeedLoadError):
        store.get()

    fake.token_error = None
    assert store.get().hydrometer_id == "hydro-1"


def test_device_with_null_start_date_aborts_load() -> None:
    import httpx

    from hydrodash.clients.rapt import RaptClient

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/connect/token"):
            return httpx.Response(200, json={"access_token": "tok"})
        return httpx.Response(
            200,
            json=[{"activeProfileSession": {"hydrometerId": "hydro-1", "startDate": None}}],
        )

    rapt = RaptClient(
        timeout_seconds=1.0,
        auth_url="http://rapt.test/connect/token",
        api_url="http://rapt.test/api",
        transport=httpx.MockTransport(handler),
    )
    loader = SeedLoader(client=rapt, client_id="rapt-user", username="u", password="pw")
    with pytest.raises(SeedLoadError):
        loader.load()
