from __future__ import annotations

from fastapi.testclient import TestClient

from hydrodash.core.errors import RaptError, RaptRateLimited
from tests.fakes import FakeRaptClient, wire_sample

PARAMS = {
    "hydrometerId": "hydro-1",
    "startDate": "2024-05-01T10:00:00.000Z",
    "endDate": "2024-05-02T10:00:00.000Z",
    "token": "relay-token",
}


def test_relays_upstream_body_verbatim(client: TestClient, fake_rapt: FakeRaptClient) -> None:
    body = [wire_sample(1030, 0), wire_sample(1200, 5)]
    fake_rapt.responses = [body]

    resp = client.get("/api/v1/telemetry/range", params=PARAMS)

    assert resp.status_code == 200, resp.text
    assert resp.json() == body
    assert fake_rapt.telemetry_calls == [
        {
            "token": "relay-token",
            "hydrometer_id": "hydro-1",
            "start_date": "2024-05-01T10:00:00.000Z",
            "end_date": "2024-05-02T10:00:00.000Z",
        }
    ]


def test_rate_limit_is_translated(client: TestClient, fake_rapt: FakeRaptClient) -> None:
    fake_rapt.responses = [RaptRateLimited("429")]
    resp = client.get("/api/v1/telemetry/range", params=PARAMS)
    assert resp.status_code == 429
    assert resp.json() == {"message": "API limit reached, try again in 5 minutes"}


def test_upstream_failure_is_structured(client: TestClient, fake_rapt: FakeRaptClient) -> None:
    fake_rapt.responses = [RaptError("Upstream responded with HTTP 502")]
    resp = client.get("/api/v1/telemetry/range", params=PARAMS)
    assert resp.status_code == 500
    assert resp.json() == {
        "kind": "upstream_failure",
        "detail": "Upstream responded with HTTP 502",
    }


def test_missing_parameter_is_rejected(client: TestClient) -> None:
    params = dict(PARAMS)
    params.pop("token")
    resp = client.get("/api/v1/telemetry/range", params=params)
    assert resp.status_code == 422


def test_meta_endpoints(client: TestClient) -> None:
    assert client.get("/").json() == {"name": "hydrodash", "status": "ok"}
    assert client.get("/api/v1/health").json() == {"status": "ok"}
